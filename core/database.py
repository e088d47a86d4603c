from core.repository import InMemoryRepository

# Process-wide default store; deployments inject their own repository through
# the `get_db` dependency.
db = InMemoryRepository()

def get_db():
    return db
