"""Storage seam for user/task aggregates.

Persistence lives outside the engine; anything implementing `UserTaskRepository`
can back the scheduler and the HTTP routes. `InMemoryRepository` is used in tests
and for local runs.
"""
from typing import Dict, List, Protocol, Sequence, Tuple

from core.errors import NotFound
from models.task import Task
from models.user import User


class UserTaskRepository(Protocol):
    async def list_user_ids(self) -> List[str]: ...

    async def load(self, user_id: str) -> Tuple[User, List[Task]]: ...

    async def save(self, user: User, tasks: Sequence[Task]) -> None: ...


class InMemoryRepository:
    def __init__(self):
        self.users: Dict[str, User] = {}
        self.tasks: Dict[str, Dict[str, Task]] = {}

    def add(self, user: User, tasks: Sequence[Task] = ()) -> None:
        self.users[user.id] = user
        self.tasks[user.id] = {task.id: task for task in tasks}

    async def list_user_ids(self) -> List[str]:
        return list(self.users)

    async def load(self, user_id: str) -> Tuple[User, List[Task]]:
        if user_id not in self.users:
            raise NotFound("userNotFound")
        return self.users[user_id], list(self.tasks[user_id].values())

    async def save(self, user: User, tasks: Sequence[Task]) -> None:
        self.users[user.id] = user
        stored = self.tasks.setdefault(user.id, {})
        for task in tasks:
            stored[task.id] = task
