"""Unit tests for the periodic cron sweep."""
import asyncio
from datetime import timedelta

from core.repository import InMemoryRepository
from core.scheduler import run_daily_maintenance
from core.time_utils import FixedClock
from models.user import User


class FlakyRepository(InMemoryRepository):
    def __init__(self, broken_id):
        super().__init__()
        self.broken_id = broken_id

    async def load(self, user_id):
        if user_id == self.broken_id:
            raise RuntimeError("storage unavailable")
        return await super().load(user_id)


def test_sweep_rolls_over_users_past_their_day(make_task, monday):
    repo = InMemoryRepository()
    stale = User(last_cron=monday)
    fresh = User(last_cron=monday + timedelta(days=2))
    task = make_task("daily")
    repo.add(stale, [task])
    repo.add(fresh)

    rolled = asyncio.run(run_daily_maintenance(repo, FixedClock(monday + timedelta(days=2, hours=1))))

    assert rolled == 1
    assert repo.users[stale.id].last_cron == monday + timedelta(days=2, hours=1)
    assert repo.users[stale.id].stats.hp < stale.stats.hp
    assert repo.tasks[stale.id][task.id].value < 0
    assert repo.users[fresh.id] == fresh


def test_one_failing_user_does_not_stop_sweep(monday):
    broken = User(last_cron=monday)
    healthy = User(last_cron=monday)
    repo = FlakyRepository(broken.id)
    repo.add(broken)
    repo.add(healthy)

    rolled = asyncio.run(run_daily_maintenance(repo, FixedClock(monday + timedelta(days=1))))

    assert rolled == 1
    assert repo.users[healthy.id].last_cron == monday + timedelta(days=1)
    assert repo.users[broken.id].last_cron == monday
