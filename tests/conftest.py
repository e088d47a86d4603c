"""Shared fixtures: task/user factories pinned to a fixed Monday."""
from datetime import datetime, timezone

import pytest

from models.task import Task
from models.user import User

# 2024-01-01 is a Monday
MONDAY_NOON = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
LONG_AGO = datetime(2023, 12, 1, tzinfo=timezone.utc)


@pytest.fixture
def monday():
    return MONDAY_NOON


@pytest.fixture
def make_task():
    def _make(task_type: str = "daily", **fields) -> Task:
        fields.setdefault("title", f"{task_type} task")
        if task_type == "daily":
            fields.setdefault("start_date", LONG_AGO)
        return Task(type=task_type, **fields)
    return _make


@pytest.fixture
def user():
    return User(username="tester", last_cron=MONDAY_NOON)
