"""Unit tests for streak bookkeeping."""
from core.streaks import on_completed_through_cron, on_missed_through_cron


def test_completion_adds_one_without_cap(make_task):
    assert on_completed_through_cron(make_task("daily", streak=0)) == 1
    assert on_completed_through_cron(make_task("daily", streak=999)) == 1000


def test_miss_resets(make_task):
    assert on_missed_through_cron(make_task("daily", streak=12)) == 0


def test_freeze_preserves(make_task):
    assert on_missed_through_cron(make_task("daily", streak=12), freeze=True) == 12
