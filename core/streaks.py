"""Streak bookkeeping for dailies, applied only at cron rollover."""
from models.task import Task


def on_completed_through_cron(task: Task) -> int:
    """A due daily went through a rollover completed: streak grows by one (uncapped)."""
    return task.streak + 1


def on_missed_through_cron(task: Task, freeze: bool = False) -> int:
    """
    A due daily went through a rollover incomplete.

    The streak resets to 0 unless `freeze` is set (the user is resting in the
    inn, or another vacation policy applies), in which case it is preserved.
    """
    if freeze:
        return task.streak
    return 0
