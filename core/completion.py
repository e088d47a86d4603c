import logging
from datetime import datetime
from typing import NamedTuple, Optional

from core.content import ContentCatalog
from core.errors import PreconditionViolation, ValidationError
from core.recurrence import validate_recurrence
from core.scoring import DIRECTIONS, ScoreDelta, apply_stat_changes, score, zero_delta
from core.time_utils import get_current_time
from models.task import HistoryEntry, Task
from models.user import User

logger = logging.getLogger(__name__)


class CompletionResult(NamedTuple):
    task: Task
    user: User
    delta: ScoreDelta


def complete(
    task: Task,
    direction: str,
    user: User,
    now: Optional[datetime] = None,
    catalog: Optional[ContentCatalog] = None,
) -> CompletionResult:
    """
    Score a task for a user (the "toggle" action).

    Logic:
    - Habit: every call scores in an enabled direction; counters and history
      grow each time.
    - Daily/Todo: up marks complete, down unmarks. Repeating the current state
      is a no-op with a zero delta, so a task is never scored twice.
    - Reward: up buys it for `value` gold; refused if the user can't afford it.

    Inputs are left untouched; the updated copies are returned with the delta.
    """
    if direction not in DIRECTIONS:
        raise ValidationError("invalidDirection", direction=direction)
    if task.capabilities.has_recurrence:
        validate_recurrence(task)
    if task.type == "habit" and not getattr(task, direction):
        raise PreconditionViolation("habitDirectionDisabled", direction=direction)
    now = now or get_current_time()

    if task.capabilities.has_completed and task.completed == (direction == "up"):
        logger.debug("Task %s already %s, nothing to score", task.id, "completed" if task.completed else "open")
        return CompletionResult(task.model_copy(deep=True), user.model_copy(deep=True), zero_delta(task.value))

    if task.type == "reward" and user.stats.gp < task.value:
        raise PreconditionViolation("messageNotEnoughGold")

    delta = score(task, direction, user.stats, catalog=catalog)

    new_task = task.model_copy(deep=True)
    new_task.value = delta.new_value
    if task.type == "habit":
        if direction == "up":
            new_task.counter_up += 1
        else:
            new_task.counter_down += 1
    if task.capabilities.has_completed:
        new_task.completed = direction == "up"
    if task.type != "reward":
        new_task.history.append(HistoryEntry(
            date=now,
            value=delta.new_value,
            scored_up=1 if direction == "up" else 0,
            scored_down=1 if direction == "down" else 0,
        ))

    new_user = user.model_copy(deep=True)
    new_user.stats = apply_stat_changes(
        user.stats, exp=delta.exp, gold=delta.gold, health=delta.health, mana=delta.mana
    )

    logger.debug(
        "Scored %s %s for user %s: exp=%.2f gold=%.2f hp=%.2f value=%.2f",
        task.type, direction, user.id, delta.exp, delta.gold, delta.health, delta.new_value,
    )
    return CompletionResult(new_task, new_user, delta)
