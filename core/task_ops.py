"""Task creation, update and deletion rules that keep a task valid for the engine."""
from datetime import datetime
from typing import Any, Dict, NamedTuple, Optional

from core.content import ContentCatalog, default_catalog
from core.errors import PreconditionViolation, ValidationError
from core.recurrence import check_every_x, first_occurrence, validate_recurrence
from core.time_utils import day_start_at, get_current_time, local_day
from models.task import TASK_CAPABILITIES, TASK_TYPES, ChecklistItem, Task
from models.user import User

# Owned by the engine: identity, the append-only history and cron-driven state.
PROTECTED_FIELDS = ("id", "user_id", "created_at", "history", "streak")


class CreatedTask(NamedTuple):
    task: Task
    user: User


def _writable(fields: Dict[str, Any], task_type: str) -> Dict[str, Any]:
    """Drop the fields a caller may not set; `value` is only settable as a reward's price."""
    writable = {key: val for key, val in fields.items() if key not in PROTECTED_FIELDS}
    if task_type != "reward":
        writable.pop("value", None)
    if "every_x" in writable:
        # Checked on the raw input so a float like 2.5 is reported, not coerced
        check_every_x(writable["every_x"])
    return writable


def _check_task(task: Task, now: datetime, user: User) -> None:
    if task.checklist and not task.capabilities.has_checklist:
        raise PreconditionViolation("checklistOnlyDailyTodo")
    if task.type == "reward" and task.value < 0:
        raise ValidationError("rewardValueNegative", value=task.value)
    if task.capabilities.has_recurrence:
        validate_recurrence(task)
        # A pattern that never fires is rejected outright
        first_occurrence(task, now, user.preferences)


def create_task(
    user: User,
    task_type: str,
    fields: Dict[str, Any],
    now: Optional[datetime] = None,
    catalog: Optional[ContentCatalog] = None,
) -> CreatedTask:
    """
    Build a new task from catalog defaults plus `fields` and register it with the user.

    The id goes to the front of the user's order list for that type.
    """
    if task_type not in TASK_TYPES:
        raise ValidationError("invalidTaskType", type=task_type)
    fields = _writable(fields, task_type)
    catalog = catalog or default_catalog
    now = now or get_current_time()
    prefs = user.preferences

    data = catalog.get_task_type_defaults(task_type)
    data.update(fields)
    data.update({"type": task_type, "user_id": user.id, "created_at": now})
    if data.get("checklist"):
        data["checklist"] = [ChecklistItem(text=item.get("text", ""), completed=item.get("completed", False))
                             if isinstance(item, dict) else item for item in data["checklist"]]
    if TASK_CAPABILITIES[task_type].has_recurrence and not data.get("start_date"):
        data["start_date"] = day_start_at(local_day(now, prefs.timezone_offset, prefs.day_start), prefs.timezone_offset)

    task = Task(**data)
    _check_task(task, now, user)

    new_user = user.model_copy(deep=True)
    new_user.tasks_order.for_type(task_type).insert(0, task.id)
    return CreatedTask(task, new_user)


def update_task(task: Task, changes: Dict[str, Any], user: User, now: Optional[datetime] = None) -> Task:
    """
    Apply `changes` to a copy of the task, re-validating the result.

    `type` cannot change; engine-owned fields in `changes` are ignored.
    """
    if "type" in changes and changes["type"] != task.type:
        raise PreconditionViolation("taskTypeImmutable")
    changes = _writable(changes, task.type)
    updated = Task(**{**task.model_dump(), **changes})
    _check_task(updated, now or get_current_time(), user)
    return updated


def delete_task(user: User, task: Task) -> User:
    """Drop the task id from the owner's order list; storage deletion is the caller's."""
    new_user = user.model_copy(deep=True)
    order = new_user.tasks_order.for_type(task.type)
    if task.id in order:
        order.remove(task.id)
    return new_user


def score_checklist_item(task: Task, item_id: str) -> Task:
    """Toggle one checklist item. No stats change until the task itself is scored."""
    for index, item in enumerate(task.checklist):
        if item.id == item_id:
            updated = task.model_copy(deep=True)
            updated.checklist[index].completed = not item.completed
            return updated
    raise PreconditionViolation("checklistItemNotFound", itemId=item_id)
