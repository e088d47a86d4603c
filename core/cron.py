"""
Cron rollover: advance one user's tasks and stats from `last_cron` to `now`.

Closed days are the user's local calendar days from the day of `last_cron`
up to (not including) the day of `now`. Every boundary uses the user's
*current* timezone offset and day start, even if they changed during the gap.

Damage from all missed dailies on all closed days is summed and applied to
the user once, with a single clamp at the end. A task whose recurrence config
is malformed is skipped and reported in the diagnostics; the rest of the
rollover proceeds.
"""
import logging
from datetime import date, datetime, timedelta
from typing import List, NamedTuple, Optional, Sequence, Tuple

from core.content import ContentCatalog
from core.errors import UnresolvableRecurrence, ValidationError
from core.i18n import translate
from core.recurrence import first_occurrence, matches_pattern, start_day, validate_recurrence
from core.scoring import apply_stat_changes, decay_value, score
from core.streaks import on_completed_through_cron, on_missed_through_cron
from core.time_utils import day_start_at, local_day
from models.task import HistoryEntry, Task
from models.user import User

logger = logging.getLogger(__name__)


class MissedOccurrence(NamedTuple):
    task_id: str
    day: date
    health: float


class CronDiagnostic(NamedTuple):
    task_id: str
    error: str
    message: str


class CronResult(NamedTuple):
    user: User
    tasks: List[Task]
    diagnostics: List[CronDiagnostic]
    health_delta: float
    missed: List[MissedOccurrence]


def closed_days(last_cron: datetime, now: datetime, timezone_offset: int = 0, day_start: int = 0) -> List[date]:
    first = local_day(last_cron, timezone_offset, day_start)
    today = local_day(now, timezone_offset, day_start)
    return [first + timedelta(days=i) for i in range((today - first).days)]


def _period_crossed(frequency: str, boundaries: Sequence[date]) -> bool:
    if frequency == "weekly":
        return any(day.weekday() == 0 for day in boundaries)
    if frequency == "monthly":
        return any(day.day == 1 for day in boundaries)
    if frequency == "yearly":
        return any(day.month == 1 and day.day == 1 for day in boundaries)
    return bool(boundaries)


def _roll_daily(
    task: Task,
    days: Sequence[date],
    today: date,
    user: User,
    catalog: Optional[ContentCatalog],
) -> Tuple[Task, float, List[MissedOccurrence]]:
    prefs = user.preferences
    validate_recurrence(task)
    # Raises UnresolvableRecurrence before anything is touched
    first_occurrence(task, today, prefs)

    anchor = start_day(task, prefs)
    freeze = prefs.sleep
    rolled = task.model_copy(deep=True)
    health = 0.0
    missed = []

    for index, day in enumerate(days):
        # Only the day of the last cron can carry a completion
        completed = rolled.completed if index == 0 else False
        if matches_pattern(rolled, day, anchor):
            if completed:
                rolled.streak = on_completed_through_cron(rolled)
            else:
                damage = 0.0
                if not freeze:
                    delta = score(rolled, "down", user.stats, catalog=catalog, cron=True)
                    damage = delta.health
                    rolled.value = delta.new_value
                    rolled.history.append(HistoryEntry(
                        date=day_start_at(day + timedelta(days=1), prefs.timezone_offset, prefs.day_start),
                        value=rolled.value,
                        scored_down=1,
                    ))
                rolled.streak = on_missed_through_cron(rolled, freeze=freeze)
                health += damage
                missed.append(MissedOccurrence(rolled.id, day, damage))
        if index == 0:
            for item in rolled.checklist:
                item.completed = False

    rolled.yester_daily = matches_pattern(rolled, days[-1], anchor)
    rolled.completed = False
    return rolled, health, missed


def _roll_task(task, days, today, user, catalog):
    if task.type == "daily":
        return _roll_daily(task, days, today, user, catalog)

    rolled = task.model_copy(deep=True)
    if task.type == "todo" and not task.completed:
        rolled.value = decay_value(task, times=len(days))
    elif task.type == "habit":
        boundaries = [day + timedelta(days=1) for day in days]
        if _period_crossed(task.frequency, boundaries):
            rolled.counter_up = 0
            rolled.counter_down = 0
    return rolled, 0.0, []


def run_cron(
    user: User,
    tasks: Sequence[Task],
    now: datetime,
    catalog: Optional[ContentCatalog] = None,
) -> CronResult:
    """
    Roll the user forward to `now`.

    Returns new user/task objects; the inputs are not modified. If `now` is on
    the same local day as `last_cron` (or earlier) nothing changes, so calling
    this twice with the same `now` is a no-op the second time.
    """
    prefs = user.preferences
    days = closed_days(user.last_cron, now, prefs.timezone_offset, prefs.day_start)
    if not days:
        return CronResult(user.model_copy(deep=True), [t.model_copy(deep=True) for t in tasks], [], 0.0, [])

    today = local_day(now, prefs.timezone_offset, prefs.day_start)
    new_tasks = []
    diagnostics = []
    missed = []
    health = 0.0

    for task in tasks:
        try:
            rolled, task_health, task_missed = _roll_task(task, days, today, user, catalog)
        except (ValidationError, UnresolvableRecurrence) as exc:
            logger.warning("Skipping task %s during cron for user %s: %s", task.id, user.id, exc)
            diagnostics.append(CronDiagnostic(task.id, exc.key, translate(exc.key, exc.params)))
            new_tasks.append(task.model_copy(deep=True))
            continue
        new_tasks.append(rolled)
        health += task_health
        missed.extend(task_missed)

    new_user = user.model_copy(deep=True)
    new_user.stats = apply_stat_changes(user.stats, health=health)
    new_user.last_cron = now

    logger.info(
        "Cron for user %s: %d day(s) closed, %d miss(es), hp %.2f, %d task(s) skipped",
        user.id, len(days), len(missed), health, len(diagnostics),
    )
    return CronResult(new_user, new_tasks, diagnostics, health, missed)
