"""
Due-date computation for recurring tasks.

All functions are pure: the reference instant is always passed in, and the
user's timezone offset / day start come from their `Preferences`.

Supported patterns (`task.frequency`):
- daily: every `every_x` days counted from the start day.
- weekly: on the weekdays enabled in `repeat`, every `every_x` weeks.
- monthly: on `days_of_month` (clamped to the month's last day), or on the
  Nth weekday given by `weeks_of_month` + `repeat`, every `every_x` months.
- yearly: on the start day's month/day, every `every_x` years.
"""
from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Union

from core.config import settings
from core.errors import UnresolvableRecurrence, ValidationError
from core.time_utils import local_day
from models.task import FREQUENCIES, WEEKDAY_KEYS, Task
from models.user import Preferences

DateLike = Union[date, datetime]

# Days covered by one full cycle of each frequency, per unit of every_x.
CYCLE_DAYS = {"daily": 1, "weekly": 7, "monthly": 31, "yearly": 366}


def check_every_x(every_x) -> None:
    """Raise ValidationError unless `every_x` is a plain int in [1, EVERY_X_MAX]."""
    if isinstance(every_x, bool) or not isinstance(every_x, int) or not 1 <= every_x <= settings.EVERY_X_MAX:
        raise ValidationError("everyXInvalid", everyX=every_x, max=settings.EVERY_X_MAX)


def validate_recurrence(task: Task) -> None:
    """Raise ValidationError if the recurrence config cannot be evaluated."""
    if task.frequency not in FREQUENCIES:
        raise ValidationError("invalidFrequency", frequency=task.frequency)
    check_every_x(task.every_x)
    if any(not 1 <= d <= 31 for d in task.days_of_month):
        raise ValidationError("invalidDaysOfMonth")
    if any(not -5 <= w <= 4 for w in task.weeks_of_month):
        raise ValidationError("invalidWeeksOfMonth")


def start_day(task: Task, prefs: Optional[Preferences] = None) -> date:
    """Local calendar day the recurrence is anchored to."""
    prefs = prefs or Preferences()
    anchor = task.start_date or task.created_at
    # start dates are stored as local midnight, so day_start does not apply
    return local_day(anchor, prefs.timezone_offset)


def _weekday_enabled(task: Task, day: date) -> bool:
    return bool(task.repeat.get(WEEKDAY_KEYS[day.weekday()], False))

def _matches_day_of_month(day: date, days_of_month) -> bool:
    last = monthrange(day.year, day.month)[1]
    return day.day in {min(d, last) for d in days_of_month}

def _matches_week_of_month(day: date, weeks_of_month) -> bool:
    last = monthrange(day.year, day.month)[1]
    from_start = (day.day - 1) // 7
    from_end = -((last - day.day) // 7) - 1
    return from_start in weeks_of_month or from_end in weeks_of_month


def matches_pattern(task: Task, day: date, anchor: date) -> bool:
    """True if `day` is an occurrence of the task's pattern (ignores completion)."""
    if day < anchor:
        return False
    every_x = task.every_x

    if task.frequency == "daily":
        return (day - anchor).days % every_x == 0

    if task.frequency == "weekly":
        if not _weekday_enabled(task, day):
            return False
        week = day - timedelta(days=day.weekday())
        anchor_week = anchor - timedelta(days=anchor.weekday())
        return ((week - anchor_week).days // 7) % every_x == 0

    if task.frequency == "monthly":
        months = (day.year - anchor.year) * 12 + day.month - anchor.month
        if months % every_x:
            return False
        if task.days_of_month:
            return _matches_day_of_month(day, task.days_of_month)
        if task.weeks_of_month:
            return _weekday_enabled(task, day) and _matches_week_of_month(day, task.weeks_of_month)
        return _matches_day_of_month(day, [anchor.day])

    # yearly
    if (day.year - anchor.year) % every_x or day.month != anchor.month:
        return False
    return _matches_day_of_month(day, [anchor.day])


def should_do(task: Task, day: DateLike, prefs: Optional[Preferences] = None) -> bool:
    """Whether the task is scheduled on the given local calendar day."""
    if not task.capabilities.has_recurrence:
        return False
    validate_recurrence(task)
    prefs = prefs or Preferences()
    if isinstance(day, datetime):
        day = local_day(day, prefs.timezone_offset, prefs.day_start)
    return matches_pattern(task, day, start_day(task, prefs))


def is_due(task: Task, now: datetime, prefs: Optional[Preferences] = None) -> bool:
    """
    Whether the task still requires action on the user's current day.

    Dailies are due when scheduled today and not yet completed; todos are due
    until completed; habits and rewards are never due.
    """
    if task.type == "todo":
        return not task.completed
    if task.completed:
        return False
    return should_do(task, now, prefs)


def scan_horizon(task: Task) -> int:
    cycles = task.every_x + 1
    return max(settings.RECURRENCE_SCAN_HORIZON_DAYS, CYCLE_DAYS.get(task.frequency, 1) * cycles)


def _next_candidate(task: Task, day: date, anchor: date) -> date:
    """
    Earliest day on or after `day` that lies in a period the pattern can fire in.

    Days, weeks, months or years ruled out by `every_x` are skipped whole.
    Raises ValueError/OverflowError past the last representable date.
    """
    every_x = task.every_x

    if task.frequency == "daily":
        return day + timedelta(days=-(day - anchor).days % every_x)

    if task.frequency == "weekly":
        week = day - timedelta(days=day.weekday())
        anchor_week = anchor - timedelta(days=anchor.weekday())
        skip = -((week - anchor_week).days // 7) % every_x
        return week + timedelta(weeks=skip) if skip else day

    if task.frequency == "monthly":
        skip = -((day.year - anchor.year) * 12 + day.month - anchor.month) % every_x
        if not skip:
            return day
        index = day.year * 12 + day.month - 1 + skip
        return date(index // 12, index % 12 + 1, 1)

    # yearly: only the anchor's month of every every_x-th year
    skip = -(day.year - anchor.year) % every_x
    if not skip and day.month > anchor.month:
        skip = every_x
    if skip:
        return date(day.year + skip, anchor.month, 1)
    if day.month < anchor.month:
        return date(day.year, anchor.month, 1)
    return day


class Occurrences:
    """
    Restartable, finite sequence of the next `count` occurrence days.

    Each iteration scans forward from `from_day`, jumping over periods that
    `every_x` rules out; if no occurrence turns up within the scan horizon,
    or before the last representable date, iteration raises
    UnresolvableRecurrence.
    """

    def __init__(self, task: Task, from_day: date, count: int, anchor: date):
        self.task = task
        self.from_day = from_day
        self.count = count
        self.anchor = anchor
        self.horizon = scan_horizon(task)

    def _unresolvable(self) -> UnresolvableRecurrence:
        return UnresolvableRecurrence("recurrenceUnresolvable", taskId=self.task.id, horizon=self.horizon)

    def __iter__(self) -> Iterator[date]:
        day = max(self.from_day, self.anchor)
        found = 0
        gap = 0
        while found < self.count:
            try:
                candidate = _next_candidate(self.task, day, self.anchor)
            except (ValueError, OverflowError):
                raise self._unresolvable()
            gap += (candidate - day).days
            day = candidate
            if gap > self.horizon:
                raise self._unresolvable()
            if matches_pattern(self.task, day, self.anchor):
                yield day
                found += 1
                gap = 0
            else:
                gap += 1
            try:
                day += timedelta(days=1)
            except OverflowError:
                raise self._unresolvable()

    def __repr__(self):
        return f"Occurrences(task={self.task.id!r}, from_day={self.from_day}, count={self.count})"


def next_occurrences(task: Task, from_date: DateLike, count: int, prefs: Optional[Preferences] = None) -> Occurrences:
    """Occurrence days on or after `from_date`. Validates the config eagerly."""
    if not task.capabilities.has_recurrence:
        raise ValidationError("invalidTaskType", type=task.type)
    validate_recurrence(task)
    prefs = prefs or Preferences()
    if isinstance(from_date, datetime):
        from_date = local_day(from_date, prefs.timezone_offset, prefs.day_start)
    return Occurrences(task, from_date, max(0, count), start_day(task, prefs))


def first_occurrence(task: Task, from_date: DateLike, prefs: Optional[Preferences] = None) -> date:
    return next(iter(next_occurrences(task, from_date, 1, prefs)))
