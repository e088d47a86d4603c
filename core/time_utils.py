from datetime import date, datetime, timedelta, timezone
from typing import Protocol

UTC = timezone.utc

def get_current_time():
    """Returns the current time in UTC."""
    return datetime.now(UTC)

def to_utc(dt: datetime):
    """Converts a datetime object to UTC."""
    if dt.tzinfo is None:
        # Assume naive datetimes from storage are UTC
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return get_current_time()


class FixedClock:
    """Clock pinned to a given instant; `advance` moves it forward."""

    def __init__(self, at: datetime):
        self.at = to_utc(at)

    def now(self) -> datetime:
        return self.at

    def advance(self, **kwargs) -> datetime:
        self.at = self.at + timedelta(**kwargs)
        return self.at


def local_day(ts: datetime, timezone_offset: int = 0, day_start: int = 0) -> date:
    """
    Calendar day a timestamp belongs to for a user.

    `timezone_offset` is minutes behind UTC (UTC-5 is +300). Instants before
    `day_start` o'clock local time still belong to the previous day.
    """
    shifted = to_utc(ts) - timedelta(minutes=timezone_offset) - timedelta(hours=day_start)
    return shifted.date()

def day_start_at(day: date, timezone_offset: int = 0, day_start: int = 0) -> datetime:
    """UTC instant at which the user's `day` begins."""
    local_start = datetime(day.year, day.month, day.day, tzinfo=UTC) + timedelta(hours=day_start)
    return local_start + timedelta(minutes=timezone_offset)

def days_between(start: date, end: date) -> int:
    return (end - start).days
