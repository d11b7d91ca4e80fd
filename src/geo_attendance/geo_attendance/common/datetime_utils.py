from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, timezone, tzinfo

ONE_DAY = timedelta(days=1)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_utc() -> datetime:
    """Current time as an aware UTC datetime; services take it as an injectable clock."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by MySQL DATETIME) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_naive_utc(value: datetime) -> datetime:
    return as_utc(value).replace(tzinfo=None)


def local_midnight_utc(instant: datetime, local_tz: tzinfo) -> datetime:
    """UTC instant of the local-calendar midnight that starts ``instant``'s day."""
    local = as_utc(instant).astimezone(local_tz)
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.astimezone(timezone.utc)


def day_window(instant: datetime, local_tz: tzinfo) -> tuple[datetime, datetime]:
    """Half-open ``[start, end)`` UTC window of the local calendar day."""
    start = local_midnight_utc(instant, local_tz)
    return start, start + ONE_DAY


def minutes_half_up(delta: timedelta) -> int:
    """Whole minutes in ``delta``, rounding half a minute up."""
    return int(math.floor(delta.total_seconds() / 60 + 0.5))


def local_dates_window(first: date, last: date, local_tz: tzinfo) -> tuple[datetime, datetime]:
    """Half-open UTC window covering local calendar days ``first`` through ``last`` inclusive."""
    start = datetime.combine(first, time(), tzinfo=local_tz).astimezone(timezone.utc)
    end = datetime.combine(last + ONE_DAY, time(), tzinfo=local_tz).astimezone(timezone.utc)
    return start, end


def month_of(instant: datetime, local_tz: tzinfo) -> tuple[date, date]:
    """First and last local calendar day of the month containing ``instant``."""
    today = as_utc(instant).astimezone(local_tz).date()
    first = today.replace(day=1)
    next_first = (first + timedelta(days=32)).replace(day=1)
    return first, next_first - ONE_DAY
