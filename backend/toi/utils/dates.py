import calendar
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum


class DateFallsOn(str, Enum):
    day = "Day"
    week = "Week"
    month = "Month"


def date_span(day: date, falls_on: DateFallsOn | None) -> tuple[date, date]:
    """First and last calendar day of the day/week/month containing ``day``.

    Weeks run Sunday through Saturday.
    """
    if falls_on is None or falls_on == DateFallsOn.day:
        return day, day
    if falls_on == DateFallsOn.week:
        # date.weekday(): Monday == 0 ... Sunday == 6
        sunday = day - timedelta(days=(day.weekday() + 1) % 7)
        return sunday, sunday + timedelta(days=6)
    _, num_days = calendar.monthrange(day.year, day.month)
    return day.replace(day=1), day.replace(day=num_days)


def datetime_span(day: date, falls_on: DateFallsOn | None) -> tuple[datetime, datetime]:
    """Same as :func:`date_span` but as an inclusive UTC datetime interval."""
    first, last = date_span(day, falls_on)
    return (
        datetime.combine(first, time.min, tzinfo=timezone.utc),
        datetime.combine(last, time(23, 59, 59), tzinfo=timezone.utc),
    )


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
