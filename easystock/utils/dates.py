"""Calendar helpers for recurring schedules and report periods."""
import calendar
from datetime import date, datetime, time, timedelta


def add_months(value: date, months: int) -> date:
    """
    Shift a date by a number of calendar months.

    The day is clamped to the last day of the target month, so
    Jan 31 + 1 month is Feb 28 (or Feb 29 in leap years).
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def add_years(value: date, years: int) -> date:
    """Shift a date by whole years (Feb 29 clamps to Feb 28)."""
    return add_months(value, 12 * years)


def end_of_month(value: date) -> date:
    return value.replace(day=calendar.monthrange(value.year, value.month)[1])


def start_of_month(value: date) -> date:
    return value.replace(day=1)


def start_of_week(value: date) -> date:
    # Weeks start on Sunday
    return value - timedelta(days=(value.weekday() + 1) % 7)


def to_date(value) -> date:
    """Truncate a datetime (or ISO string) to its calendar day."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if isinstance(value, datetime):
        return value.date()
    return value


def day_start(value: date) -> datetime:
    return datetime.combine(to_date(value), time.min)


def day_end(value: date) -> datetime:
    return datetime.combine(to_date(value), time.max)
