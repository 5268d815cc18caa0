from calendar import monthrange
from datetime import date, datetime, timedelta


def parse_iso_date(value) -> date:
    """Accept a ``date``, ``datetime`` or ``YYYY-MM-DD`` string; return a ``date``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"invalid date value: {value!r}")
    # tolerate timestamps such as 2026-02-01T00:00:00Z
    return date.fromisoformat(value.strip()[:10])


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of the given month."""
    last_day = monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def parse_month(value: str) -> tuple[date, date]:
    """Expand ``YYYY-MM`` into the month's first and last day."""
    try:
        year_part, month_part = value.strip().split("-")
        return month_bounds(int(year_part), int(month_part))
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"invalid month value: {value!r}") from exc


def previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def iter_days(start: date, end: date):
    """Yield every calendar day from start to end inclusive (nothing if start > end)."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def inclusive_day_span(first: date, last: date) -> int:
    return (last - first).days + 1
