# app/utils/dates.py
import calendar
from datetime import date, datetime, timezone
from typing import List, Tuple


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def month_bounds(day: date) -> Tuple[date, date]:
    """First and last day of the month containing ``day``."""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return date(day.year, day.month, 1), date(day.year, day.month, last_day)


def previous_months(day: date, count: int) -> List[Tuple[date, date]]:
    """Bounds of the ``count`` months ending with the month of ``day``, oldest first."""
    months = []
    year, month = day.year, day.month
    for _ in range(count):
        months.append(month_bounds(date(year, month, 1)))
        if month == 1:
            year, month = year - 1, 12
        else:
            month -= 1
    return list(reversed(months))


def parse_iso_date(raw: str) -> date:
    """Accepts ``YYYY-MM-DD`` and full ISO timestamps, keeping only the date."""
    raw = raw.strip()
    if len(raw) > 10:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    return date.fromisoformat(raw)
