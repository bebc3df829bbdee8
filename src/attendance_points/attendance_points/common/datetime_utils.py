from __future__ import annotations

from datetime import date, datetime

from dateutil.relativedelta import relativedelta


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Only outer layers (CLI commands) call this; services take the
    reference instant as a parameter.
    """
    return datetime.now()


def add_months(value: date, months: int) -> date:
    """Calendar month arithmetic; the day is clamped to the end of short months."""
    return value + relativedelta(months=months)


def whole_minutes(start: datetime, end: datetime) -> int:
    """Signed whole minutes from start to end, truncated toward zero."""
    return int((end - start).total_seconds() / 60)


def format_hm(value: datetime | None, missing: str = "No scan") -> str:
    return value.strftime("%H:%M") if value else missing
