from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import FrozenSet, Optional

from ..core.constants import DEFAULT_GRACE_MINUTES, DEFAULT_WORK_DAYS, WEEKDAY_NAMES


@dataclass(frozen=True)
class EmployeeSchedule:
    """Domain entity: an employee's recurring shift over an effective date range."""

    schedule_id: int
    employee_id: int
    scheduled_time_in: time
    scheduled_time_out: time
    effective_date: date
    end_date: Optional[date] = None
    grace_period_minutes: int = DEFAULT_GRACE_MINUTES
    work_days: FrozenSet[str] = field(default_factory=lambda: frozenset(DEFAULT_WORK_DAYS))
    is_active: bool = True

    def covers(self, on: date) -> bool:
        if not self.is_active or on < self.effective_date:
            return False
        return self.end_date is None or on <= self.end_date

    def works_on(self, on: date) -> bool:
        return WEEKDAY_NAMES[on.weekday()] in self.work_days


def parse_work_days(value: str | None) -> FrozenSet[str]:
    """'monday,tuesday' -> frozenset; unknown names are dropped."""
    if not value:
        return frozenset()
    names = {part.strip().lower() for part in value.split(",")}
    return frozenset(n for n in names if n in WEEKDAY_NAMES)
