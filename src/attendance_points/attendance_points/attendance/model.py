from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ShiftStatus


@dataclass(frozen=True)
class ShiftRecord:
    """Domain entity: one employee's attendance for one shift date.

    `shift_date` is the date of the scheduled time-in of the instance, even
    when the shift ends (or starts, for graveyard shifts) on another day.
    `secondary_status` keeps an undertime that was outranked by a late
    arrival, so the point can still charge the heavier violation.
    `version` increases on every write and guards concurrent updates.
    """

    record_id: int
    employee_id: int
    shift_date: date
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    status: ShiftStatus = ShiftStatus.NEEDS_MANUAL_REVIEW
    secondary_status: Optional[ShiftStatus] = None
    tardy_minutes: int = 0
    undertime_minutes: int = 0
    is_provisional: bool = True
    failure_to_notify: bool = False
    is_verified: bool = False
    verified_by: Optional[str] = None
    notes: Optional[str] = None
    version: int = 0

    @property
    def has_scans(self) -> bool:
        return self.time_in is not None or self.time_out is not None


@dataclass(frozen=True)
class AttendanceFlags:
    """Leave/advisory state for (employee, date) from the leave and notification subsystems."""

    on_leave: bool = False
    advised_absence: bool = False
    advisory_expected: bool = False


NO_FLAGS = AttendanceFlags()
