from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Optional

from ..core.enums import ExpirationType, PointState, ViolationType


@dataclass(frozen=True)
class AttendancePoint:
    """Domain entity: one accountability point issued for one shift record.

    Transitions only go forward: active -> excused, or active -> expired
    (SRO or GBRO). Excused and expired points are never modified again.
    """

    point_id: int
    employee_id: int
    shift_record_id: int
    shift_date: date
    violation_type: ViolationType
    points: Decimal
    created_on: date
    expires_at: date
    eligible_for_gbro: bool
    violation_details: str
    tardy_minutes: int = 0
    undertime_minutes: int = 0
    expiration_type: ExpirationType = ExpirationType.NONE
    is_expired: bool = False
    expired_at: Optional[date] = None
    is_excused: bool = False
    excused_by: Optional[str] = None
    excused_at: Optional[datetime] = None
    excuse_reason: Optional[str] = None
    gbro_applied_at: Optional[date] = None
    gbro_batch_id: Optional[str] = None

    @property
    def state(self) -> PointState:
        if self.is_excused:
            return PointState.EXCUSED
        if self.is_expired:
            return PointState.EXPIRED
        return PointState.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.state == PointState.ACTIVE


@dataclass(frozen=True)
class PointDraft:
    """A point as computed by the generator, before it has an id."""

    employee_id: int
    shift_record_id: int
    shift_date: date
    violation_type: ViolationType
    points: Decimal
    created_on: date
    expires_at: date
    eligible_for_gbro: bool
    violation_details: str
    tardy_minutes: int = 0
    undertime_minutes: int = 0

    def matches(self, point: AttendancePoint) -> bool:
        """Same violation content as an existing point (creation date aside)."""
        return (
            point.employee_id == self.employee_id
            and point.shift_record_id == self.shift_record_id
            and point.shift_date == self.shift_date
            and point.violation_type == self.violation_type
            and point.points == self.points
            and point.expires_at == self.expires_at
            and point.eligible_for_gbro == self.eligible_for_gbro
            and point.violation_details == self.violation_details
            and point.tardy_minutes == self.tardy_minutes
            and point.undertime_minutes == self.undertime_minutes
        )


@dataclass(frozen=True)
class PointFilter:
    employee_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    state: Optional[PointState] = None
    expiration_type: Optional[ExpirationType] = None

    def accepts(self, point: AttendancePoint) -> bool:
        if self.employee_id is not None and point.employee_id != self.employee_id:
            return False
        if self.date_from is not None and point.shift_date < self.date_from:
            return False
        if self.date_to is not None and point.shift_date > self.date_to:
            return False
        if self.state is not None and point.state != self.state:
            return False
        if self.expiration_type is not None and point.expiration_type != self.expiration_type:
            return False
        return True


@dataclass(frozen=True)
class PointTotals:
    employee_id: int
    active_points: Decimal
    active_count: int
    by_type: Dict[ViolationType, int] = field(default_factory=dict)
