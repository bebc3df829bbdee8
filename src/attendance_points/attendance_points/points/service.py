from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..attendance.model import ShiftRecord
from ..common.validators import require_non_empty, require_positive_id
from ..core.exceptions import PointStateError, ValidationError
from ..schedules.model import EmployeeSchedule
from .generator import PointGenerator
from .model import AttendancePoint, PointFilter, PointTotals
from .repository import PointRepository

logger = logging.getLogger(__name__)


class PointLedgerService:
    def __init__(self, points: PointRepository, generator: PointGenerator | None = None):
        self._points = points
        self._generator = generator or PointGenerator()

    def regenerate_for_record(
        self,
        record: ShiftRecord,
        schedule: Optional[EmployeeSchedule],
        *,
        today: date,
    ) -> Optional[AttendancePoint]:
        """Bring the ledger in line with the record's current status.

        A shift record owns at most one point. An active point that no longer
        matches is deleted before its replacement is inserted. Excused and
        expired points are final and are left as they are.
        """

        draft = self._generator.generate(record, schedule, created_on=today)
        existing = self._points.get_for_shift_record(record.record_id)

        if existing is not None:
            if not existing.is_active:
                logger.info(
                    "Point %s for shift record %s is %s; not regenerating",
                    existing.point_id,
                    record.record_id,
                    existing.state.value,
                )
                return existing
            if draft is not None and draft.matches(existing):
                return existing

            self._points.delete(existing.point_id)
            logger.info(
                "Removed stale %s point %s for shift record %s",
                existing.violation_type.value,
                existing.point_id,
                record.record_id,
            )

        if draft is None:
            return None

        point = self._points.insert(draft)
        logger.info(
            "Issued %s point %s (%s) to employee %s for %s",
            point.violation_type.value,
            point.point_id,
            point.points,
            point.employee_id,
            point.shift_date,
        )
        return point

    def excuse(self, point_id: int, *, actor: str, reason: Optional[str] = None, at: datetime) -> AttendancePoint:
        point_id = require_positive_id(point_id, "point_id")
        actor = require_non_empty(actor, "actor")

        point = self._points.get(point_id)
        if point is None:
            raise ValidationError(f"Attendance point {point_id} not found")
        if not point.is_active:
            raise PointStateError(f"Attendance point {point_id} is {point.state.value} and cannot be excused")

        if not self._points.mark_excused(point_id, actor=actor, reason=reason, at=at):
            raise PointStateError(f"Attendance point {point_id} changed state while being excused")

        logger.info("Point %s excused by %s", point_id, actor)
        return self._points.get(point_id)

    def list_points(self, criteria: PointFilter | None = None) -> Sequence[AttendancePoint]:
        return self._points.list(criteria or PointFilter())

    def totals_for(self, employee_id: int) -> PointTotals:
        active = [p for p in self._points.list_for_employee(employee_id) if p.is_active]

        by_type: dict = {}
        for p in active:
            by_type[p.violation_type] = by_type.get(p.violation_type, 0) + 1

        return PointTotals(
            employee_id=employee_id,
            active_points=sum((p.points for p in active), Decimal("0")),
            active_count=len(active),
            by_type=by_type,
        )
