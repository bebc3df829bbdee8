from __future__ import annotations

from datetime import date
from typing import Optional

from ..common.datetime_utils import add_months, format_hm
from ..core.enums import ShiftStatus, ViolationType
from ..core.policy import EnginePolicy
from ..attendance.model import ShiftRecord
from ..schedules.model import EmployeeSchedule
from .model import PointDraft

_VIOLATIONS = {
    ShiftStatus.NCNS: ViolationType.WHOLE_DAY_ABSENCE,
    ShiftStatus.HALF_DAY_ABSENCE: ViolationType.HALF_DAY_ABSENCE,
    ShiftStatus.TARDY: ViolationType.TARDY,
    ShiftStatus.UNDERTIME: ViolationType.UNDERTIME,
    ShiftStatus.UNDERTIME_MORE_THAN_HOUR: ViolationType.UNDERTIME_MORE_THAN_HOUR,
}


def violation_for(status: ShiftStatus) -> Optional[ViolationType]:
    return _VIOLATIONS.get(status)


class PointGenerator:
    """Maps a classified shift record to at most one point draft."""

    def __init__(self, policy: EnginePolicy | None = None):
        self._policy = policy or EnginePolicy()

    def generate(
        self,
        record: ShiftRecord,
        schedule: Optional[EmployeeSchedule],
        *,
        created_on: date,
    ) -> Optional[PointDraft]:
        if record.is_provisional:
            return None

        status = self.charged_status(record)
        if status is None:
            return None
        violation = violation_for(status)

        return PointDraft(
            employee_id=record.employee_id,
            shift_record_id=record.record_id,
            shift_date=record.shift_date,
            violation_type=violation,
            points=self._policy.point_value(violation),
            created_on=created_on,
            expires_at=add_months(record.shift_date, self._policy.sro_months_for(violation)),
            eligible_for_gbro=self._policy.is_gbro_eligible(violation),
            violation_details=self.describe(record, schedule, status=status),
            tardy_minutes=record.tardy_minutes,
            undertime_minutes=record.undertime_minutes,
        )

    def charged_status(self, record: ShiftRecord) -> Optional[ShiftStatus]:
        """The status a point is issued for.

        A late arrival that also left early is charged once, for whichever of
        the two violations is worth more; ties stay with the primary status.
        """

        primary = violation_for(record.status)
        secondary = violation_for(record.secondary_status) if record.secondary_status else None
        if secondary is not None and (
            primary is None or self._policy.point_value(secondary) > self._policy.point_value(primary)
        ):
            return record.secondary_status
        return record.status if primary is not None else None

    def describe(
        self,
        record: ShiftRecord,
        schedule: Optional[EmployeeSchedule],
        *,
        status: Optional[ShiftStatus] = None,
    ) -> str:
        """Audit text; depends only on the record and schedule."""

        scheduled_in = schedule.scheduled_time_in.strftime("%H:%M") if schedule else "N/A"
        scheduled_out = schedule.scheduled_time_out.strftime("%H:%M") if schedule else "N/A"
        actual_in = format_hm(record.time_in)
        actual_out = format_hm(record.time_out)
        grace = schedule.grace_period_minutes if schedule else 0

        status = status or record.status
        if status == ShiftStatus.NCNS:
            if record.failure_to_notify:
                return (
                    "Failed to Notify (FTN): Employee did not report for work despite being advised. "
                    f"Scheduled: {scheduled_in} - {scheduled_out}. No biometric scans recorded."
                )
            return (
                "No Call, No Show (NCNS): Employee did not report for work and did not provide prior notice. "
                f"Scheduled: {scheduled_in} - {scheduled_out}. No biometric scans recorded."
            )
        if status == ShiftStatus.HALF_DAY_ABSENCE:
            return "Half-Day Absence: Arrived %d minutes late (more than %d minutes grace period). Scheduled: %s, Actual: %s." % (
                record.tardy_minutes,
                grace,
                scheduled_in,
                actual_in,
            )
        if status == ShiftStatus.TARDY:
            return "Tardy: Arrived %d minutes late. Scheduled time in: %s, Actual time in: %s." % (
                record.tardy_minutes,
                scheduled_in,
                actual_in,
            )
        if status == ShiftStatus.UNDERTIME:
            return "Undertime: Left %d minutes early (up to 1 hour before scheduled end). Scheduled: %s, Actual: %s." % (
                record.undertime_minutes,
                scheduled_out,
                actual_out,
            )
        if status == ShiftStatus.UNDERTIME_MORE_THAN_HOUR:
            return (
                "Undertime (>1 Hour): Left %d minutes early (more than 1 hour before scheduled end). "
                "Scheduled: %s, Actual: %s." % (record.undertime_minutes, scheduled_out, actual_out)
            )
        return f"Attendance violation on {record.shift_date:%Y-%m-%d}"
