"""Attendance status classification.

`StatusClassifier.classify` is pure: it reads nothing but its arguments,
so re-running it on the same record always produces the same decision.
The rules are evaluated top to bottom and the first match wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from ..common.datetime_utils import whole_minutes
from ..core.enums import ShiftStatus
from ..core.policy import EnginePolicy
from ..schedules.model import EmployeeSchedule
from ..schedules.window import ShiftWindowResolver
from .model import NO_FLAGS, AttendanceFlags


@dataclass(frozen=True)
class StatusDecision:
    status: ShiftStatus
    note: Optional[str] = None
    secondary_status: Optional[ShiftStatus] = None
    tardy_minutes: int = 0
    undertime_minutes: int = 0
    is_provisional: bool = False
    failure_to_notify: bool = False


class StatusClassifier:
    def __init__(self, policy: EnginePolicy | None = None):
        self._policy = policy or EnginePolicy()

    def classify(
        self,
        *,
        schedule: Optional[EmployeeSchedule],
        shift_date: date,
        time_in: Optional[datetime],
        time_out: Optional[datetime],
        now: datetime,
        flags: AttendanceFlags = NO_FLAGS,
    ) -> StatusDecision:
        if schedule is None:
            return StatusDecision(ShiftStatus.NEEDS_MANUAL_REVIEW, note="No active schedule for shift date")

        has_scans = time_in is not None or time_out is not None

        if not schedule.works_on(shift_date):
            return StatusDecision(ShiftStatus.NON_WORK_DAY)

        if flags.on_leave:
            if has_scans:
                return StatusDecision(ShiftStatus.NEEDS_MANUAL_REVIEW, note="Scans recorded on an approved leave day")
            return StatusDecision(ShiftStatus.ON_LEAVE)

        if flags.advised_absence:
            if has_scans:
                return StatusDecision(ShiftStatus.NEEDS_MANUAL_REVIEW, note="Scans recorded on an advised absence")
            return StatusDecision(ShiftStatus.ADVISED_ABSENCE)

        if not has_scans:
            return StatusDecision(ShiftStatus.NCNS, failure_to_notify=flags.advisory_expected)

        instance = ShiftWindowResolver.for_schedule(schedule).instance_for(shift_date)
        tardy = max(0, whole_minutes(instance.start, time_in)) if time_in else 0
        undertime = max(0, whole_minutes(time_out, instance.end)) if time_out else 0

        if time_out is None:
            window_closes = instance.end + timedelta(minutes=self._policy.bio_out_tolerance_minutes)
            if now < window_closes:
                return StatusDecision(ShiftStatus.FAILED_BIO_OUT, tardy_minutes=tardy, is_provisional=True)

        if time_in is None:
            return StatusDecision(ShiftStatus.FAILED_BIO_IN, undertime_minutes=undertime)

        if tardy > schedule.grace_period_minutes:
            # An early departure on a late day is kept as the secondary status.
            late = (
                ShiftStatus.HALF_DAY_ABSENCE if tardy > self._policy.half_day_threshold_minutes else ShiftStatus.TARDY
            )
            return StatusDecision(
                late,
                secondary_status=self._undertime_status(undertime),
                tardy_minutes=tardy,
                undertime_minutes=undertime,
            )

        if time_out is None:
            # Window closed on time-in only, nothing late to charge.
            return StatusDecision(ShiftStatus.FAILED_BIO_OUT, tardy_minutes=tardy)

        early = self._undertime_status(undertime)
        if early is not None:
            return StatusDecision(early, tardy_minutes=tardy, undertime_minutes=undertime)

        return StatusDecision(ShiftStatus.ON_TIME, tardy_minutes=tardy)

    def _undertime_status(self, undertime: int) -> Optional[ShiftStatus]:
        if undertime <= self._policy.undertime_tolerance_minutes:
            return None
        if undertime > self._policy.undertime_more_than_hour_minutes:
            return ShiftStatus.UNDERTIME_MORE_THAN_HOUR
        return ShiftStatus.UNDERTIME
