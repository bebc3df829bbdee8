"""Daily point expiration job.

Standard Roll-Off (SRO) expires points whose expiration date has arrived.
Good-Behavior Roll-Off (GBRO) rewards an employee with no new eligible
violation for `gbro_window_days` by expiring their most recent eligible
points. Whole-day absences are never eligible and never reset the clock.

The run holds a job lock for its whole duration; a run that cannot take
the lock does nothing and reports itself as skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Collection, List, Optional, Sequence, Set

from ..core.enums import ExpirationType
from ..core.exceptions import LockNotAcquiredError
from ..core.policy import EnginePolicy
from ..database.locks import JobLock, held
from .model import AttendancePoint
from .repository import PointRepository

logger = logging.getLogger(__name__)


@dataclass
class ExpirationSummary:
    run_date: date
    batch_id: str
    dry_run: bool = False
    skipped: bool = False
    sro_expired: int = 0
    gbro_expired: int = 0
    failures: int = 0
    employees: Set[int] = field(default_factory=set)
    simulated: Set[int] = field(default_factory=set, repr=False)

    @property
    def employees_affected(self) -> int:
        return len(self.employees)

    def as_dict(self) -> dict:
        return {
            "run_date": self.run_date.isoformat(),
            "batch_id": self.batch_id,
            "dry_run": self.dry_run,
            "skipped": self.skipped,
            "sro_expired": self.sro_expired,
            "gbro_expired": self.gbro_expired,
            "employees_affected": self.employees_affected,
            "failures": self.failures,
        }


def gbro_batch_id(now: datetime) -> str:
    return now.strftime("%Y%m%d%H%M%S")


class PointExpirationEngine:
    def __init__(self, points: PointRepository, lock: JobLock, policy: EnginePolicy | None = None):
        self._points = points
        self._lock = lock
        self._policy = policy or EnginePolicy()

    def run(self, *, now: datetime, dry_run: bool = False) -> ExpirationSummary:
        summary = ExpirationSummary(run_date=now.date(), batch_id=gbro_batch_id(now), dry_run=dry_run)
        try:
            with held(self._lock):
                logger.info("Point expiration run %s started (dry_run=%s)", summary.batch_id, dry_run)
                self._standard_roll_off(summary)
                self._good_behavior_roll_off(summary)
        except LockNotAcquiredError:
            logger.warning("Point expiration run skipped: another run holds the lock")
            summary.skipped = True
            return summary

        logger.info(
            "Point expiration run %s finished: sro=%s gbro=%s employees=%s failures=%s",
            summary.batch_id,
            summary.sro_expired,
            summary.gbro_expired,
            summary.employees_affected,
            summary.failures,
        )
        return summary

    def _standard_roll_off(self, summary: ExpirationSummary) -> None:
        for point in self._points.list_due_for_sro(summary.run_date):
            try:
                if summary.dry_run or self._points.mark_expired(
                    point.point_id,
                    expiration_type=ExpirationType.SRO,
                    expired_at=summary.run_date,
                ):
                    summary.sro_expired += 1
                    summary.simulated.add(point.point_id)
                    summary.employees.add(point.employee_id)
            except Exception:
                summary.failures += 1
                logger.exception("SRO failed for point %s", point.point_id)

    def _good_behavior_roll_off(self, summary: ExpirationSummary) -> None:
        for employee_id in self._points.list_employees_with_active():
            try:
                expired = self._apply_gbro(employee_id, summary)
            except Exception:
                summary.failures += 1
                logger.exception("GBRO failed for employee %s", employee_id)
                continue

            if expired:
                summary.gbro_expired += expired
                summary.employees.add(employee_id)

    def _apply_gbro(self, employee_id: int, summary: ExpirationSummary) -> int:
        chosen = self.select_gbro_points(
            self._points.list_for_employee(employee_id),
            summary.run_date,
            already_expired=summary.simulated if summary.dry_run else (),
        )
        if not chosen:
            return 0
        if summary.dry_run:
            return len(chosen)

        expired = 0
        for point in chosen:
            if self._points.mark_expired(
                point.point_id,
                expiration_type=ExpirationType.GBRO,
                expired_at=summary.run_date,
                gbro_batch_id=summary.batch_id,
                gbro_applied_at=summary.run_date,
            ):
                expired += 1
        logger.info("GBRO expired %s point(s) for employee %s", expired, employee_id)
        return expired

    def select_gbro_points(
        self,
        points: Sequence[AttendancePoint],
        run_date: date,
        *,
        already_expired: Collection[int] = (),
    ) -> List[AttendancePoint]:
        """The points GBRO would expire for one employee on `run_date`.

        `already_expired` holds ids a dry run has expired earlier in the same run.
        """

        # Excused violations still restart the clock but are never expired.
        eligible = [p for p in points if p.eligible_for_gbro]
        active = [p for p in eligible if p.is_active and p.point_id not in already_expired]
        if not active:
            return []

        reference = self._reference_date(points, eligible)
        if reference is None or (run_date - reference).days < self._policy.gbro_window_days:
            return []

        newest_first = sorted(active, key=lambda p: (p.shift_date, p.created_on, p.point_id), reverse=True)
        return newest_first[: self._policy.gbro_batch_size]

    @staticmethod
    def _reference_date(points: Sequence[AttendancePoint], eligible: Sequence[AttendancePoint]) -> Optional[date]:
        # The good-behavior clock restarts at the last eligible violation or
        # the last GBRO award, whichever is later.
        dates = [p.shift_date for p in eligible]
        dates.extend(p.gbro_applied_at for p in points if p.gbro_applied_at is not None)
        return max(dates) if dates else None
