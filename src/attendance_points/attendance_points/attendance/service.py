from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from ..common.validators import require_non_empty
from ..core.constants import SHIFT_RECORD_WRITE_ATTEMPTS
from ..core.enums import ShiftStatus
from ..core.exceptions import ValidationError
from ..core.policy import EnginePolicy
from ..points.service import PointLedgerService
from ..schedules.model import EmployeeSchedule
from ..schedules.repository import ScheduleRepository
from ..schedules.window import ShiftWindowResolver
from ..scans.model import ScanEvent
from ..scans.repository import ScanRecordStore
from .classifier import StatusClassifier
from .grouper import ShiftRecordGrouper
from .model import ShiftRecord
from .repository import AttendanceFlagsProvider, ShiftRecordRepository
from .writes import mutate_record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordOutcome:
    employee_id: int
    shift_date: date
    record_id: int
    status: ShiftStatus


@dataclass(frozen=True)
class RecordFailure:
    employee_id: int
    shift_date: date
    error: str


@dataclass
class ProcessingResult:
    """Per-record outcome of an upload or an absence sweep."""

    batch_id: Optional[str] = None
    succeeded: List[RecordOutcome] = field(default_factory=list)
    failed: List[RecordFailure] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed


class AttendanceService:
    def __init__(
        self,
        records: ShiftRecordRepository,
        scans: ScanRecordStore,
        schedules: ScheduleRepository,
        flags: AttendanceFlagsProvider,
        ledger: PointLedgerService,
        *,
        classifier: StatusClassifier | None = None,
        grouper: ShiftRecordGrouper | None = None,
        policy: EnginePolicy | None = None,
        write_attempts: int = SHIFT_RECORD_WRITE_ATTEMPTS,
    ):
        self._records = records
        self._scans = scans
        self._schedules = schedules
        self._flags = flags
        self._ledger = ledger
        self._policy = policy or EnginePolicy()
        self._classifier = classifier or StatusClassifier(self._policy)
        self._grouper = grouper or ShiftRecordGrouper(scans, records, schedules, write_attempts=write_attempts)
        self._write_attempts = int(write_attempts)

    def process_upload(
        self, events: Iterable[ScanEvent], *, now: datetime, batch_id: Optional[str] = None
    ) -> ProcessingResult:
        """Fold one uploaded batch of scans and re-classify every touched record.

        A failure on one shift record is logged and reported; the other
        records of the upload are still processed.
        """

        if batch_id is not None:
            events = [e if e.batch_id else replace(e, batch_id=batch_id) for e in events]

        result = ProcessingResult(batch_id=batch_id)
        for group in self._grouper.group(events):
            try:
                record = self._grouper.fold(group)
                record = self._finalize(record, group.schedule, now=now)
            except Exception as e:
                logger.exception(
                    "Failed to process scans for employee %s on %s", group.employee_id, group.shift_date
                )
                result.failed.append(RecordFailure(group.employee_id, group.shift_date, str(e)))
                continue
            result.succeeded.append(
                RecordOutcome(record.employee_id, record.shift_date, record.record_id, record.status)
            )

        logger.info(
            "Upload %s processed: %s record(s) ok, %s failed",
            batch_id or "-",
            len(result.succeeded),
            len(result.failed),
        )
        return result

    def detect_absences(self, shift_date: date, *, now: datetime) -> ProcessingResult:
        """Close out a shift date once every window on it has ended.

        Scheduled employees without a record get one (NCNS, leave or advised
        absence), and provisional records are re-classified as final.
        """

        result = ProcessingResult()
        for schedule in self._schedules.list_effective(on=shift_date):
            if not schedule.works_on(shift_date):
                continue

            instance = ShiftWindowResolver.for_schedule(schedule).instance_for(shift_date)
            if now < instance.end + timedelta(minutes=self._policy.bio_out_tolerance_minutes):
                continue

            try:
                record = self._records.get_for_shift(employee_id=schedule.employee_id, shift_date=shift_date)
                if record is not None and not record.is_provisional:
                    continue
                if record is None:
                    record = self._records.get_or_create(employee_id=schedule.employee_id, shift_date=shift_date)
                record = self._finalize(record, schedule, now=now)
            except Exception as e:
                logger.exception("Absence check failed for employee %s on %s", schedule.employee_id, shift_date)
                result.failed.append(RecordFailure(schedule.employee_id, shift_date, str(e)))
                continue

            result.succeeded.append(
                RecordOutcome(record.employee_id, record.shift_date, record.record_id, record.status)
            )

        logger.info(
            "Absence check for %s: %s record(s) closed, %s failed",
            shift_date,
            len(result.succeeded),
            len(result.failed),
        )
        return result

    def reclassify(self, record_id: int, *, now: datetime) -> ShiftRecord:
        record = self._get(record_id)
        return self._finalize(record, self._schedule_for(record), now=now, force=True)

    def verify(
        self,
        record_id: int,
        *,
        actor: str,
        now: datetime,
        status: Optional[ShiftStatus] = None,
        notes: Optional[str] = None,
    ) -> ShiftRecord:
        """Mark a record as checked by a person, optionally overriding its status."""

        actor = require_non_empty(actor, "actor")
        record = self._get(record_id)
        schedule = self._schedule_for(record)

        def change(current: ShiftRecord) -> ShiftRecord:
            if status is None:
                current = self._classified(current, schedule, now=now)
            else:
                current = replace(current, status=status, secondary_status=None, is_provisional=False)
            return replace(current, is_verified=True, verified_by=actor, notes=notes or current.notes)

        record = mutate_record(self._records, record.record_id, change, attempts=self._write_attempts)
        logger.info("Shift record %s verified by %s as %s", record.record_id, actor, record.status.value)
        self._ledger.regenerate_for_record(record, schedule, today=now.date())
        return record

    def correct_times(
        self,
        record_id: int,
        *,
        time_in: Optional[datetime],
        time_out: Optional[datetime],
        now: datetime,
        actor: Optional[str] = None,
    ) -> ShiftRecord:
        if time_in is not None and time_out is not None and time_out <= time_in:
            raise ValidationError("time_out must be later than time_in")

        record = self._get(record_id)
        schedule = self._schedule_for(record)

        def change(current: ShiftRecord) -> ShiftRecord:
            corrected = replace(current, time_in=time_in, time_out=time_out)
            return self._classified(corrected, schedule, now=now)

        record = mutate_record(self._records, record.record_id, change, attempts=self._write_attempts)
        logger.info(
            "Shift record %s times corrected by %s; status now %s",
            record.record_id,
            actor or "system",
            record.status.value,
        )
        self._ledger.regenerate_for_record(record, schedule, today=now.date())
        return record

    def purge_scans(self, *, now: datetime) -> int:
        cutoff = now - timedelta(days=self._policy.scan_retention_days)
        purged = self._scans.purge_before(cutoff)
        logger.info("Purged %s scan(s) recorded before %s", purged, cutoff)
        return purged

    def _get(self, record_id: int) -> ShiftRecord:
        record = self._records.get(record_id)
        if record is None:
            raise ValidationError(f"Shift record {record_id} not found")
        return record

    def _schedule_for(self, record: ShiftRecord) -> Optional[EmployeeSchedule]:
        return self._schedules.get_effective(employee_id=record.employee_id, on=record.shift_date)

    def _classified(self, record: ShiftRecord, schedule: Optional[EmployeeSchedule], *, now: datetime) -> ShiftRecord:
        flags = self._flags.flags_for(employee_id=record.employee_id, on=record.shift_date)
        decision = self._classifier.classify(
            schedule=schedule,
            shift_date=record.shift_date,
            time_in=record.time_in,
            time_out=record.time_out,
            now=now,
            flags=flags,
        )
        return replace(
            record,
            status=decision.status,
            secondary_status=decision.secondary_status,
            tardy_minutes=decision.tardy_minutes,
            undertime_minutes=decision.undertime_minutes,
            is_provisional=decision.is_provisional,
            failure_to_notify=decision.failure_to_notify,
            notes=decision.note,
        )

    def _finalize(
        self,
        record: ShiftRecord,
        schedule: Optional[EmployeeSchedule],
        *,
        now: datetime,
        force: bool = False,
    ) -> ShiftRecord:
        """Classify, store and sync the point. Verified records keep their status."""

        def change(current: ShiftRecord) -> Optional[ShiftRecord]:
            if current.is_verified and not force:
                return None
            return self._classified(current, schedule, now=now)

        record = mutate_record(self._records, record.record_id, change, attempts=self._write_attempts)
        if record.status == ShiftStatus.NEEDS_MANUAL_REVIEW:
            logger.warning(
                "Shift record %s (employee %s, %s) needs manual review: %s",
                record.record_id,
                record.employee_id,
                record.shift_date,
                record.notes,
            )
        self._ledger.regenerate_for_record(record, schedule, today=now.date())
        return record
