"""Fold raw scans into one ShiftRecord per (employee, shift date).

Scans for a shift can arrive split across uploads and in any order. Every
scan is stored once and attributed to a shift date through the employee's
schedule. The record's time-in and time-out are then re-derived from all
scans stored for that shift: the earliest is the time-in, the latest the
time-out. A later upload can therefore complete or correct what an earlier
one could only guess. Scans in between are kept as extra scans and logged.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from ..core.constants import SHIFT_RECORD_WRITE_ATTEMPTS
from ..core.enums import ScanDirection
from ..schedules.model import EmployeeSchedule
from ..schedules.repository import ScheduleRepository
from ..schedules.window import ShiftWindowResolver
from ..scans.model import ScanEvent, StoredScan
from ..scans.repository import ScanRecordStore
from .model import ShiftRecord
from .repository import ShiftRecordRepository
from .writes import mutate_record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanGroup:
    """All scans of one upload that resolve to the same shift instance."""

    employee_id: int
    shift_date: date
    schedule: Optional[EmployeeSchedule]
    events: Tuple[ScanEvent, ...]


def shift_span(moments: Iterable[datetime]) -> Tuple[Optional[datetime], Optional[datetime]]:
    """(time_in, time_out) for the scans of one shift.

    A single scan is always a time-in; the time-out stays open until a later
    scan for the same shift shows up.
    """

    ordered = sorted(set(moments))
    if not ordered:
        return None, None
    if len(ordered) == 1:
        return ordered[0], None
    return ordered[0], ordered[-1]


def direction_of(record: ShiftRecord, scanned_at: datetime) -> Optional[ScanDirection]:
    if record.time_in == scanned_at:
        return ScanDirection.IN
    if record.time_out == scanned_at:
        return ScanDirection.OUT
    return None


class ShiftRecordGrouper:
    def __init__(
        self,
        scans: ScanRecordStore,
        records: ShiftRecordRepository,
        schedules: ScheduleRepository,
        *,
        write_attempts: int = SHIFT_RECORD_WRITE_ATTEMPTS,
    ):
        self._scans = scans
        self._records = records
        self._schedules = schedules
        self._write_attempts = int(write_attempts)

    def resolve(self, employee_id: int, scanned_at: datetime) -> Tuple[Optional[EmployeeSchedule], date]:
        """Schedule and shift date a scan belongs to.

        Without a schedule the scan's own calendar date is used and the
        record ends up in manual review.
        """

        scan_day = scanned_at.date()
        schedule = self._schedules.get_effective(employee_id=employee_id, on=scan_day)
        if schedule is None:
            # Early-morning completion scan of a shift whose schedule ended yesterday.
            schedule = self._schedules.get_effective(employee_id=employee_id, on=scan_day - timedelta(days=1))
        if schedule is None:
            return None, scan_day

        shift_date = ShiftWindowResolver.for_schedule(schedule).shift_date_for(scanned_at)
        if not schedule.covers(shift_date):
            other = self._schedules.get_effective(employee_id=employee_id, on=shift_date)
            if other is not None and other != schedule:
                schedule = other
                shift_date = ShiftWindowResolver.for_schedule(other).shift_date_for(scanned_at)
        return schedule, shift_date

    def group(self, events: Iterable[ScanEvent]) -> List[ScanGroup]:
        """Bucket an upload by shift instance, scans in time order within each bucket."""

        buckets: "OrderedDict[Tuple[int, date], list]" = OrderedDict()
        schedules: dict[Tuple[int, date], Optional[EmployeeSchedule]] = {}
        for event in events:
            schedule, shift_date = self.resolve(event.employee_id, event.scanned_at)
            key = (event.employee_id, shift_date)
            buckets.setdefault(key, []).append(event)
            schedules.setdefault(key, schedule)

        return [
            ScanGroup(
                employee_id=employee_id,
                shift_date=shift_date,
                schedule=schedules[(employee_id, shift_date)],
                events=tuple(sorted(bucket, key=lambda e: e.scanned_at)),
            )
            for (employee_id, shift_date), bucket in buckets.items()
        ]

    def fold(self, group: ScanGroup) -> ShiftRecord:
        record = self._records.get_or_create(employee_id=group.employee_id, shift_date=group.shift_date)

        fresh = set()
        for event in group.events:
            stored, created = self._scans.add(event)
            if not created and stored.is_attributed:
                logger.debug("Scan %s already processed; skipping", stored.scan_id)
                continue
            self._scans.attribute(stored.scan_id, shift_date=group.shift_date, direction=None)
            fresh.add(stored.scan_id)

        def place(current: ShiftRecord) -> Optional[ShiftRecord]:
            if current.is_verified:
                return None
            stored = self._scans.list_for_shift(employee_id=group.employee_id, shift_date=group.shift_date)
            time_in, time_out = shift_span(s.scanned_at for s in stored)
            if (time_in, time_out) == (current.time_in, current.time_out):
                return None
            if current.time_in is not None and time_in != current.time_in:
                logger.info(
                    "Time-in of employee %s on %s moved from %s to %s by a later upload",
                    group.employee_id,
                    group.shift_date,
                    current.time_in,
                    time_in,
                )
            return replace(current, time_in=time_in, time_out=time_out)

        record = mutate_record(self._records, record.record_id, place, attempts=self._write_attempts)
        self._sync_directions(record, fresh)
        return record

    def _sync_directions(self, record: ShiftRecord, fresh: Set[int]) -> None:
        """Point the stored IN/OUT markers at the scans the record now uses."""

        stored: Sequence[StoredScan] = self._scans.list_for_shift(
            employee_id=record.employee_id, shift_date=record.shift_date
        )
        wanted = {s.scan_id: direction_of(record, s.scanned_at) for s in stored}

        # Release markers first; (employee, shift date, direction) is unique.
        for scan in stored:
            if scan.direction is not None and scan.direction != wanted[scan.scan_id]:
                self._scans.attribute(scan.scan_id, shift_date=record.shift_date, direction=None)

        for scan in stored:
            direction = wanted[scan.scan_id]
            if direction is None:
                if scan.scan_id in fresh:
                    logger.info(
                        "Anomaly: extra scan for employee %s on %s at %s (in=%s, out=%s)",
                        record.employee_id,
                        record.shift_date,
                        scan.scanned_at,
                        record.time_in,
                        record.time_out,
                    )
                continue
            if scan.direction == direction:
                continue
            if not self._scans.attribute(scan.scan_id, shift_date=record.shift_date, direction=direction):
                logger.warning(
                    "Anomaly: %s scan already stored for employee %s on %s; keeping scan %s as extra",
                    direction.value,
                    record.employee_id,
                    record.shift_date,
                    scan.scan_id,
                )
