from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from typing import Optional

import pytest

from src.attendance_points.attendance_points.attendance.model import NO_FLAGS, AttendanceFlags, ShiftRecord
from src.attendance_points.attendance_points.attendance.service import AttendanceService
from src.attendance_points.attendance_points.core.constants import WEEKDAY_NAMES
from src.attendance_points.attendance_points.core.enums import ExpirationType, ShiftStatus
from src.attendance_points.attendance_points.points.model import AttendancePoint, PointDraft, PointFilter
from src.attendance_points.attendance_points.points.service import PointLedgerService
from src.attendance_points.attendance_points.scans.model import ScanEvent, StoredScan
from src.attendance_points.attendance_points.schedules.model import EmployeeSchedule


@dataclass
class InMemorySchedules:
    schedules: list[EmployeeSchedule] = field(default_factory=list)

    def get_effective(self, *, employee_id: int, on: date) -> Optional[EmployeeSchedule]:
        matches = [s for s in self.schedules if s.employee_id == employee_id and s.covers(on)]
        matches.sort(key=lambda s: s.effective_date, reverse=True)
        return matches[0] if matches else None

    def list_effective(self, *, on: date):
        seen = set()
        out = []
        for s in sorted(self.schedules, key=lambda s: (s.employee_id, s.effective_date), reverse=True):
            if s.covers(on) and s.employee_id not in seen:
                seen.add(s.employee_id)
                out.append(s)
        return sorted(out, key=lambda s: s.employee_id)


class InMemoryShiftRecords:
    def __init__(self):
        self.by_id: dict[int, ShiftRecord] = {}
        self._id = 0

    def get(self, record_id: int) -> Optional[ShiftRecord]:
        return self.by_id.get(record_id)

    def get_for_shift(self, *, employee_id: int, shift_date: date) -> Optional[ShiftRecord]:
        for r in self.by_id.values():
            if r.employee_id == employee_id and r.shift_date == shift_date:
                return r
        return None

    def get_or_create(self, *, employee_id: int, shift_date: date) -> ShiftRecord:
        existing = self.get_for_shift(employee_id=employee_id, shift_date=shift_date)
        if existing:
            return existing
        self._id += 1
        rec = ShiftRecord(record_id=self._id, employee_id=employee_id, shift_date=shift_date)
        self.by_id[rec.record_id] = rec
        return rec

    def update(self, record: ShiftRecord) -> Optional[ShiftRecord]:
        current = self.by_id.get(record.record_id)
        if current is None or current.version != record.version:
            return None
        stored = replace(record, version=record.version + 1)
        self.by_id[record.record_id] = stored
        return stored


class InMemoryScans:
    def __init__(self, records: InMemoryShiftRecords):
        self.by_id: dict[int, StoredScan] = {}
        self._records = records
        self._id = 0

    def add(self, event: ScanEvent):
        for s in self.by_id.values():
            if s.employee_id == event.employee_id and s.scanned_at == event.scanned_at:
                return s, False
        self._id += 1
        stored = StoredScan(
            scan_id=self._id,
            employee_id=event.employee_id,
            scanned_at=event.scanned_at,
            batch_id=event.batch_id,
        )
        self.by_id[stored.scan_id] = stored
        return stored, True

    def attribute(self, scan_id: int, *, shift_date: date, direction) -> bool:
        scan = self.by_id[scan_id]
        if direction is not None:
            for other in self.by_id.values():
                if (
                    other.scan_id != scan_id
                    and other.employee_id == scan.employee_id
                    and other.shift_date == shift_date
                    and other.direction == direction
                ):
                    return False
        self.by_id[scan_id] = replace(scan, shift_date=shift_date, direction=direction)
        return True

    def list_for_shift(self, *, employee_id: int, shift_date: date):
        items = [s for s in self.by_id.values() if s.employee_id == employee_id and s.shift_date == shift_date]
        return sorted(items, key=lambda s: s.scanned_at)

    def purge_before(self, cutoff: datetime) -> int:
        doomed = []
        for s in self.by_id.values():
            if s.scanned_at >= cutoff:
                continue
            record = None
            if s.shift_date is not None:
                record = self._records.get_for_shift(employee_id=s.employee_id, shift_date=s.shift_date)
            if record is None or not record.is_provisional:
                doomed.append(s.scan_id)
        for scan_id in doomed:
            del self.by_id[scan_id]
        return len(doomed)


@dataclass
class InMemoryFlags:
    flags: dict[tuple[int, date], AttendanceFlags] = field(default_factory=dict)

    def flags_for(self, *, employee_id: int, on: date) -> AttendanceFlags:
        return self.flags.get((employee_id, on), NO_FLAGS)


class InMemoryPoints:
    def __init__(self):
        self.by_id: dict[int, AttendancePoint] = {}
        self._id = 0

    def get(self, point_id: int) -> Optional[AttendancePoint]:
        return self.by_id.get(point_id)

    def get_for_shift_record(self, shift_record_id: int) -> Optional[AttendancePoint]:
        for p in self.by_id.values():
            if p.shift_record_id == shift_record_id:
                return p
        return None

    def insert(self, draft: PointDraft) -> AttendancePoint:
        if self.get_for_shift_record(draft.shift_record_id) is not None:
            raise AssertionError(f"duplicate point for shift record {draft.shift_record_id}")
        self._id += 1
        point = AttendancePoint(point_id=self._id, **draft.__dict__)
        self.by_id[point.point_id] = point
        return point

    def delete(self, point_id: int) -> bool:
        point = self.by_id.get(point_id)
        if point is None or not point.is_active:
            return False
        del self.by_id[point_id]
        return True

    def list(self, criteria: PointFilter):
        items = [p for p in self.by_id.values() if criteria.accepts(p)]
        return sorted(items, key=lambda p: (p.shift_date, p.point_id), reverse=True)

    def list_for_employee(self, employee_id: int):
        return self.list(PointFilter(employee_id=employee_id))

    def list_due_for_sro(self, on: date):
        return [p for p in self.by_id.values() if p.is_active and p.expires_at <= on]

    def list_employees_with_active(self):
        return sorted({p.employee_id for p in self.by_id.values() if p.is_active})

    def mark_expired(self, point_id, *, expiration_type: ExpirationType, expired_at, gbro_batch_id=None, gbro_applied_at=None):
        point = self.by_id.get(point_id)
        if point is None or not point.is_active:
            return False
        self.by_id[point_id] = replace(
            point,
            is_expired=True,
            expiration_type=expiration_type,
            expired_at=expired_at,
            gbro_batch_id=gbro_batch_id,
            gbro_applied_at=gbro_applied_at,
        )
        return True

    def mark_excused(self, point_id, *, actor, reason, at) -> bool:
        point = self.by_id.get(point_id)
        if point is None or not point.is_active:
            return False
        self.by_id[point_id] = replace(point, is_excused=True, excused_by=actor, excuse_reason=reason, excused_at=at)
        return True


def build_schedule(
    *,
    employee_id: int = 1,
    time_in: time = time(8, 0),
    time_out: time = time(17, 0),
    grace: int = 15,
    work_days=WEEKDAY_NAMES[:5],
    effective_date: date = date(2024, 1, 1),
    end_date: Optional[date] = None,
    schedule_id: Optional[int] = None,
) -> EmployeeSchedule:
    return EmployeeSchedule(
        schedule_id=schedule_id or employee_id,
        employee_id=employee_id,
        scheduled_time_in=time_in,
        scheduled_time_out=time_out,
        effective_date=effective_date,
        end_date=end_date,
        grace_period_minutes=grace,
        work_days=frozenset(work_days),
    )


def build_record(**overrides) -> ShiftRecord:
    values = dict(
        record_id=1,
        employee_id=1,
        shift_date=date(2025, 1, 15),
        status=ShiftStatus.ON_TIME,
        is_provisional=False,
    )
    values.update(overrides)
    return ShiftRecord(**values)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 1, 15, 20, 0, 0)


@pytest.fixture
def schedules() -> InMemorySchedules:
    return InMemorySchedules()


@pytest.fixture
def records() -> InMemoryShiftRecords:
    return InMemoryShiftRecords()


@pytest.fixture
def scans(records) -> InMemoryScans:
    return InMemoryScans(records)


@pytest.fixture
def flags() -> InMemoryFlags:
    return InMemoryFlags()


@pytest.fixture
def points() -> InMemoryPoints:
    return InMemoryPoints()


@pytest.fixture
def ledger(points) -> PointLedgerService:
    return PointLedgerService(points)


@pytest.fixture
def attendance(records, scans, schedules, flags, ledger) -> AttendanceService:
    return AttendanceService(records, scans, schedules, flags, ledger)


@pytest.fixture
def make_schedule():
    return build_schedule


@pytest.fixture
def make_record():
    return build_record
