from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import AttendanceFlags, ShiftRecord


class ShiftRecordRepository(Protocol):
    def get(self, record_id: int) -> Optional[ShiftRecord]:
        raise NotImplementedError

    def get_for_shift(self, *, employee_id: int, shift_date: date) -> Optional[ShiftRecord]:
        raise NotImplementedError

    def get_or_create(self, *, employee_id: int, shift_date: date) -> ShiftRecord:
        """Return the record for (employee, shift date), creating an empty one if needed.

        Concurrent callers for the same key must end up with the same row.
        """

        raise NotImplementedError

    def update(self, record: ShiftRecord) -> Optional[ShiftRecord]:
        """Compare-and-set on `record.version`.

        Returns the stored record (version bumped) or None when the row was
        changed by someone else since `record` was read.
        """

        raise NotImplementedError


class AttendanceFlagsProvider(Protocol):
    def flags_for(self, *, employee_id: int, on: date) -> AttendanceFlags:
        raise NotImplementedError
