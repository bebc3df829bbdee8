from __future__ import annotations

from typing import Callable, Optional

from ..core.constants import SHIFT_RECORD_WRITE_ATTEMPTS
from ..core.exceptions import ConcurrencyError, ValidationError
from .model import ShiftRecord
from .repository import ShiftRecordRepository


def mutate_record(
    records: ShiftRecordRepository,
    record_id: int,
    change: Callable[[ShiftRecord], Optional[ShiftRecord]],
    *,
    attempts: int = SHIFT_RECORD_WRITE_ATTEMPTS,
) -> ShiftRecord:
    """Read-modify-write a shift record under its version counter.

    `change` receives the freshly read record and returns the new one, or
    None to leave it untouched. It is re-run against the latest row after a
    version conflict, so it must not have side effects.
    """

    for _ in range(attempts):
        current = records.get(record_id)
        if current is None:
            raise ValidationError(f"Shift record {record_id} not found")

        updated = change(current)
        if updated is None or updated == current:
            return current

        stored = records.update(updated)
        if stored is not None:
            return stored

    raise ConcurrencyError(f"Shift record {record_id} kept changing; gave up after {attempts} attempts")
