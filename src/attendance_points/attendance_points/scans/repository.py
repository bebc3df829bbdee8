from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence, Tuple

from ..core.enums import ScanDirection
from .model import ScanEvent, StoredScan


class ScanRecordStore(Protocol):
    """Raw scans kept long enough to reconcile shifts split across uploads."""

    def add(self, event: ScanEvent) -> Tuple[StoredScan, bool]:
        """Store `event` once per (employee, timestamp).

        Returns the stored scan and whether it was newly inserted.
        """

        raise NotImplementedError

    def attribute(self, scan_id: int, *, shift_date: date, direction: Optional[ScanDirection]) -> bool:
        """Attach a scan to a shift date, optionally as its time-in or time-out.

        At most one scan per (employee, shift date, direction); returns False
        when another scan already holds that direction.
        """

        raise NotImplementedError

    def list_for_shift(self, *, employee_id: int, shift_date: date) -> Sequence[StoredScan]:
        raise NotImplementedError

    def purge_before(self, cutoff: datetime) -> int:
        """Delete scans older than `cutoff` unless their shift record is still provisional."""

        raise NotImplementedError
