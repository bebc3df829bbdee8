from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ScanDirection


@dataclass(frozen=True)
class ScanEvent:
    """One raw biometric punch as yielded by the upload parser."""

    employee_id: int
    scanned_at: datetime
    batch_id: Optional[str] = None


@dataclass(frozen=True)
class StoredScan:
    scan_id: int
    employee_id: int
    scanned_at: datetime
    batch_id: Optional[str]
    shift_date: Optional[date] = None
    direction: Optional[ScanDirection] = None

    @property
    def is_attributed(self) -> bool:
        return self.shift_date is not None
