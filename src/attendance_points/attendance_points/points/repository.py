from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ExpirationType
from .model import AttendancePoint, PointDraft, PointFilter


class PointRepository(Protocol):
    def get(self, point_id: int) -> Optional[AttendancePoint]:
        raise NotImplementedError

    def get_for_shift_record(self, shift_record_id: int) -> Optional[AttendancePoint]:
        raise NotImplementedError

    def insert(self, draft: PointDraft) -> AttendancePoint:
        raise NotImplementedError

    def delete(self, point_id: int) -> bool:
        """Remove a stale active point that is being replaced."""

        raise NotImplementedError

    def list(self, criteria: PointFilter) -> Sequence[AttendancePoint]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int) -> Sequence[AttendancePoint]:
        raise NotImplementedError

    def list_due_for_sro(self, on: date) -> Sequence[AttendancePoint]:
        """Active points whose expiration date is on or before `on`."""

        raise NotImplementedError

    def list_employees_with_active(self) -> Sequence[int]:
        raise NotImplementedError

    def mark_expired(
        self,
        point_id: int,
        *,
        expiration_type: ExpirationType,
        expired_at: date,
        gbro_batch_id: Optional[str] = None,
        gbro_applied_at: Optional[date] = None,
    ) -> bool:
        """Expire an active point; returns False if it was no longer active."""

        raise NotImplementedError

    def mark_excused(self, point_id: int, *, actor: str, reason: Optional[str], at: datetime) -> bool:
        """Excuse an active point; returns False if it was no longer active."""

        raise NotImplementedError
