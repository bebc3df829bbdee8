from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import EmployeeSchedule


class ScheduleRepository(Protocol):
    """Read access to schedules owned by the schedule-management collaborator."""

    def get_effective(self, *, employee_id: int, on: date) -> Optional[EmployeeSchedule]:
        """The active schedule whose effective range covers `on`, if any."""

        raise NotImplementedError

    def list_effective(self, *, on: date) -> Sequence[EmployeeSchedule]:
        raise NotImplementedError
