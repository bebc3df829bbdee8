"""Shift window resolution.

A schedule only stores times of day. This module turns them into concrete
shift instances and decides which instance (shift date) a scan belongs to.
Whether a shift crosses midnight is derived from comparing the scheduled
time-in and time-out; no shift names are enumerated.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from ..core.constants import GRAVEYARD_END_HOUR
from .model import EmployeeSchedule

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class ShiftInstance:
    """One concrete occurrence of a schedule, attributed to `shift_date`."""

    shift_date: date
    start: datetime
    end: datetime

    def distance_to(self, moment: datetime) -> timedelta:
        if moment < self.start:
            return self.start - moment
        if moment > self.end:
            return moment - self.end
        return timedelta(0)


class ShiftWindowResolver:
    def __init__(self, scheduled_time_in: time, scheduled_time_out: time):
        self._time_in = scheduled_time_in
        self._time_out = scheduled_time_out

    @classmethod
    def for_schedule(cls, schedule: EmployeeSchedule) -> "ShiftWindowResolver":
        return cls(schedule.scheduled_time_in, schedule.scheduled_time_out)

    @property
    def is_graveyard(self) -> bool:
        """Time-in between 00:00 and 04:59: worked for the previous day."""
        return self._time_in.hour < GRAVEYARD_END_HOUR

    @property
    def wraps(self) -> bool:
        return self._time_out <= self._time_in

    @property
    def crosses_midnight(self) -> bool:
        return self.wraps or self.is_graveyard

    def instance_for(self, shift_date: date) -> ShiftInstance:
        start_day = shift_date + ONE_DAY if self.is_graveyard else shift_date
        end_day = start_day + ONE_DAY if self.wraps else start_day
        return ShiftInstance(
            shift_date=shift_date,
            start=datetime.combine(start_day, self._time_in),
            end=datetime.combine(end_day, self._time_out),
        )

    def shift_date_for(self, scanned_at: datetime) -> date:
        scan_day = scanned_at.date()
        if not self.crosses_midnight:
            return scan_day

        # A crossing shift touches two calendar days, so a scan can only
        # belong to the instance of its own date or the one before it.
        # Outside both windows the nearer one wins; ties go to the later date
        # (early arrival for the upcoming shift).
        today = self.instance_for(scan_day)
        yesterday = self.instance_for(scan_day - ONE_DAY)
        if yesterday.distance_to(scanned_at) < today.distance_to(scanned_at):
            return yesterday.shift_date
        return today.shift_date
