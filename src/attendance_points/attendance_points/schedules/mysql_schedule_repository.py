from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone, normalize_mysql_date, normalize_mysql_time
from .model import EmployeeSchedule, parse_work_days
from .repository import ScheduleRepository

_COLUMNS = """
    schedule_id, employee_id, scheduled_time_in, scheduled_time_out,
    grace_period_minutes, work_days, is_active, effective_date, end_date
"""


def _to_schedule(r: dict) -> EmployeeSchedule:
    return EmployeeSchedule(
        schedule_id=int(r["schedule_id"]),
        employee_id=int(r["employee_id"]),
        scheduled_time_in=normalize_mysql_time(r["scheduled_time_in"]),
        scheduled_time_out=normalize_mysql_time(r["scheduled_time_out"]),
        grace_period_minutes=int(r.get("grace_period_minutes") or 0),
        work_days=parse_work_days(r.get("work_days")),
        is_active=as_bool(r.get("is_active")),
        effective_date=normalize_mysql_date(r["effective_date"]),
        end_date=normalize_mysql_date(r.get("end_date")),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_effective(self, *, employee_id: int, on: date) -> Optional[EmployeeSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employee_schedules
                WHERE employee_id=%s AND is_active=1
                  AND effective_date <= %s AND (end_date IS NULL OR end_date >= %s)
                ORDER BY effective_date DESC
                LIMIT 1
                """,
                (int(employee_id), on, on),
            )
            r = fetchone(cur)
            return _to_schedule(r) if r else None

    def list_effective(self, *, on: date) -> Sequence[EmployeeSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employee_schedules
                WHERE is_active=1
                  AND effective_date <= %s AND (end_date IS NULL OR end_date >= %s)
                ORDER BY employee_id ASC, effective_date DESC
                """,
                (on, on),
            )
            rows = fetchall(cur)

        # Non-overlapping timelines mean one row per employee; keep the newest if not.
        seen: set[int] = set()
        out: list[EmployeeSchedule] = []
        for r in rows:
            schedule = _to_schedule(r)
            if schedule.employee_id in seen:
                continue
            seen.add(schedule.employee_id)
            out.append(schedule)
        return out
