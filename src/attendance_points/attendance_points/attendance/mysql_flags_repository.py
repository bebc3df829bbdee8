from __future__ import annotations

from datetime import date

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchone
from .model import NO_FLAGS, AttendanceFlags
from .repository import AttendanceFlagsProvider


class MySQLAttendanceFlagsRepository(AttendanceFlagsProvider):
    """Reads flags written by the leave and notification subsystems."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def flags_for(self, *, employee_id: int, on: date) -> AttendanceFlags:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT on_leave, advised_absence, advisory_expected
                FROM attendance_flags
                WHERE employee_id=%s AND flag_date=%s
                """,
                (int(employee_id), on),
            )
            r = fetchone(cur)
            if not r:
                return NO_FLAGS
            return AttendanceFlags(
                on_leave=as_bool(r.get("on_leave")),
                advised_absence=as_bool(r.get("advised_absence")),
                advisory_expected=as_bool(r.get("advisory_expected")),
            )
