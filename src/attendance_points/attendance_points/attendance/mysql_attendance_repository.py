from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional

from ..core.enums import ShiftStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchone, normalize_mysql_date
from .model import ShiftRecord
from .repository import ShiftRecordRepository

_COLUMNS = """
    record_id, employee_id, shift_date, time_in, time_out, status, secondary_status,
    tardy_minutes, undertime_minutes, is_provisional, failure_to_notify,
    is_verified, verified_by, notes, version
"""


def _to_record(r: dict) -> ShiftRecord:
    return ShiftRecord(
        record_id=int(r["record_id"]),
        employee_id=int(r["employee_id"]),
        shift_date=normalize_mysql_date(r["shift_date"]),
        time_in=r.get("time_in"),
        time_out=r.get("time_out"),
        status=ShiftStatus(r["status"]),
        secondary_status=ShiftStatus(r["secondary_status"]) if r.get("secondary_status") else None,
        tardy_minutes=int(r.get("tardy_minutes") or 0),
        undertime_minutes=int(r.get("undertime_minutes") or 0),
        is_provisional=as_bool(r.get("is_provisional")),
        failure_to_notify=as_bool(r.get("failure_to_notify")),
        is_verified=as_bool(r.get("is_verified")),
        verified_by=r.get("verified_by"),
        notes=r.get("notes"),
        version=int(r.get("version") or 0),
    )


class MySQLShiftRecordRepository(ShiftRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, record_id: int) -> Optional[ShiftRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shift_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_shift(self, *, employee_id: int, shift_date: date) -> Optional[ShiftRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM shift_records WHERE employee_id=%s AND shift_date=%s",
                (int(employee_id), shift_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_or_create(self, *, employee_id: int, shift_date: date) -> ShiftRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            # UNIQUE(employee_id, shift_date) turns a concurrent insert into a no-op.
            cur.execute(
                """
                INSERT IGNORE INTO shift_records(employee_id, shift_date, status, is_provisional, version)
                VALUES(%s,%s,%s,1,0)
                """,
                (int(employee_id), shift_date, ShiftStatus.NEEDS_MANUAL_REVIEW.value),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM shift_records WHERE employee_id=%s AND shift_date=%s",
                (int(employee_id), shift_date),
            )
            return _to_record(fetchone(cur))

    def update(self, record: ShiftRecord) -> Optional[ShiftRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shift_records
                SET time_in=%s, time_out=%s, status=%s, secondary_status=%s,
                    tardy_minutes=%s, undertime_minutes=%s,
                    is_provisional=%s, failure_to_notify=%s,
                    is_verified=%s, verified_by=%s, notes=%s,
                    version=version+1
                WHERE record_id=%s AND version=%s
                """,
                (
                    record.time_in,
                    record.time_out,
                    record.status.value,
                    record.secondary_status.value if record.secondary_status else None,
                    int(record.tardy_minutes),
                    int(record.undertime_minutes),
                    int(record.is_provisional),
                    int(record.failure_to_notify),
                    int(record.is_verified),
                    record.verified_by,
                    record.notes,
                    int(record.record_id),
                    int(record.version),
                ),
            )
            if cur.rowcount == 0:
                return None
            return replace(record, version=record.version + 1)
