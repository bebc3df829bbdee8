from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence, Tuple

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.enums import ScanDirection
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import ScanEvent, StoredScan
from .repository import ScanRecordStore

_COLUMNS = "scan_id, employee_id, scanned_at, batch_id, shift_date, direction"


def _to_scan(r: dict) -> StoredScan:
    return StoredScan(
        scan_id=int(r["scan_id"]),
        employee_id=int(r["employee_id"]),
        scanned_at=r["scanned_at"],
        batch_id=r.get("batch_id"),
        shift_date=normalize_mysql_date(r.get("shift_date")),
        direction=ScanDirection(r["direction"]) if r.get("direction") else None,
    )


class MySQLScanRepository(ScanRecordStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, event: ScanEvent) -> Tuple[StoredScan, bool]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO scan_events(employee_id, scanned_at, batch_id)
                VALUES(%s,%s,%s)
                """,
                (int(event.employee_id), event.scanned_at, event.batch_id),
            )
            created = cur.rowcount > 0
            cur.execute(
                f"SELECT {_COLUMNS} FROM scan_events WHERE employee_id=%s AND scanned_at=%s",
                (int(event.employee_id), event.scanned_at),
            )
            return _to_scan(fetchone(cur)), created

    def attribute(self, scan_id: int, *, shift_date: date, direction: Optional[ScanDirection]) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE scan_events SET shift_date=%s, direction=%s WHERE scan_id=%s",
                    (shift_date, direction.value if direction else None, int(scan_id)),
                )
                return True
        except IntegrityError as e:
            if e.errno != errorcode.ER_DUP_ENTRY:
                raise
            return False

    def list_for_shift(self, *, employee_id: int, shift_date: date) -> Sequence[StoredScan]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM scan_events
                WHERE employee_id=%s AND shift_date=%s
                ORDER BY scanned_at ASC, scan_id ASC
                """,
                (int(employee_id), shift_date),
            )
            return [_to_scan(r) for r in fetchall(cur)]

    def purge_before(self, cutoff: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE se FROM scan_events se
                LEFT JOIN shift_records sr
                  ON sr.employee_id = se.employee_id AND sr.shift_date = se.shift_date
                WHERE se.scanned_at < %s
                  AND (sr.record_id IS NULL OR sr.is_provisional = 0)
                """,
                (cutoff,),
            )
            return int(cur.rowcount)
