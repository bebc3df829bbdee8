from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import ExpirationType, PointState, ViolationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_bool,
    as_decimal,
    db_cursor,
    fetchall,
    fetchone,
    normalize_mysql_date,
)
from .model import AttendancePoint, PointDraft, PointFilter
from .repository import PointRepository

_COLUMNS = """
    point_id, employee_id, shift_record_id, shift_date, violation_type, points,
    created_on, expires_at, expiration_type, is_expired, expired_at,
    eligible_for_gbro, is_excused, excused_by, excused_at, excuse_reason,
    violation_details, tardy_minutes, undertime_minutes, gbro_applied_at, gbro_batch_id
"""

_ACTIVE = "is_expired=0 AND is_excused=0"


def _to_point(r: dict) -> AttendancePoint:
    return AttendancePoint(
        point_id=int(r["point_id"]),
        employee_id=int(r["employee_id"]),
        shift_record_id=int(r["shift_record_id"]),
        shift_date=normalize_mysql_date(r["shift_date"]),
        violation_type=ViolationType(r["violation_type"]),
        points=as_decimal(r["points"]),
        created_on=normalize_mysql_date(r["created_on"]),
        expires_at=normalize_mysql_date(r["expires_at"]),
        eligible_for_gbro=as_bool(r.get("eligible_for_gbro")),
        violation_details=r.get("violation_details") or "",
        tardy_minutes=int(r.get("tardy_minutes") or 0),
        undertime_minutes=int(r.get("undertime_minutes") or 0),
        expiration_type=ExpirationType(r.get("expiration_type") or ExpirationType.NONE.value),
        is_expired=as_bool(r.get("is_expired")),
        expired_at=normalize_mysql_date(r.get("expired_at")),
        is_excused=as_bool(r.get("is_excused")),
        excused_by=r.get("excused_by"),
        excused_at=r.get("excused_at"),
        excuse_reason=r.get("excuse_reason"),
        gbro_applied_at=normalize_mysql_date(r.get("gbro_applied_at")),
        gbro_batch_id=r.get("gbro_batch_id"),
    )


class MySQLPointRepository(PointRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, point_id: int) -> Optional[AttendancePoint]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_points WHERE point_id=%s", (int(point_id),))
            r = fetchone(cur)
            return _to_point(r) if r else None

    def get_for_shift_record(self, shift_record_id: int) -> Optional[AttendancePoint]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_points WHERE shift_record_id=%s",
                (int(shift_record_id),),
            )
            r = fetchone(cur)
            return _to_point(r) if r else None

    def insert(self, draft: PointDraft) -> AttendancePoint:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_points(
                    employee_id, shift_record_id, shift_date, violation_type, points,
                    created_on, expires_at, expiration_type, eligible_for_gbro,
                    violation_details, tardy_minutes, undertime_minutes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(draft.employee_id),
                    int(draft.shift_record_id),
                    draft.shift_date,
                    draft.violation_type.value,
                    draft.points,
                    draft.created_on,
                    draft.expires_at,
                    ExpirationType.NONE.value,
                    int(draft.eligible_for_gbro),
                    draft.violation_details,
                    int(draft.tardy_minutes),
                    int(draft.undertime_minutes),
                ),
            )
            point_id = int(cur.lastrowid)

        return AttendancePoint(
            point_id=point_id,
            employee_id=draft.employee_id,
            shift_record_id=draft.shift_record_id,
            shift_date=draft.shift_date,
            violation_type=draft.violation_type,
            points=draft.points,
            created_on=draft.created_on,
            expires_at=draft.expires_at,
            eligible_for_gbro=draft.eligible_for_gbro,
            violation_details=draft.violation_details,
            tardy_minutes=draft.tardy_minutes,
            undertime_minutes=draft.undertime_minutes,
        )

    def delete(self, point_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM attendance_points WHERE point_id=%s AND {_ACTIVE}", (int(point_id),))
            return cur.rowcount > 0

    def list(self, criteria: PointFilter) -> Sequence[AttendancePoint]:
        clauses = ["1=1"]
        params: list[object] = []

        if criteria.employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(criteria.employee_id))
        if criteria.date_from is not None:
            clauses.append("shift_date >= %s")
            params.append(criteria.date_from)
        if criteria.date_to is not None:
            clauses.append("shift_date <= %s")
            params.append(criteria.date_to)
        if criteria.state == PointState.ACTIVE:
            clauses.append(_ACTIVE)
        elif criteria.state == PointState.EXCUSED:
            clauses.append("is_excused=1")
        elif criteria.state == PointState.EXPIRED:
            clauses.append("is_expired=1 AND is_excused=0")
        if criteria.expiration_type is not None:
            clauses.append("expiration_type=%s")
            params.append(criteria.expiration_type.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_points
                WHERE {where}
                ORDER BY shift_date DESC, point_id DESC
                """,
                tuple(params),
            )
            return [_to_point(r) for r in fetchall(cur)]

    def list_for_employee(self, employee_id: int) -> Sequence[AttendancePoint]:
        return self.list(PointFilter(employee_id=employee_id))

    def list_due_for_sro(self, on: date) -> Sequence[AttendancePoint]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_points
                WHERE {_ACTIVE} AND expires_at <= %s
                ORDER BY expires_at ASC, point_id ASC
                """,
                (on,),
            )
            return [_to_point(r) for r in fetchall(cur)]

    def list_employees_with_active(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT DISTINCT employee_id FROM attendance_points WHERE {_ACTIVE} ORDER BY employee_id ASC"
            )
            return [int(r["employee_id"]) for r in fetchall(cur)]

    def mark_expired(
        self,
        point_id: int,
        *,
        expiration_type: ExpirationType,
        expired_at: date,
        gbro_batch_id: Optional[str] = None,
        gbro_applied_at: Optional[date] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_points
                SET is_expired=1, expiration_type=%s, expired_at=%s,
                    gbro_batch_id=%s, gbro_applied_at=%s
                WHERE point_id=%s AND {_ACTIVE}
                """,
                (expiration_type.value, expired_at, gbro_batch_id, gbro_applied_at, int(point_id)),
            )
            return cur.rowcount > 0

    def mark_excused(self, point_id: int, *, actor: str, reason: Optional[str], at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_points
                SET is_excused=1, excused_by=%s, excused_at=%s, excuse_reason=%s
                WHERE point_id=%s AND {_ACTIVE}
                """,
                (actor, at, reason, int(point_id)),
            )
            return cur.rowcount > 0
