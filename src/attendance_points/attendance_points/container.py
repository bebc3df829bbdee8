from __future__ import annotations

from dataclasses import dataclass

from .attendance.classifier import StatusClassifier
from .attendance.grouper import ShiftRecordGrouper
from .attendance.mysql_attendance_repository import MySQLShiftRecordRepository
from .attendance.mysql_flags_repository import MySQLAttendanceFlagsRepository
from .attendance.service import AttendanceService
from .core.policy import EnginePolicy
from .database.connection import DBConfig, DatabaseConnection
from .database.locks import MySQLJobLock
from .points.expiration import PointExpirationEngine
from .points.generator import PointGenerator
from .points.mysql_point_repository import MySQLPointRepository
from .points.service import PointLedgerService
from .scans.mysql_scan_repository import MySQLScanRepository
from .schedules.mysql_schedule_repository import MySQLScheduleRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    policy: EnginePolicy

    schedules_repo: MySQLScheduleRepository
    scans_repo: MySQLScanRepository
    records_repo: MySQLShiftRecordRepository
    flags_repo: MySQLAttendanceFlagsRepository
    points_repo: MySQLPointRepository

    ledger_service: PointLedgerService
    attendance_service: AttendanceService
    expiration_engine: PointExpirationEngine


def build_container(*, db_config: dict, policy: EnginePolicy | None = None) -> Container:
    policy = policy or EnginePolicy()
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    schedules_repo = MySQLScheduleRepository(conn)
    scans_repo = MySQLScanRepository(conn)
    records_repo = MySQLShiftRecordRepository(conn)
    flags_repo = MySQLAttendanceFlagsRepository(conn)
    points_repo = MySQLPointRepository(conn)

    ledger_service = PointLedgerService(points_repo, PointGenerator(policy))
    attendance_service = AttendanceService(
        records_repo,
        scans_repo,
        schedules_repo,
        flags_repo,
        ledger_service,
        classifier=StatusClassifier(policy),
        grouper=ShiftRecordGrouper(scans_repo, records_repo, schedules_repo),
        policy=policy,
    )
    expiration_engine = PointExpirationEngine(
        points_repo,
        MySQLJobLock(conn, policy.expiration_lock_name, timeout_seconds=policy.expiration_lock_timeout_seconds),
        policy,
    )

    return Container(
        conn=conn,
        policy=policy,
        schedules_repo=schedules_repo,
        scans_repo=scans_repo,
        records_repo=records_repo,
        flags_repo=flags_repo,
        points_repo=points_repo,
        ledger_service=ledger_service,
        attendance_service=attendance_service,
        expiration_engine=expiration_engine,
    )
