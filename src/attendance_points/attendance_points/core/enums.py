from __future__ import annotations

from enum import Enum


class ShiftStatus(str, Enum):
    """Attendance status of one shift instance (stored in shift_records.status)."""

    ON_TIME = "on_time"
    TARDY = "tardy"
    HALF_DAY_ABSENCE = "half_day_absence"
    UNDERTIME = "undertime"
    UNDERTIME_MORE_THAN_HOUR = "undertime_more_than_hour"
    FAILED_BIO_IN = "failed_bio_in"
    FAILED_BIO_OUT = "failed_bio_out"
    PRESENT_NO_BIO = "present_no_bio"
    NCNS = "ncns"
    ADVISED_ABSENCE = "advised_absence"
    ON_LEAVE = "on_leave"
    NON_WORK_DAY = "non_work_day"
    NEEDS_MANUAL_REVIEW = "needs_manual_review"


class ViolationType(str, Enum):
    """Kind of violation an attendance point was issued for."""

    TARDY = "tardy"
    UNDERTIME = "undertime"
    UNDERTIME_MORE_THAN_HOUR = "undertime_more_than_hour"
    HALF_DAY_ABSENCE = "half_day_absence"
    WHOLE_DAY_ABSENCE = "whole_day_absence"


class ExpirationType(str, Enum):
    NONE = "none"
    SRO = "sro"
    GBRO = "gbro"


class PointState(str, Enum):
    """Lifecycle state derived from the excused/expired flags."""

    ACTIVE = "active"
    EXCUSED = "excused"
    EXPIRED = "expired"


class ScanDirection(str, Enum):
    IN = "in"
    OUT = "out"
