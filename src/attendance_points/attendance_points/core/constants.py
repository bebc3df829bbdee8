"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Deployments override them through the settings modules (see core.policy).
"""

from decimal import Decimal

DEFAULT_GRACE_MINUTES = 15
DEFAULT_HALF_DAY_THRESHOLD_MINUTES = 4 * 60
DEFAULT_UNDERTIME_MORE_THAN_HOUR_MINUTES = 60
DEFAULT_UNDERTIME_TOLERANCE_MINUTES = 0
DEFAULT_BIO_OUT_TOLERANCE_MINUTES = 120

DEFAULT_POINT_VALUES = {
    "tardy": Decimal("0.25"),
    "undertime": Decimal("0.25"),
    "undertime_more_than_hour": Decimal("0.50"),
    "half_day_absence": Decimal("0.50"),
    "whole_day_absence": Decimal("1.00"),
}

DEFAULT_SRO_MONTHS = 6
DEFAULT_WHOLE_DAY_SRO_MONTHS = 12

DEFAULT_GBRO_WINDOW_DAYS = 60
DEFAULT_GBRO_BATCH_SIZE = 2

DEFAULT_SCAN_RETENTION_DAYS = 90

# Graveyard band: a scheduled time-in with hour in [0, 5) belongs to the
# previous calendar day's shift instance.
GRAVEYARD_END_HOUR = 5

DEFAULT_EXPIRATION_LOCK_NAME = "attendance_points.process_expirations"
DEFAULT_EXPIRATION_LOCK_TIMEOUT_SECONDS = 0

SHIFT_RECORD_WRITE_ATTEMPTS = 3

WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
DEFAULT_WORK_DAYS = WEEKDAY_NAMES[:5]
