"""Engine policy shared by every environment.

Each value can be overridden from the environment; the settings modules
re-export these names so `EnginePolicy.from_settings` finds them.
"""

import os


def _int_env(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


POINT_VALUES = {
    "tardy": os.getenv("POINTS_TARDY", "0.25"),
    "undertime": os.getenv("POINTS_UNDERTIME", "0.25"),
    "undertime_more_than_hour": os.getenv("POINTS_UNDERTIME_MORE_THAN_HOUR", "0.50"),
    "half_day_absence": os.getenv("POINTS_HALF_DAY_ABSENCE", "0.50"),
    "whole_day_absence": os.getenv("POINTS_WHOLE_DAY_ABSENCE", "1.00"),
}

HALF_DAY_THRESHOLD_MINUTES = _int_env("HALF_DAY_THRESHOLD_MINUTES", 240)
UNDERTIME_MORE_THAN_HOUR_MINUTES = _int_env("UNDERTIME_MORE_THAN_HOUR_MINUTES", 60)
UNDERTIME_TOLERANCE_MINUTES = _int_env("UNDERTIME_TOLERANCE_MINUTES", 0)
BIO_OUT_TOLERANCE_MINUTES = _int_env("BIO_OUT_TOLERANCE_MINUTES", 120)

GBRO_WINDOW_DAYS = _int_env("GBRO_WINDOW_DAYS", 60)
GBRO_BATCH_SIZE = _int_env("GBRO_BATCH_SIZE", 2)
SRO_MONTHS = _int_env("SRO_MONTHS", 6)
WHOLE_DAY_SRO_MONTHS = _int_env("WHOLE_DAY_SRO_MONTHS", 12)

SCAN_RETENTION_DAYS = _int_env("SCAN_RETENTION_DAYS", 90)

EXPIRATION_LOCK_NAME = os.getenv("EXPIRATION_LOCK_NAME", "attendance_points.process_expirations")
EXPIRATION_LOCK_TIMEOUT_SECONDS = _int_env("EXPIRATION_LOCK_TIMEOUT_SECONDS", 0)
