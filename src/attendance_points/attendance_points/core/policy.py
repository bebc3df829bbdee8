from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from types import ModuleType
from typing import Mapping

from . import constants
from .enums import ViolationType


def _default_point_values() -> dict[ViolationType, Decimal]:
    return {ViolationType(k): Decimal(v) for k, v in constants.DEFAULT_POINT_VALUES.items()}


@dataclass(frozen=True)
class EnginePolicy:
    """Tunable thresholds shared by the classifier, generator and expiration engine."""

    half_day_threshold_minutes: int = constants.DEFAULT_HALF_DAY_THRESHOLD_MINUTES
    undertime_more_than_hour_minutes: int = constants.DEFAULT_UNDERTIME_MORE_THAN_HOUR_MINUTES
    undertime_tolerance_minutes: int = constants.DEFAULT_UNDERTIME_TOLERANCE_MINUTES
    bio_out_tolerance_minutes: int = constants.DEFAULT_BIO_OUT_TOLERANCE_MINUTES
    point_values: Mapping[ViolationType, Decimal] = field(default_factory=_default_point_values)
    sro_months: int = constants.DEFAULT_SRO_MONTHS
    whole_day_sro_months: int = constants.DEFAULT_WHOLE_DAY_SRO_MONTHS
    gbro_window_days: int = constants.DEFAULT_GBRO_WINDOW_DAYS
    gbro_batch_size: int = constants.DEFAULT_GBRO_BATCH_SIZE
    scan_retention_days: int = constants.DEFAULT_SCAN_RETENTION_DAYS
    expiration_lock_name: str = constants.DEFAULT_EXPIRATION_LOCK_NAME
    expiration_lock_timeout_seconds: int = constants.DEFAULT_EXPIRATION_LOCK_TIMEOUT_SECONDS

    def point_value(self, violation: ViolationType) -> Decimal:
        return Decimal(self.point_values[violation])

    def sro_months_for(self, violation: ViolationType) -> int:
        if violation == ViolationType.WHOLE_DAY_ABSENCE:
            return self.whole_day_sro_months
        return self.sro_months

    @staticmethod
    def is_gbro_eligible(violation: ViolationType) -> bool:
        # NCNS/FTN never roll off through good behavior.
        return violation != ViolationType.WHOLE_DAY_ABSENCE

    @classmethod
    def from_settings(cls, settings: ModuleType) -> "EnginePolicy":
        """Build a policy from a settings module, keeping defaults for missing names."""

        point_values = _default_point_values()
        for key, value in dict(getattr(settings, "POINT_VALUES", {}) or {}).items():
            point_values[ViolationType(key)] = Decimal(str(value))

        def _int(name: str, default: int) -> int:
            return int(getattr(settings, name, default))

        return cls(
            half_day_threshold_minutes=_int("HALF_DAY_THRESHOLD_MINUTES", constants.DEFAULT_HALF_DAY_THRESHOLD_MINUTES),
            undertime_more_than_hour_minutes=_int(
                "UNDERTIME_MORE_THAN_HOUR_MINUTES", constants.DEFAULT_UNDERTIME_MORE_THAN_HOUR_MINUTES
            ),
            undertime_tolerance_minutes=_int("UNDERTIME_TOLERANCE_MINUTES", constants.DEFAULT_UNDERTIME_TOLERANCE_MINUTES),
            bio_out_tolerance_minutes=_int("BIO_OUT_TOLERANCE_MINUTES", constants.DEFAULT_BIO_OUT_TOLERANCE_MINUTES),
            point_values=point_values,
            sro_months=_int("SRO_MONTHS", constants.DEFAULT_SRO_MONTHS),
            whole_day_sro_months=_int("WHOLE_DAY_SRO_MONTHS", constants.DEFAULT_WHOLE_DAY_SRO_MONTHS),
            gbro_window_days=_int("GBRO_WINDOW_DAYS", constants.DEFAULT_GBRO_WINDOW_DAYS),
            gbro_batch_size=_int("GBRO_BATCH_SIZE", constants.DEFAULT_GBRO_BATCH_SIZE),
            scan_retention_days=_int("SCAN_RETENTION_DAYS", constants.DEFAULT_SCAN_RETENTION_DAYS),
            expiration_lock_name=str(getattr(settings, "EXPIRATION_LOCK_NAME", constants.DEFAULT_EXPIRATION_LOCK_NAME)),
            expiration_lock_timeout_seconds=_int(
                "EXPIRATION_LOCK_TIMEOUT_SECONDS", constants.DEFAULT_EXPIRATION_LOCK_TIMEOUT_SECONDS
            ),
        )
