from decimal import Decimal
from types import SimpleNamespace

from src.attendance_points.attendance_points.core.enums import ViolationType
from src.attendance_points.attendance_points.core.policy import EnginePolicy


def test_defaults():
    policy = EnginePolicy()

    assert policy.point_value(ViolationType.TARDY) == Decimal("0.25")
    assert policy.point_value(ViolationType.WHOLE_DAY_ABSENCE) == Decimal("1.00")
    assert policy.sro_months_for(ViolationType.TARDY) == 6
    assert policy.sro_months_for(ViolationType.WHOLE_DAY_ABSENCE) == 12
    assert not policy.is_gbro_eligible(ViolationType.WHOLE_DAY_ABSENCE)
    assert policy.is_gbro_eligible(ViolationType.UNDERTIME_MORE_THAN_HOUR)


def test_from_settings_overrides_only_given_names():
    settings = SimpleNamespace(
        POINT_VALUES={"tardy": "0.30"},
        GBRO_WINDOW_DAYS=45,
        HALF_DAY_THRESHOLD_MINUTES="180",
    )

    policy = EnginePolicy.from_settings(settings)

    assert policy.point_value(ViolationType.TARDY) == Decimal("0.30")
    assert policy.point_value(ViolationType.UNDERTIME) == Decimal("0.25")
    assert policy.gbro_window_days == 45
    assert policy.half_day_threshold_minutes == 180
    assert policy.sro_months == 6
