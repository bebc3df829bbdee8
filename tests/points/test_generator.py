from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.attendance_points.attendance_points.core.enums import ShiftStatus, ViolationType
from src.attendance_points.attendance_points.core.policy import EnginePolicy
from src.attendance_points.attendance_points.points.generator import PointGenerator

CREATED = date(2025, 1, 16)


@pytest.mark.parametrize(
    "status,violation,value,expires,eligible",
    [
        (ShiftStatus.TARDY, ViolationType.TARDY, Decimal("0.25"), date(2025, 7, 15), True),
        (ShiftStatus.UNDERTIME, ViolationType.UNDERTIME, Decimal("0.25"), date(2025, 7, 15), True),
        (
            ShiftStatus.UNDERTIME_MORE_THAN_HOUR,
            ViolationType.UNDERTIME_MORE_THAN_HOUR,
            Decimal("0.50"),
            date(2025, 7, 15),
            True,
        ),
        (ShiftStatus.HALF_DAY_ABSENCE, ViolationType.HALF_DAY_ABSENCE, Decimal("0.50"), date(2025, 7, 15), True),
        (ShiftStatus.NCNS, ViolationType.WHOLE_DAY_ABSENCE, Decimal("1.00"), date(2026, 1, 15), False),
    ],
)
def test_violation_mapping(make_record, make_schedule, status, violation, value, expires, eligible):
    draft = PointGenerator().generate(make_record(status=status), make_schedule(), created_on=CREATED)

    assert draft.violation_type == violation
    assert draft.points == value
    assert draft.expires_at == expires
    assert draft.eligible_for_gbro is eligible
    assert draft.created_on == CREATED


@pytest.mark.parametrize(
    "status",
    [
        ShiftStatus.ON_TIME,
        ShiftStatus.FAILED_BIO_IN,
        ShiftStatus.FAILED_BIO_OUT,
        ShiftStatus.PRESENT_NO_BIO,
        ShiftStatus.ADVISED_ABSENCE,
        ShiftStatus.ON_LEAVE,
        ShiftStatus.NON_WORK_DAY,
        ShiftStatus.NEEDS_MANUAL_REVIEW,
    ],
)
def test_statuses_without_points(make_record, make_schedule, status):
    assert PointGenerator().generate(make_record(status=status), make_schedule(), created_on=CREATED) is None


def test_provisional_record_gets_no_point(make_record, make_schedule):
    record = make_record(status=ShiftStatus.TARDY, is_provisional=True)
    assert PointGenerator().generate(record, make_schedule(), created_on=CREATED) is None


def test_tardy_detail_text(make_record, make_schedule):
    record = make_record(status=ShiftStatus.TARDY, tardy_minutes=20, time_in=datetime(2025, 1, 15, 8, 20))

    draft = PointGenerator().generate(record, make_schedule(), created_on=CREATED)

    assert draft.violation_details == "Tardy: Arrived 20 minutes late. Scheduled time in: 08:00, Actual time in: 08:20."
    assert draft.tardy_minutes == 20


def test_undertime_detail_text(make_record, make_schedule):
    record = make_record(
        status=ShiftStatus.UNDERTIME_MORE_THAN_HOUR,
        undertime_minutes=75,
        time_in=datetime(2025, 1, 15, 8, 0),
        time_out=datetime(2025, 1, 15, 15, 45),
    )

    draft = PointGenerator().generate(record, make_schedule(), created_on=CREATED)

    assert draft.violation_details == (
        "Undertime (>1 Hour): Left 75 minutes early (more than 1 hour before scheduled end). "
        "Scheduled: 17:00, Actual: 15:45."
    )


def test_ncns_detail_text(make_record, make_schedule):
    draft = PointGenerator().generate(make_record(status=ShiftStatus.NCNS), make_schedule(), created_on=CREATED)

    assert draft.violation_details == (
        "No Call, No Show (NCNS): Employee did not report for work and did not provide prior notice. "
        "Scheduled: 08:00 - 17:00. No biometric scans recorded."
    )


def test_expiration_clamps_to_month_end(make_record, make_schedule):
    record = make_record(status=ShiftStatus.TARDY, shift_date=date(2025, 8, 31))

    draft = PointGenerator().generate(record, make_schedule(), created_on=CREATED)

    assert draft.expires_at == date(2026, 2, 28)


def test_point_values_come_from_policy(make_record, make_schedule):
    policy = EnginePolicy(point_values={**EnginePolicy().point_values, ViolationType.TARDY: Decimal("0.30")})

    draft = PointGenerator(policy).generate(make_record(status=ShiftStatus.TARDY), make_schedule(), created_on=CREATED)

    assert draft.points == Decimal("0.30")


def test_heavier_secondary_undertime_is_charged(make_record, make_schedule):
    record = make_record(
        status=ShiftStatus.TARDY,
        secondary_status=ShiftStatus.UNDERTIME_MORE_THAN_HOUR,
        tardy_minutes=30,
        undertime_minutes=180,
        time_in=datetime(2025, 1, 15, 8, 30),
        time_out=datetime(2025, 1, 15, 14, 0),
    )

    draft = PointGenerator().generate(record, make_schedule(), created_on=CREATED)

    assert draft.violation_type == ViolationType.UNDERTIME_MORE_THAN_HOUR
    assert draft.points == Decimal("0.50")
    assert draft.violation_details.startswith("Undertime (>1 Hour): Left 180 minutes early")
    assert draft.tardy_minutes == 30


@pytest.mark.parametrize(
    "status,secondary,violation",
    [
        (ShiftStatus.TARDY, ShiftStatus.UNDERTIME, ViolationType.TARDY),
        (ShiftStatus.HALF_DAY_ABSENCE, ShiftStatus.UNDERTIME_MORE_THAN_HOUR, ViolationType.HALF_DAY_ABSENCE),
    ],
)
def test_equal_values_stay_with_the_primary_status(make_record, make_schedule, status, secondary, violation):
    record = make_record(status=status, secondary_status=secondary)

    draft = PointGenerator().generate(record, make_schedule(), created_on=CREATED)

    assert draft.violation_type == violation
