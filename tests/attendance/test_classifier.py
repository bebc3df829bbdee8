from __future__ import annotations

from datetime import date, datetime

import pytest

from src.attendance_points.attendance_points.attendance.classifier import StatusClassifier
from src.attendance_points.attendance_points.attendance.model import AttendanceFlags
from src.attendance_points.attendance_points.core.enums import ShiftStatus

WED = date(2025, 1, 15)
AFTER_CLOSE = datetime(2025, 1, 15, 20, 0)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 1, 15, hour, minute)


@pytest.fixture
def classify(make_schedule):
    classifier = StatusClassifier()
    schedule = make_schedule()

    def _classify(time_in=None, time_out=None, *, now=AFTER_CLOSE, flags=AttendanceFlags(), shift_date=WED, sched=schedule):
        return classifier.classify(
            schedule=sched,
            shift_date=shift_date,
            time_in=time_in,
            time_out=time_out,
            now=now,
            flags=flags,
        )

    return _classify


def test_missing_schedule_needs_review(classify):
    decision = classify(at(8), at(17), sched=None)
    assert decision.status == ShiftStatus.NEEDS_MANUAL_REVIEW


def test_non_work_day_wins_over_everything(classify):
    decision = classify(shift_date=date(2025, 1, 18), flags=AttendanceFlags(on_leave=True))
    assert decision.status == ShiftStatus.NON_WORK_DAY


def test_leave_and_advisory(classify):
    assert classify(flags=AttendanceFlags(on_leave=True)).status == ShiftStatus.ON_LEAVE
    assert classify(flags=AttendanceFlags(advised_absence=True)).status == ShiftStatus.ADVISED_ABSENCE


@pytest.mark.parametrize("flags", [AttendanceFlags(on_leave=True), AttendanceFlags(advised_absence=True)])
def test_scans_on_an_excused_day_go_to_review(classify, flags):
    assert classify(at(8), at(17), flags=flags).status == ShiftStatus.NEEDS_MANUAL_REVIEW


def test_no_scans_is_ncns(classify):
    decision = classify()
    assert decision.status == ShiftStatus.NCNS
    assert decision.failure_to_notify is False


def test_expected_advisory_marks_failure_to_notify(classify):
    decision = classify(flags=AttendanceFlags(advisory_expected=True))
    assert decision.status == ShiftStatus.NCNS
    assert decision.failure_to_notify is True


def test_open_window_without_time_out_is_provisional(classify):
    decision = classify(at(8, 30), now=at(18, 59))
    assert decision.status == ShiftStatus.FAILED_BIO_OUT
    assert decision.is_provisional is True
    assert decision.tardy_minutes == 30


def test_closed_window_without_time_out_is_final(classify):
    decision = classify(at(8, 0), now=at(19, 0))
    assert decision.status == ShiftStatus.FAILED_BIO_OUT
    assert decision.is_provisional is False


def test_late_arrival_without_time_out_keeps_tardy_after_close(classify):
    decision = classify(at(8, 30), now=at(19, 0))
    assert decision.status == ShiftStatus.TARDY
    assert decision.is_provisional is False


def test_missing_time_in(classify):
    assert classify(None, at(17)).status == ShiftStatus.FAILED_BIO_IN


@pytest.mark.parametrize(
    "time_in,status,minutes",
    [
        (at(8, 15), ShiftStatus.ON_TIME, 15),
        (at(8, 16), ShiftStatus.TARDY, 16),
        (at(12, 0), ShiftStatus.TARDY, 240),
        (at(12, 1), ShiftStatus.HALF_DAY_ABSENCE, 241),
    ],
)
def test_lateness_thresholds(classify, time_in, status, minutes):
    decision = classify(time_in, at(17))
    assert decision.status == status
    assert decision.tardy_minutes == minutes


@pytest.mark.parametrize(
    "time_out,status,minutes",
    [
        (at(17, 0), ShiftStatus.ON_TIME, 0),
        (at(16, 30), ShiftStatus.UNDERTIME, 30),
        (at(16, 0), ShiftStatus.UNDERTIME, 60),
        (at(15, 59), ShiftStatus.UNDERTIME_MORE_THAN_HOUR, 61),
    ],
)
def test_undertime_thresholds(classify, time_out, status, minutes):
    decision = classify(at(8), time_out)
    assert decision.status == status
    assert decision.undertime_minutes == minutes


def test_tardy_takes_precedence_over_undertime(classify):
    decision = classify(at(8, 40), at(16, 0))
    assert decision.status == ShiftStatus.TARDY
    assert decision.tardy_minutes == 40
    assert decision.undertime_minutes == 60
    assert decision.secondary_status == ShiftStatus.UNDERTIME


def test_late_and_more_than_an_hour_early_keeps_both(classify):
    decision = classify(at(8, 30), at(14, 0))
    assert decision.status == ShiftStatus.TARDY
    assert decision.secondary_status == ShiftStatus.UNDERTIME_MORE_THAN_HOUR
    assert decision.undertime_minutes == 180


def test_secondary_status_only_accompanies_a_late_arrival(classify):
    assert classify(at(8, 30), at(17, 0)).secondary_status is None
    assert classify(at(8, 0), at(14, 0)).secondary_status is None


def test_early_arrival_and_late_departure_are_on_time(classify):
    decision = classify(at(7, 30), at(18, 0))
    assert decision.status == ShiftStatus.ON_TIME
    assert decision.tardy_minutes == 0


def test_classification_is_repeatable(classify):
    assert classify(at(8, 20), at(17)) == classify(at(8, 20), at(17))
