from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest

from src.attendance_points.attendance_points.core.constants import WEEKDAY_NAMES
from src.attendance_points.attendance_points.core.enums import ShiftStatus
from src.attendance_points.attendance_points.scans.model import ScanEvent
from src.attendance_points.attendance_points.schedules.window import ShiftWindowResolver

START_TIMES = [time(m // 60, m % 60) for m in range(0, 24 * 60, 30)]


def _nine_hours_after(start: time) -> time:
    return (datetime.combine(date(2000, 1, 1), start) + timedelta(hours=9)).time()


@pytest.mark.parametrize(
    "time_in,time_out,crosses",
    [
        (time(8, 0), time(17, 0), False),
        (time(14, 30), time(23, 30), False),
        (time(15, 0), time(0, 0), True),
        (time(22, 0), time(7, 0), True),
        (time(2, 0), time(11, 0), True),
        (time(5, 0), time(14, 0), False),
    ],
)
def test_crosses_midnight_is_derived_from_times(time_in, time_out, crosses):
    assert ShiftWindowResolver(time_in, time_out).crosses_midnight is crosses


def test_night_shift_instance_spans_two_days():
    inst = ShiftWindowResolver(time(22, 0), time(7, 0)).instance_for(date(2025, 3, 4))

    assert inst.start == datetime(2025, 3, 4, 22, 0)
    assert inst.end == datetime(2025, 3, 5, 7, 0)


def test_graveyard_instance_starts_the_day_after_its_shift_date():
    inst = ShiftWindowResolver(time(1, 0), time(10, 0)).instance_for(date(2025, 3, 4))

    assert inst.start == datetime(2025, 3, 5, 1, 0)
    assert inst.end == datetime(2025, 3, 5, 10, 0)


def test_non_crossing_shift_uses_scan_date():
    resolver = ShiftWindowResolver(time(8, 0), time(17, 0))

    assert resolver.shift_date_for(datetime(2025, 3, 4, 23, 50)) == date(2025, 3, 4)
    assert resolver.shift_date_for(datetime(2025, 3, 5, 0, 10)) == date(2025, 3, 5)


@pytest.mark.parametrize(
    "scanned_at,expected",
    [
        (datetime(2025, 3, 4, 22, 5), date(2025, 3, 4)),
        (datetime(2025, 3, 5, 7, 3), date(2025, 3, 4)),
        # early arrival for the upcoming shift
        (datetime(2025, 3, 4, 21, 30), date(2025, 3, 4)),
        # late departure from the previous night
        (datetime(2025, 3, 5, 8, 30), date(2025, 3, 4)),
        (datetime(2025, 3, 5, 2, 0), date(2025, 3, 4)),
    ],
)
def test_night_shift_attribution(scanned_at, expected):
    resolver = ShiftWindowResolver(time(22, 0), time(7, 0))

    assert resolver.shift_date_for(scanned_at) == expected


def test_graveyard_scan_belongs_to_previous_day():
    resolver = ShiftWindowResolver(time(0, 30), time(9, 30))

    assert resolver.shift_date_for(datetime(2025, 3, 5, 0, 31)) == date(2025, 3, 4)
    assert resolver.shift_date_for(datetime(2025, 3, 5, 9, 35)) == date(2025, 3, 4)
    # early arrival before midnight still counts toward the upcoming shift
    assert resolver.shift_date_for(datetime(2025, 3, 4, 23, 55)) == date(2025, 3, 4)


@pytest.mark.parametrize("start", START_TIMES, ids=lambda t: t.strftime("%H%M"))
def test_nine_hour_shift_groups_into_one_record(start, schedules, records, attendance, make_schedule):
    schedules.schedules.append(
        make_schedule(time_in=start, time_out=_nine_hours_after(start), work_days=WEEKDAY_NAMES)
    )
    day = date(2025, 3, 5)
    scan_in = datetime.combine(day, start)
    scan_out = scan_in + timedelta(hours=9)

    attendance.process_upload([ScanEvent(1, scan_in)], now=scan_in + timedelta(minutes=1), batch_id="a")
    attendance.process_upload([ScanEvent(1, scan_out)], now=scan_out + timedelta(hours=3), batch_id="b")

    stored = list(records.by_id.values())
    assert len(stored) == 1
    record = stored[0]
    # Graveyard starts (00:00-04:59) are worked for the previous calendar day.
    expected = day - timedelta(days=1) if start.hour < 5 else day
    assert record.shift_date == expected
    assert record.time_in == scan_in
    assert record.time_out == scan_out
    assert record.status == ShiftStatus.ON_TIME
