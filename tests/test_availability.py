"""Tests for slot generation on top of resolved schedules."""

from datetime import date, datetime, timedelta

from salon_app.availability import available_times, slot_conflict, total_duration
from salon_app.models import Appointment, Service, StaffSchedule
from salon_app.scheduling import resolve_schedule
from salon_app.timezone import salon_local_to_utc

HCM = "Asia/Ho_Chi_Minh"
MONDAY = date(2030, 1, 7)
LONG_AGO = datetime(2020, 1, 1)


def monday_schedule(**kw):
    fields = {"staff_id": 1, "day_of_week": 1, "start_time": "09:00", "end_time": "12:00"}
    fields.update(kw)
    return resolve_schedule([StaffSchedule(**fields)], MONDAY, HCM)


def appointment(local_start, minutes=30, status="CONFIRMED"):
    starts_at = salon_local_to_utc(MONDAY, local_start, HCM)
    return Appointment(
        salon_id=1,
        staff_id=1,
        service_id=1,
        customer_name="Lan",
        customer_phone="0901",
        starts_at=starts_at,
        ends_at=starts_at + timedelta(minutes=minutes),
        status=status,
    )


class TestTotalDuration:

    def test_defaults_to_service_durations(self):
        services = [Service(id=1, salon_id=1, name="Cut", duration=30), Service(id=2, salon_id=1, name="Wash", duration=15)]

        assert total_duration(services) == 45

    def test_staff_override_wins(self):
        services = [Service(id=1, salon_id=1, name="Cut", duration=30), Service(id=2, salon_id=1, name="Wash", duration=15)]

        assert total_duration(services, {1: 20, 2: None}) == 35


class TestSlotConflict:

    def test_no_schedule(self):
        resolved = resolve_schedule([], MONDAY, HCM)

        assert slot_conflict(resolved, 9 * 60, 30) == "no_schedule"

    def test_outside_hours(self):
        resolved = monday_schedule()

        assert slot_conflict(resolved, 8 * 60 + 30, 30) == "outside_hours"
        assert slot_conflict(resolved, 11 * 60 + 45, 30) == "outside_hours"
        assert slot_conflict(resolved, 11 * 60 + 30, 30) is None

    def test_break(self):
        resolved = monday_schedule(break_start="10:00", break_end="10:30")

        assert slot_conflict(resolved, 9 * 60 + 45, 30) == "break"
        assert slot_conflict(resolved, 9 * 60 + 30, 30) is None

    def test_booked_and_cancelled(self):
        resolved = monday_schedule()

        assert slot_conflict(resolved, 10 * 60, 30, [appointment("10:15")]) == "booked"
        assert slot_conflict(resolved, 10 * 60, 30, [appointment("10:15", status="CANCELLED")]) is None
        assert slot_conflict(resolved, 10 * 60, 30, [appointment("10:30")]) is None


class TestAvailableTimes:

    def test_free_slots_skip_break_and_bookings(self):
        resolved = monday_schedule(break_start="10:00", break_end="10:30")

        times = available_times(resolved, 30, [appointment("11:00")], now=LONG_AGO)

        assert times == ["09:00", "09:30", "10:30", "11:30"]

    def test_details_report_reasons(self):
        resolved = monday_schedule(break_start="10:00", break_end="10:30")

        times = available_times(resolved, 30, [appointment("11:00")], now=LONG_AGO, include_details=True)

        assert {"time": "10:00", "available": False, "reason": "break"} in times
        assert {"time": "11:00", "available": False, "reason": "booked"} in times
        assert {"time": "09:00", "available": True} in times
        # outside working hours is never listed
        assert all(t["time"] >= "09:00" and t["time"] < "12:00" for t in times)

    def test_past_slots(self):
        resolved = monday_schedule()
        now = salon_local_to_utc(MONDAY, "10:45", HCM)

        assert available_times(resolved, 30, now=now) == ["11:00", "11:30"]
        detailed = available_times(resolved, 30, now=now, include_details=True)
        assert {"time": "10:30", "available": False, "reason": "past"} in detailed

    def test_long_service_must_fit(self):
        resolved = monday_schedule()

        assert available_times(resolved, 90, now=LONG_AGO) == ["09:00", "09:30", "10:00", "10:30"]

    def test_unresolved_day_has_no_slots(self):
        resolved = resolve_schedule([], MONDAY, HCM)

        assert available_times(resolved, 30, now=LONG_AGO) == []
