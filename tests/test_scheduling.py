"""Tests for staff schedule resolution."""

from datetime import date, datetime, timedelta, timezone

from salon_app.models import StaffSchedule
from salon_app.scheduling import ScheduleMatch, is_specific_match, resolve_schedule

HCM = "Asia/Ho_Chi_Minh"
MONDAY = 1


def recurring(dow, start="09:00", end="18:00", **kw):
    return StaffSchedule(staff_id=1, day_of_week=dow, start_time=start, end_time=end, **kw)


def specific(day, start="12:00", end="16:00", **kw):
    return StaffSchedule(staff_id=1, date=day, start_time=start, end_time=end, **kw)


class TestRecurringSchedules:
    """Weekday schedules apply to every occurrence of that weekday."""

    def test_monday_schedule_matches_every_monday(self):
        schedules = [recurring(MONDAY)]
        monday = date(2026, 1, 19)

        for weeks in range(6):
            resolved = resolve_schedule(schedules, monday + timedelta(weeks=weeks), HCM)
            assert resolved.match == ScheduleMatch.recurring
            assert resolved.start_time == "09:00"
            assert resolved.end_time == "18:00"

    def test_monday_schedule_does_not_match_other_days(self):
        schedules = [recurring(MONDAY)]

        for offset in range(1, 7):
            resolved = resolve_schedule(schedules, date(2026, 1, 19) + timedelta(days=offset), HCM)
            assert resolved.match == ScheduleMatch.none
            assert resolved.schedule is None
            assert not resolved.is_available

    def test_sunday_is_zero(self):
        resolved = resolve_schedule([recurring(0)], date(2026, 3, 8), HCM)

        assert resolved.day_of_week == 0
        assert resolved.match == ScheduleMatch.recurring

    def test_dated_entry_is_not_treated_as_recurring(self):
        # a date override that also carries a weekday must not leak onto other weeks
        override = StaffSchedule(
            staff_id=1, date=date(2026, 1, 12), day_of_week=MONDAY, start_time="10:00", end_time="11:00"
        )

        resolved = resolve_schedule([override], date(2026, 1, 19), HCM)

        assert resolved.match == ScheduleMatch.none


class TestOverridePrecedence:
    """Specific-date entries beat recurring entries."""

    def test_specific_wins_when_listed_last(self):
        schedules = [recurring(2), specific(date(2026, 1, 20))]

        resolved = resolve_schedule(schedules, date(2026, 1, 20), HCM)

        assert resolved.match == ScheduleMatch.specific
        assert resolved.start_time == "12:00"

    def test_specific_wins_when_listed_first(self):
        schedules = [specific(date(2026, 1, 20)), recurring(2)]

        resolved = resolve_schedule(schedules, date(2026, 1, 20), HCM)

        assert resolved.match == ScheduleMatch.specific
        assert resolved.end_time == "16:00"

    def test_recurring_used_on_days_without_override(self):
        schedules = [specific(date(2026, 1, 20)), recurring(2)]

        resolved = resolve_schedule(schedules, date(2026, 1, 27), HCM)

        assert resolved.match == ScheduleMatch.recurring
        assert resolved.start_time == "09:00"

    def test_override_on_non_working_weekday(self):
        resolved = resolve_schedule([recurring(MONDAY), specific(date(2026, 1, 24))], date(2026, 1, 24), HCM)

        assert resolved.match == ScheduleMatch.specific

    def test_duplicate_overrides_pick_first_in_input_order(self):
        first = specific(date(2026, 1, 20), start="08:00")
        second = specific(date(2026, 1, 20), start="10:00")

        resolved = resolve_schedule([first, second], date(2026, 1, 20), HCM)

        assert resolved.schedule is first


class TestSalonLocalDay:
    """Same-day and weekday comparisons use the salon's calendar."""

    def test_stored_instant_of_local_midnight_matches_that_day_only(self):
        # local midnight 2026-01-20 in Ho Chi Minh City (UTC+7) as a UTC instant
        stored = datetime(2026, 1, 19, 17, 0, tzinfo=timezone.utc)
        schedules = [specific(stored)]

        assert resolve_schedule(schedules, date(2026, 1, 20), HCM).match == ScheduleMatch.specific
        assert resolve_schedule(schedules, date(2026, 1, 19), HCM).match == ScheduleMatch.none
        assert resolve_schedule(schedules, date(2026, 1, 21), HCM).match == ScheduleMatch.none

    def test_naive_stored_instant_is_read_as_utc(self):
        stored = datetime(2026, 1, 19, 17, 0)

        assert is_specific_match(specific(stored), date(2026, 1, 20), HCM)
        assert not is_specific_match(specific(stored), date(2026, 1, 19), HCM)

    def test_plain_stored_date_is_a_calendar_day(self):
        assert is_specific_match(specific(date(2026, 1, 20)), date(2026, 1, 20), HCM)
        assert is_specific_match(specific(date(2026, 1, 20)), date(2026, 1, 20), "America/New_York")

    def test_weekday_uses_local_day_not_utc(self):
        # 2026-01-20 23:30 in New York is already Wednesday 04:30 UTC
        instant = datetime(2026, 1, 21, 4, 30, tzinfo=timezone.utc)
        schedules = [recurring(2, start="10:00"), recurring(3, start="11:00")]

        resolved = resolve_schedule(schedules, instant, "America/New_York")

        assert resolved.local_date == date(2026, 1, 20)
        assert resolved.day_of_week == 2
        assert resolved.start_time == "10:00"

    def test_day_start_is_local_midnight(self):
        resolved = resolve_schedule([], date(2026, 1, 20), HCM)

        assert resolved.day_start.astimezone(timezone.utc) == datetime(2026, 1, 19, 17, 0, tzinfo=timezone.utc)


class TestFailureSemantics:

    def test_no_schedules_is_not_an_error(self):
        resolved = resolve_schedule([], date(2026, 1, 20), HCM)

        assert resolved.match == ScheduleMatch.none
        assert resolved.working_hours() is None
        assert resolved.start_time is None

    def test_none_schedule_collection(self):
        assert resolve_schedule(None, date(2026, 1, 20), HCM).match == ScheduleMatch.none

    def test_missing_timezone_uses_default(self):
        resolved = resolve_schedule([recurring(2)], date(2026, 1, 20), None)

        assert resolved.timezone == "Asia/Ho_Chi_Minh"
        assert resolved.match == ScheduleMatch.recurring

    def test_invalid_timezone_falls_back_without_raising(self):
        for bad in ("Not/AZone", "", "../etc/passwd", 42, "Asia", "America", "x" * 300):
            resolved = resolve_schedule([recurring(2)], date(2026, 1, 20), bad)
            assert resolved.timezone == "Asia/Ho_Chi_Minh"
            assert resolved.match == ScheduleMatch.recurring

    def test_dict_records_are_accepted(self):
        schedules = [
            {"date": None, "day_of_week": 2, "start_time": "09:00", "end_time": "17:00"},
            {"date": date(2026, 1, 20), "day_of_week": None, "start_time": "13:00", "end_time": "15:00",
             "break_start": "14:00", "break_end": "14:15"},
        ]

        resolved = resolve_schedule(schedules, date(2026, 1, 20), HCM)

        assert resolved.match == ScheduleMatch.specific
        assert resolved.working_hours() == {
            "start": "13:00",
            "end": "15:00",
            "break_start": "14:00",
            "break_end": "14:15",
        }
