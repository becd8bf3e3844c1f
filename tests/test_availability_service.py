"""Availability resolution and slot generation."""

from datetime import date, timedelta

import pytest

from app.models import HostAvailability
from app.services.availability.availability_service import AvailabilityService, day_of_week

# 2026-10-19 is a Monday
MONDAY = date(2026, 10, 19)


def window(start, end, dow=None, on=None, active=True):
    return HostAvailability(day_of_week=dow, date=on, start_time=start, end_time=end, is_active=active)


class TestDayOfWeek:

    def test_sunday_is_zero(self):
        assert day_of_week(MONDAY - timedelta(days=1)) == 0
        assert day_of_week(MONDAY) == 1
        assert day_of_week(MONDAY + timedelta(days=5)) == 6


class TestResolveWindows:

    def test_weekly_records_apply_on_matching_weekday(self):
        records = [window("09:00", "12:00", dow=1), window("15:00", "18:00", dow=2)]
        resolved = AvailabilityService.resolve_windows(MONDAY, records)
        assert [(r.start_time, r.end_time) for r in resolved] == [("09:00", "12:00")]

    def test_date_specific_record_shadows_weekly(self):
        records = [
            window("09:00", "12:00", dow=1),
            window("16:00", "17:00", on=MONDAY),
        ]
        resolved = AvailabilityService.resolve_windows(MONDAY, records)
        assert [(r.start_time, r.end_time) for r in resolved] == [("16:00", "17:00")]

        # Other Mondays keep the weekly window
        next_week = AvailabilityService.resolve_windows(MONDAY + timedelta(days=7), records)
        assert [(r.start_time, r.end_time) for r in next_week] == [("09:00", "12:00")]

    def test_inactive_records_are_ignored(self):
        records = [
            window("09:00", "12:00", dow=1),
            window("16:00", "17:00", on=MONDAY, active=False),
        ]
        resolved = AvailabilityService.resolve_windows(MONDAY, records)
        assert [(r.start_time, r.end_time) for r in resolved] == [("09:00", "12:00")]

    def test_no_records_means_unavailable(self):
        assert AvailabilityService.resolve_windows(MONDAY, []) == []
        assert AvailabilityService.resolve_windows(MONDAY, [window("09:00", "12:00", dow=3)]) == []


class TestGenerateSlots:

    def test_one_hour_window_gives_four_slots(self):
        assert AvailabilityService.generate_slots("09:00", "10:00", 15) == ["09:00", "09:15", "09:30", "09:45"]

    def test_partial_increment_at_end_is_dropped(self):
        assert AvailabilityService.generate_slots("09:00", "09:50", 15) == ["09:00", "09:15", "09:30"]

    def test_window_shorter_than_increment_is_empty(self):
        assert AvailabilityService.generate_slots("09:00", "09:10", 15) == []

    def test_slot_count_is_floor_of_window_over_increment(self):
        for end, expected in (("11:00", 8), ("11:14", 8), ("11:15", 9)):
            assert len(AvailabilityService.generate_slots("09:00", end, 15)) == expected

    def test_non_positive_increment_rejected(self):
        with pytest.raises(ValueError):
            AvailabilityService.generate_slots("09:00", "10:00", 0)


class TestSlotsForDate:

    def test_windows_are_merged_sorted_and_deduplicated(self):
        records = [
            window("10:00", "11:00", dow=1),
            window("09:30", "10:30", dow=1),
        ]
        slots = AvailabilityService.slots_for_date(MONDAY, records, increment=15)
        assert slots == ["09:30", "09:45", "10:00", "10:15", "10:30", "10:45"]

    def test_duration_keeps_only_slots_that_fit(self):
        records = [window("09:00", "10:00", dow=1)]
        slots = AvailabilityService.slots_for_date(MONDAY, records, increment=15, duration=30)
        assert slots == ["09:00", "09:15", "09:30"]

    def test_free_consultation_duration_does_not_filter(self):
        records = [window("09:00", "10:00", dow=1)]
        assert len(AvailabilityService.slots_for_date(MONDAY, records, increment=15, duration=0)) == 4

    def test_overridden_date_with_short_window(self):
        records = [window("09:00", "17:00", dow=1), window("09:00", "09:10", on=MONDAY)]
        assert AvailabilityService.slots_for_date(MONDAY, records, increment=15) == []


class TestAvailableDates:

    def test_only_dates_with_slots(self):
        records = [window("09:00", "10:00", dow=1), window("09:00", "10:00", dow=3)]
        dates = AvailabilityService.available_dates(records, MONDAY, MONDAY + timedelta(days=6), increment=15)
        assert dates == [MONDAY, MONDAY + timedelta(days=2)]

    def test_duration_longer_than_window_excludes_day(self):
        records = [window("09:00", "09:30", dow=1)]
        assert AvailabilityService.available_dates(records, MONDAY, MONDAY, increment=15, duration=60) == []


class TestOverlaps:

    def test_adjacent_intervals_do_not_overlap(self):
        assert not AvailabilityService.overlaps("10:00", 30, "09:30", 30)
        assert not AvailabilityService.overlaps("09:00", 30, "09:30", 30)

    def test_overlapping_intervals(self):
        assert AvailabilityService.overlaps("09:15", 30, "09:30", 30)
        assert AvailabilityService.overlaps("09:30", 15, "09:00", 60)
