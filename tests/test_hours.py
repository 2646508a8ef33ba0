"""
Tests for business hours evaluation.
"""

import pendulum
import pytest

from munchkit.domain.hours import (
    CLOSED,
    DayOfWeek,
    Interval,
    OpenState,
    Schedule,
    format_clock,
    grouped,
    is_open,
    parse_clock,
    today,
)

TZ = "Asia/Singapore"


def at(day: int, hour: int, minute: int = 0):
    """Local time in the week of Monday 2024-11-25."""
    return pendulum.datetime(2024, 11, 25, hour, minute, tz=TZ).add(days=day - 1)


MON, TUE, WED, THU, FRI, SAT, SUN = range(1, 8)


def interval(day: DayOfWeek, open_text: str, close_text: str) -> Interval:
    return Interval(day=day, open_minute=parse_clock(open_text), close_minute=parse_clock(close_text))


class TestIsOpen:
    """Tests for open state classification."""

    def test_midnight_rollover_across_two_rows(self):
        """A venue open 22:00-02:00 is stored as a truncated row and a next-day row."""
        schedule = Schedule((
            interval(DayOfWeek.FRI, "22:00", "23:59"),
            interval(DayOfWeek.SAT, "00:00", "02:00"),
        ))

        assert is_open(schedule, at(FRI, 23, 30)) == OpenState.OPEN
        assert is_open(schedule, at(SAT, 1, 0)) == OpenState.OPEN
        assert is_open(schedule, at(SAT, 3, 0)) == OpenState.CLOSED

    def test_lead_windows(self):
        """Opening and closing lead windows around a day interval."""
        schedule = Schedule((interval(DayOfWeek.MON, "09:00", "17:00"),))

        assert is_open(schedule, at(MON, 8, 45), opening_lead_minutes=30) == OpenState.OPENING
        assert is_open(schedule, at(MON, 16, 45), closing_lead_minutes=30) == OpenState.CLOSING
        assert is_open(schedule, at(MON, 12, 0)) == OpenState.OPEN
        assert is_open(schedule, at(MON, 18, 0)) == OpenState.CLOSED

    def test_no_lead_means_no_opening_or_closing(self):
        schedule = Schedule((interval(DayOfWeek.MON, "09:00", "17:00"),))

        assert is_open(schedule, at(MON, 8, 45)) == OpenState.CLOSED
        assert is_open(schedule, at(MON, 16, 59)) == OpenState.OPEN

    def test_half_open_boundaries(self):
        """Open at the open minute, closed at the close minute, leads inclusive at the lower end."""
        schedule = Schedule((interval(DayOfWeek.MON, "09:00", "17:00"),))

        assert is_open(schedule, at(MON, 9, 0)) == OpenState.OPEN
        assert is_open(schedule, at(MON, 17, 0)) == OpenState.CLOSED
        assert is_open(schedule, at(MON, 8, 30), opening_lead_minutes=30) == OpenState.OPENING
        assert is_open(schedule, at(MON, 8, 29), opening_lead_minutes=30) == OpenState.CLOSED
        assert is_open(schedule, at(MON, 16, 30), closing_lead_minutes=30) == OpenState.CLOSING
        assert is_open(schedule, at(MON, 16, 29), closing_lead_minutes=30) == OpenState.OPEN

    def test_empty_schedule_is_unknown(self):
        """Without any intervals the state is unknown for any instant."""
        for moment in (at(MON, 0), at(WED, 12), at(SUN, 23, 59)):
            assert is_open(Schedule(), moment) == OpenState.UNKNOWN

    def test_other_days_only_is_closed(self):
        schedule = Schedule((interval(DayOfWeek.TUE, "09:00", "17:00"),))

        assert is_open(schedule, at(MON, 12, 0)) == OpenState.CLOSED

    def test_single_overnight_row_is_open_until_end_of_day_only(self):
        """A row closing before it opens does not carry into the next day."""
        schedule = Schedule((interval(DayOfWeek.FRI, "22:00", "02:00"),))

        assert is_open(schedule, at(FRI, 23, 30)) == OpenState.OPEN
        assert is_open(schedule, at(FRI, 21, 0)) == OpenState.CLOSED
        assert is_open(schedule, at(SAT, 1, 0)) == OpenState.CLOSED

    def test_overnight_row_closes_relative_to_midnight(self):
        schedule = Schedule((interval(DayOfWeek.FRI, "22:00", "02:00"),))

        assert is_open(schedule, at(FRI, 23, 45), closing_lead_minutes=30) == OpenState.CLOSING
        assert is_open(schedule, at(FRI, 23, 0), closing_lead_minutes=30) == OpenState.OPEN

    def test_closing_wins_over_open_of_another_interval(self):
        schedule = Schedule((
            interval(DayOfWeek.TUE, "11:00", "14:00"),
            interval(DayOfWeek.TUE, "13:00", "22:00"),
        ))

        state = is_open(schedule, at(TUE, 13, 45), closing_lead_minutes=30)

        assert state == OpenState.CLOSING

    def test_open_wins_over_opening_of_another_interval(self):
        schedule = Schedule((
            interval(DayOfWeek.TUE, "11:00", "14:00"),
            interval(DayOfWeek.TUE, "14:10", "22:00"),
        ))

        state = is_open(schedule, at(TUE, 13, 50), opening_lead_minutes=30)

        assert state == OpenState.OPEN

    def test_unknown_day_rows_never_match(self):
        schedule = Schedule((interval(DayOfWeek.UNKNOWN, "00:00", "24:00"),))

        assert is_open(schedule, at(WED, 12, 0)) == OpenState.CLOSED

    def test_negative_lead_raises(self):
        schedule = Schedule((interval(DayOfWeek.MON, "09:00", "17:00"),))

        with pytest.raises(ValueError, match="Lead minutes"):
            is_open(schedule, at(MON, 12, 0), opening_lead_minutes=-5)


class TestToday:
    """Tests for today's formatted hours."""

    def test_multiple_intervals_joined(self):
        schedule = Schedule((
            interval(DayOfWeek.TUE, "18:00", "22:00"),
            interval(DayOfWeek.TUE, "11:00", "14:00"),
        ))

        assert today(schedule, at(TUE, 9, 0)) == "11:00am - 2:00pm, 6:00pm - 10:00pm"

    def test_no_intervals_today_is_closed(self):
        schedule = Schedule((interval(DayOfWeek.TUE, "11:00", "14:00"),))

        assert today(schedule, at(WED, 9, 0)) == "Closed"
        assert today(Schedule(), at(WED, 9, 0)) == "Closed"

    @pytest.mark.parametrize("close_text", ["24:00", "23:59"])
    def test_end_of_day_renders_as_midnight(self, close_text):
        schedule = Schedule((interval(DayOfWeek.FRI, "22:00", close_text),))

        assert today(schedule, at(FRI, 12, 0)) == "10:00pm - Midnight"

    def test_early_morning_row(self):
        schedule = Schedule((interval(DayOfWeek.SAT, "00:00", "02:00"),))

        assert today(schedule, at(SAT, 12, 0)) == "12:00am - 2:00am"


class TestGrouped:
    """Tests for the grouped day -> hours view."""

    def test_lookup_defaults_to_closed(self):
        view = grouped(Schedule((
            interval(DayOfWeek.MON, "09:00", "17:00"),
            interval(DayOfWeek.TUE, "18:00", "22:00"),
            interval(DayOfWeek.TUE, "11:00", "14:00"),
        )))

        assert view[DayOfWeek.MON] == "9:00am - 5:00pm"
        assert view[DayOfWeek.TUE] == "11:00am - 2:00pm, 6:00pm - 10:00pm"
        assert view[DayOfWeek.WED] == CLOSED
        assert view["tue"] == view[DayOfWeek.TUE]

    def test_only_days_with_intervals_are_materialized(self):
        view = grouped(Schedule((interval(DayOfWeek.MON, "09:00", "17:00"),)))

        assert len(view) == 1
        assert list(view) == [DayOfWeek.MON]
        assert DayOfWeek.MON in view
        assert DayOfWeek.SUN not in view

    def test_grouped_is_memoized(self):
        schedule = Schedule((interval(DayOfWeek.MON, "09:00", "17:00"),))

        assert schedule.grouped is schedule.grouped

    def test_today_day_time_range(self):
        view = grouped(Schedule((interval(DayOfWeek.MON, "09:00", "17:00"),)))

        assert view.today_day_time_range(at(MON, 8, 0)) == "Monday: 9:00am - 5:00pm"
        assert view.today_day_time_range(at(THU, 8, 0)) == "Thursday: Closed"

    def test_is_open_delegates_to_schedule(self):
        view = grouped(Schedule((interval(DayOfWeek.MON, "09:00", "17:00"),)))

        assert view.is_open(at(MON, 16, 45), closing_lead_minutes=30) == OpenState.CLOSING


class TestInterval:
    """Tests for Interval invariants."""

    @pytest.mark.parametrize(
        "open_minute,close_minute",
        [(-1, 60), (1440, 60), (60, 0), (60, 1441), (600, 600)],
    )
    def test_invalid_minutes_raise(self, open_minute, close_minute):
        with pytest.raises(ValueError):
            Interval(day=DayOfWeek.MON, open_minute=open_minute, close_minute=close_minute)

    def test_overnight_effective_close(self):
        overnight = interval(DayOfWeek.FRI, "22:00", "02:00")
        regular = interval(DayOfWeek.FRI, "09:00", "17:00")

        assert overnight.is_overnight
        assert overnight.effective_close == 1440
        assert not regular.is_overnight
        assert regular.effective_close == 17 * 60

    def test_schedule_sorts_by_open_minute(self):
        late = interval(DayOfWeek.TUE, "18:00", "22:00")
        early = interval(DayOfWeek.TUE, "11:00", "14:00")

        assert Schedule((late, early)).intervals == (early, late)


class TestDayOfWeek:
    """Tests for day decoding and derivation."""

    def test_parse_is_defensive(self):
        assert DayOfWeek.parse("mon") == DayOfWeek.MON
        assert DayOfWeek.parse(" SUN ") == DayOfWeek.SUN
        assert DayOfWeek.parse("funday") == DayOfWeek.UNKNOWN
        assert DayOfWeek.parse(None) == DayOfWeek.UNKNOWN
        assert DayOfWeek.parse(3) == DayOfWeek.UNKNOWN

    def test_of_uses_monday_first(self):
        assert DayOfWeek.of(at(MON, 12)) == DayOfWeek.MON
        assert DayOfWeek.of(at(SUN, 12)) == DayOfWeek.SUN

    def test_add_days(self):
        assert DayOfWeek.add(at(MON, 12), 1) == DayOfWeek.TUE
        assert DayOfWeek.add(at(SUN, 12), 1) == DayOfWeek.MON
        assert DayOfWeek.add(at(MON, 12), -1) == DayOfWeek.SUN

    def test_text(self):
        assert DayOfWeek.WED.text == "Wed"
        assert DayOfWeek.UNKNOWN.text == "Day"


class TestClock:
    """Tests for clock parsing and formatting."""

    def test_parse_clock(self):
        assert parse_clock("00:00") == 0
        assert parse_clock("09:30") == 570
        assert parse_clock("23:59") == 1439
        assert parse_clock("24:00") == 1440

    @pytest.mark.parametrize("text", ["24:01", "25:00", "12:60", "9:5", "noon", "", "12-00"])
    def test_parse_clock_rejects_malformed(self, text):
        with pytest.raises(ValueError, match="Invalid time"):
            parse_clock(text)

    def test_format_clock(self):
        assert format_clock(0) == "12:00am"
        assert format_clock(11 * 60 + 5) == "11:05am"
        assert format_clock(12 * 60) == "12:00pm"
        assert format_clock(18 * 60 + 30) == "6:30pm"
