"""
Business hours evaluation.

Answers "is it open now", "what are today's hours" and "what are all hours
grouped by day" against a weekly schedule. Times are minutes since midnight
in the venue's local time.

Overnight operation arrives as two rows from the data producer: today's row
truncated at midnight and tomorrow's row starting at 00:00. A row whose close
is not after its open is therefore open from its open time until end of day
only; there is no interval type spanning two days.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from functools import cached_property
from typing import Dict, Iterator, List, Tuple

import pendulum

MINUTES_PER_DAY = 24 * 60

CLOSED = "Closed"
MIDNIGHT = "Midnight"


class DayOfWeek(str, Enum):
    """Day of the week as stored in the upstream hour rows."""

    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> "DayOfWeek":
        """
        Decode day text defensively.

        Unrecognized input yields UNKNOWN instead of raising, so one bad row
        never fails the whole record.
        """
        if isinstance(value, DayOfWeek):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.UNKNOWN
        return cls.UNKNOWN

    @classmethod
    def of(cls, moment: datetime) -> "DayOfWeek":
        """Return the day of week of a timestamp (Monday first)."""
        return _ISO_WEEKDAYS[moment.isoweekday()]

    @classmethod
    def add(cls, moment: datetime, days: int = 0) -> "DayOfWeek":
        """Return the day of week ``days`` after ``moment``."""
        return cls.of(pendulum.instance(moment).add(days=days))

    @property
    def text(self) -> str:
        """Short label, e.g. ``Mon``."""
        return _SHORT_NAMES[self]

    @property
    def full_name(self) -> str:
        return _FULL_NAMES[self]


_ISO_WEEKDAYS = {
    1: DayOfWeek.MON,
    2: DayOfWeek.TUE,
    3: DayOfWeek.WED,
    4: DayOfWeek.THU,
    5: DayOfWeek.FRI,
    6: DayOfWeek.SAT,
    7: DayOfWeek.SUN,
}

_SHORT_NAMES = {
    DayOfWeek.MON: "Mon",
    DayOfWeek.TUE: "Tue",
    DayOfWeek.WED: "Wed",
    DayOfWeek.THU: "Thu",
    DayOfWeek.FRI: "Fri",
    DayOfWeek.SAT: "Sat",
    DayOfWeek.SUN: "Sun",
    DayOfWeek.UNKNOWN: "Day",
}

_FULL_NAMES = {
    DayOfWeek.MON: "Monday",
    DayOfWeek.TUE: "Tuesday",
    DayOfWeek.WED: "Wednesday",
    DayOfWeek.THU: "Thursday",
    DayOfWeek.FRI: "Friday",
    DayOfWeek.SAT: "Saturday",
    DayOfWeek.SUN: "Sunday",
    DayOfWeek.UNKNOWN: "Day",
}


class OpenState(str, Enum):
    """Derived open/closed state of a venue at a given instant."""

    OPEN = "open"
    OPENING = "opening"
    CLOSED = "closed"
    CLOSING = "closing"
    UNKNOWN = "unknown"


def parse_clock(text: str) -> int:
    """
    Parse 24-hour ``HH:mm`` text into minutes since midnight.

    ``24:00`` is accepted and yields 1440.

    Raises:
        ValueError: If the text is not a valid clock time
    """
    hour_text, sep, minute_text = text.strip().partition(":")
    if not sep or not hour_text.isdigit() or not minute_text.isdigit() or len(minute_text) != 2:
        raise ValueError(f"Invalid time '{text}', expected HH:mm")

    hour, minute = int(hour_text), int(minute_text)
    if minute >= 60 or hour > 24 or (hour == 24 and minute != 0):
        raise ValueError(f"Invalid time '{text}', expected HH:mm")

    return hour * 60 + minute


def format_clock(minute: int) -> str:
    """Format minutes since midnight as ``h:mma``, e.g. ``6:30pm``."""
    hour, minute = divmod(minute % MINUTES_PER_DAY, 60)
    suffix = "am" if hour < 12 else "pm"
    return f"{hour % 12 or 12}:{minute:02d}{suffix}"


def minutes_since_midnight(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


@dataclass(frozen=True)
class Interval:
    """
    A single open/close window on one weekday.

    Invariant: open_minute in [0, 1440), close_minute in (0, 1440] and the
    two differ. A close at or before the open marks an overnight row.
    """
    day: DayOfWeek
    open_minute: int
    close_minute: int

    def __post_init__(self):
        if not 0 <= self.open_minute < MINUTES_PER_DAY:
            raise ValueError(f"open_minute must be in [0, 1440), got {self.open_minute}")
        if not 0 < self.close_minute <= MINUTES_PER_DAY:
            raise ValueError(f"close_minute must be in (0, 1440], got {self.close_minute}")
        if self.open_minute == self.close_minute:
            raise ValueError(f"Interval opens and closes at the same minute ({self.open_minute})")

    @property
    def is_overnight(self) -> bool:
        return self.close_minute <= self.open_minute

    @property
    def effective_close(self) -> int:
        """Upper bound of the same-day window; overnight rows end at 1440."""
        return MINUTES_PER_DAY if self.is_overnight else self.close_minute

    def contains(self, minute: int) -> bool:
        """Check if ``minute`` falls in the half-open window [open, close)."""
        return self.open_minute <= minute < self.effective_close

    def is_closing(self, minute: int, lead_minutes: int) -> bool:
        """Open, and within ``lead_minutes`` of the close."""
        return (
            lead_minutes > 0
            and self.contains(minute)
            and minute >= self.effective_close - lead_minutes
        )

    def is_opening(self, minute: int, lead_minutes: int) -> bool:
        """Not yet open, but within ``lead_minutes`` of the open."""
        return self.open_minute - lead_minutes <= minute < self.open_minute

    @property
    def time_range(self) -> str:
        """
        Human readable range, e.g. ``11:00am - 2:00pm``.

        A close of 23:59 or 24:00 renders as ``Midnight``.
        """
        if self.close_minute >= MINUTES_PER_DAY - 1:
            close_text = MIDNIGHT
        else:
            close_text = format_clock(self.close_minute)
        return f"{format_clock(self.open_minute)} - {close_text}"


@dataclass(frozen=True)
class Schedule:
    """
    The full set of weekly intervals for a venue.

    Immutable; intervals are kept sorted by open minute so grouped text is
    deterministic.
    """
    intervals: Tuple[Interval, ...] = ()

    def __post_init__(self):
        ordered = tuple(sorted(self.intervals, key=lambda interval: interval.open_minute))
        object.__setattr__(self, "intervals", ordered)

    def __len__(self) -> int:
        return len(self.intervals)

    def __iter__(self) -> Iterator[Interval]:
        return iter(self.intervals)

    def for_day(self, day: DayOfWeek) -> List[Interval]:
        """Return the intervals of one day, ordered by open minute."""
        return [interval for interval in self.intervals if interval.day == day]

    @cached_property
    def grouped(self) -> "Grouped":
        return Grouped(self)


class Grouped(Mapping):
    """
    Day -> formatted hours view of a schedule.

    Only days with at least one interval are materialized, but lookup is
    total: a day without intervals resolves to ``Closed``.
    """

    def __init__(self, schedule: Schedule):
        self.schedule = schedule

        ranges: Dict[DayOfWeek, List[str]] = {}
        for interval in schedule:
            ranges.setdefault(interval.day, []).append(interval.time_range)

        self._day_hours: Dict[DayOfWeek, str] = {
            day: ", ".join(day_ranges) for day, day_ranges in ranges.items()
        }

    def __getitem__(self, day: object) -> str:
        return self._day_hours.get(DayOfWeek.parse(day), CLOSED)

    def __contains__(self, day: object) -> bool:
        return DayOfWeek.parse(day) in self._day_hours

    def __iter__(self) -> Iterator[DayOfWeek]:
        return iter(self._day_hours)

    def __len__(self) -> int:
        return len(self._day_hours)

    def is_open(
        self,
        now: datetime,
        opening_lead_minutes: int = 0,
        closing_lead_minutes: int = 0,
    ) -> OpenState:
        return is_open(
            self.schedule,
            now,
            opening_lead_minutes=opening_lead_minutes,
            closing_lead_minutes=closing_lead_minutes,
        )

    def today_day_time_range(self, now: datetime) -> str:
        """Format today's hours with the day name, e.g. ``Monday: 9:00am - 5:00pm``."""
        day = DayOfWeek.of(now)
        return f"{day.full_name}: {self[day]}"


def is_open(
    schedule: Schedule,
    now: datetime,
    opening_lead_minutes: int = 0,
    closing_lead_minutes: int = 0,
) -> OpenState:
    """
    Classify the schedule at ``now`` (venue local time).

    Precedence across all of today's intervals: closing, then open, then
    opening; anything else is closed. An empty schedule is unknown.
    """
    if opening_lead_minutes < 0 or closing_lead_minutes < 0:
        raise ValueError("Lead minutes must not be negative")

    if not schedule.intervals:
        return OpenState.UNKNOWN

    current = schedule.for_day(DayOfWeek.of(now))
    minute = minutes_since_midnight(now)

    if any(interval.is_closing(minute, closing_lead_minutes) for interval in current):
        return OpenState.CLOSING
    if any(interval.contains(minute) for interval in current):
        return OpenState.OPEN
    if any(interval.is_opening(minute, opening_lead_minutes) for interval in current):
        return OpenState.OPENING

    return OpenState.CLOSED


def today(schedule: Schedule, now: datetime) -> str:
    """Today's hours joined by ``", "``, or ``Closed``."""
    return schedule.grouped[DayOfWeek.of(now)]


def grouped(schedule: Schedule) -> Grouped:
    return schedule.grouped
