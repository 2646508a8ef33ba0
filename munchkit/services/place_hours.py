"""
Application service turning a place's hour rows into display-ready values.

The service owns the venue timezone and the opening/closing lead times so the
CLI (or any other caller) only passes a place and, optionally, an instant.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict

import pendulum
from pendulum import DateTime

from ..domain.hours import DayOfWeek, OpenState, Schedule, is_open, today
from ..domain.records import PlaceRecord

WEEK = (
    DayOfWeek.MON,
    DayOfWeek.TUE,
    DayOfWeek.WED,
    DayOfWeek.THU,
    DayOfWeek.FRI,
    DayOfWeek.SAT,
    DayOfWeek.SUN,
)


@dataclass(frozen=True)
class HoursSummary:
    """Everything the place screen shows about opening hours."""
    state: OpenState
    today: str
    today_label: str
    week: Dict[DayOfWeek, str]


class PlaceHoursService:
    """Evaluates a place's schedule in the venue's local time."""

    def __init__(
        self,
        timezone: str,
        opening_lead_minutes: int = 0,
        closing_lead_minutes: int = 0,
    ) -> None:
        self._timezone = timezone
        self._opening_lead_minutes = opening_lead_minutes
        self._closing_lead_minutes = closing_lead_minutes

    def local_time(self, now: datetime | None = None) -> DateTime:
        """Convert ``now`` (default: current time) into venue local time."""
        if now is None:
            return pendulum.now(self._timezone)
        return pendulum.instance(now).in_timezone(self._timezone)

    def state(self, schedule: Schedule, now: datetime | None = None) -> OpenState:
        return is_open(
            schedule,
            self.local_time(now),
            opening_lead_minutes=self._opening_lead_minutes,
            closing_lead_minutes=self._closing_lead_minutes,
        )

    def summarize(self, place: PlaceRecord, now: datetime | None = None) -> HoursSummary:
        """Build the open state, today's hours and the weekly table for a place."""
        local = self.local_time(now)
        schedule = place.schedule
        grouped = schedule.grouped

        return HoursSummary(
            state=self.state(schedule, local),
            today=today(schedule, local),
            today_label=grouped.today_day_time_range(local),
            week={day: grouped[day] for day in WEEK},
        )
