"""
Domain layer - Pure business logic without external dependencies.
"""

from .hours import DayOfWeek, Grouped, Interval, OpenState, Schedule, grouped, is_open, today
from .recency import Namespace, RecentEntry, recent_places, recent_search_queries
from .records import HourRecord, PlaceRecord, SearchQuery, decode_schedule

__all__ = [
    "DayOfWeek",
    "Grouped",
    "Interval",
    "OpenState",
    "Schedule",
    "grouped",
    "is_open",
    "today",
    "Namespace",
    "RecentEntry",
    "recent_places",
    "recent_search_queries",
    "HourRecord",
    "PlaceRecord",
    "SearchQuery",
    "decode_schedule",
]
