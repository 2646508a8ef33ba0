"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .place_hours import HoursSummary, PlaceHoursService
from .recents import RecentStoreProtocol, RecentsService

__all__ = ["HoursSummary", "PlaceHoursService", "RecentStoreProtocol", "RecentsService"]
