"""
Adapters layer - Persistence and local data files.
"""

from .place_loader import PlaceFileLoader
from .recent_store import RecentStore, create_recent_store

__all__ = ["PlaceFileLoader", "RecentStore", "create_recent_store"]
