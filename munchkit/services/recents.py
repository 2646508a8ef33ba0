"""
Recently viewed places and recent searches.
"""

from __future__ import annotations

import logging
from typing import List, Protocol, TypeVar

from ..domain.recency import Namespace, recent_places, recent_search_queries
from ..domain.records import PlaceRecord, SearchQuery

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecentStoreProtocol(Protocol):
    """Protocol describing the store behaviour needed by the service."""

    def put(self, namespace: Namespace[T], key: str, payload: T) -> None:
        """Insert or re-touch an entry."""

    def list(self, namespace: Namespace[T], limit: int | None = None) -> List[T]:
        """Return payloads newest first."""

    def clear(self, namespace: Namespace) -> None:
        """Remove every entry of a namespace."""


class RecentsService:
    """
    Remembers the places a user opened and the searches they ran.

    Search queries are keyed by their equality hash, so re-running the same
    search with a different page or position promotes the existing entry.
    """

    def __init__(
        self,
        store: RecentStoreProtocol,
        places: Namespace[PlaceRecord] | None = None,
        search_queries: Namespace[SearchQuery] | None = None,
    ) -> None:
        self._store = store
        self.places = places or recent_places()
        self.search_queries = search_queries or recent_search_queries()

    def record_place(self, place: PlaceRecord) -> None:
        logger.debug("Recording recent place %s", place.id)
        self._store.put(self.places, place.id, place)

    def recent_places(self, limit: int | None = None) -> List[PlaceRecord]:
        return self._store.list(self.places, limit)

    def clear_places(self) -> None:
        self._store.clear(self.places)

    def record_search(self, query: SearchQuery) -> None:
        key = query.cache_key()
        logger.debug("Recording recent search %s", key)
        self._store.put(self.search_queries, key, query)

    def recent_searches(self, limit: int | None = None) -> List[SearchQuery]:
        return self._store.list(self.search_queries, limit)

    def clear_searches(self) -> None:
        self._store.clear(self.search_queries)
