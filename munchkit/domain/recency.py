"""
Domain types for the recently-used items cache.
"""

from dataclasses import dataclass, field
from typing import Generic, Type, TypeVar

from pendulum import DateTime

from .records import PlaceRecord, SearchQuery

T = TypeVar("T")


@dataclass(frozen=True)
class Namespace(Generic[T]):
    """
    A capacity-bounded partition of the recents store.

    The name identifies the rows on disk; embed a version in it when the
    payload shape changes so that old rows are never decoded as the new type.
    """
    name: str
    capacity: int
    payload_type: Type[T] = field(compare=False)

    def __post_init__(self):
        if not self.name:
            raise ValueError("Namespace name must not be empty")
        if self.capacity < 1:
            raise ValueError(f"Namespace capacity must be at least 1, got {self.capacity}")


@dataclass(frozen=True)
class RecentEntry:
    """A stored entry with its payload still JSON-encoded."""
    namespace: str
    key: str
    payload: str | None
    touched_at: DateTime


def recent_search_queries(capacity: int = 10) -> Namespace[SearchQuery]:
    return Namespace(
        name=f"SearchQuery+{SearchQuery.VERSION}",
        capacity=capacity,
        payload_type=SearchQuery,
    )


def recent_places(capacity: int = 20) -> Namespace[PlaceRecord]:
    return Namespace(name="RecentPlaceDatabase", capacity=capacity, payload_type=PlaceRecord)
