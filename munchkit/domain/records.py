"""
Typed ingestion records decoded from upstream JSON.

This is the decode boundary: raw JSON rows become pydantic models here and
nothing past this module looks fields up by string.
"""

from __future__ import annotations

import hashlib
import json
from enum import Enum
from typing import Any, ClassVar, Iterable, List, Mapping, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .hours import MINUTES_PER_DAY, DayOfWeek, Interval, Schedule, parse_clock


class HourRecord(BaseModel):
    """One ``{day, open, close}`` row of a place's opening hours."""
    day: DayOfWeek = DayOfWeek.UNKNOWN
    open: str
    close: str

    @field_validator("day", mode="before")
    @classmethod
    def decode_day(cls, value: Any) -> DayOfWeek:
        """Unrecognized day text degrades to UNKNOWN."""
        return DayOfWeek.parse(value)

    @field_validator("open", "close")
    @classmethod
    def validate_clock(cls, value: str) -> str:
        """Ensure the time is 24-hour HH:mm."""
        parse_clock(value)
        return value

    @model_validator(mode="after")
    def validate_interval(self) -> "HourRecord":
        """Reject rows that cannot form an interval, e.g. open == close."""
        self.to_interval()
        return self

    def to_interval(self) -> Interval:
        """
        Convert to a domain interval.

        A close of ``00:00`` means closing at midnight and becomes 1440.
        """
        close_minute = parse_clock(self.close)
        if close_minute == 0:
            close_minute = MINUTES_PER_DAY
        return Interval(day=self.day, open_minute=parse_clock(self.open), close_minute=close_minute)


def decode_schedule(rows: Iterable[Mapping[str, Any] | HourRecord]) -> Schedule:
    """
    Decode raw hour rows into an immutable schedule.

    Raises:
        pydantic.ValidationError: If a row has malformed time text or breaks
            the interval invariants
    """
    records = [
        row if isinstance(row, HourRecord) else HourRecord.model_validate(row)
        for row in rows
    ]
    return Schedule(tuple(record.to_interval() for record in records))


class PlaceStatus(str, Enum):
    OPEN = "open"
    RENOVATION = "renovation"
    CLOSED = "closed"
    MOVED = "moved"
    OTHER = "other"


class PlaceRecord(BaseModel):
    """A place as shown on the place details screen."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="placeId")
    name: str
    status: PlaceStatus = PlaceStatus.OPEN
    address: Optional[str] = None
    hours: List[HourRecord] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def decode_status(cls, value: Any) -> PlaceStatus:
        """Unrecognized status text degrades to OTHER."""
        if isinstance(value, dict):
            value = value.get("type")
        try:
            return PlaceStatus(value)
        except ValueError:
            return PlaceStatus.OTHER

    @property
    def schedule(self) -> Schedule:
        return decode_schedule(self.hours)


class PriceFilter(BaseModel):
    name: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None


class TagFilter(BaseModel):
    positives: Set[str] = Field(default_factory=set)


class HourFilter(BaseModel):
    name: Optional[str] = None
    day: Optional[str] = None
    open: Optional[str] = None
    close: Optional[str] = None


class LocationFilter(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: Optional[str] = None
    lat_lng: Optional[str] = Field(default=None, alias="latLng")


class ContainerFilter(BaseModel):
    """A container (mall, hawker centre) the results must be inside."""
    id: Optional[str] = None
    type: Optional[str] = None
    name: Optional[str] = None


class SearchFilter(BaseModel):
    price: PriceFilter = Field(default_factory=PriceFilter)
    tag: TagFilter = Field(default_factory=TagFilter)
    hour: HourFilter = Field(default_factory=HourFilter)
    location: Optional[LocationFilter] = None
    containers: Optional[List[ContainerFilter]] = None


class SearchSort(BaseModel):
    type: Optional[str] = None


class SearchQuery(BaseModel):
    """
    A search request, used both as input and as a recent-search record.

    Two queries are equal when their text, filter and sort match; paging and
    position (``from``, ``size``, ``latLng``, ``radius``) are ignored.
    """
    model_config = ConfigDict(populate_by_name=True)

    # Bump when the shape changes so old recents are not decoded.
    VERSION: ClassVar[str] = "2018-01-23"

    from_: Optional[int] = Field(default=0, alias="from")
    size: Optional[int] = 20
    query: Optional[str] = None
    lat_lng: Optional[str] = Field(default=None, alias="latLng")
    radius: Optional[float] = None
    filter: SearchFilter = Field(default_factory=SearchFilter)
    sort: SearchSort = Field(default_factory=SearchSort)

    def _identity(self) -> dict:
        return {
            "query": self.query,
            "filter": self.filter.model_dump(),
            "sort": self.sort.model_dump(),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SearchQuery):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self.cache_key())

    def cache_key(self) -> str:
        """Stable key of the fields that define query equality."""
        identity = self._identity()
        identity["filter"]["tag"]["positives"] = sorted(self.filter.tag.positives)
        encoded = json.dumps(identity, sort_keys=True, separators=(",", ":"))
        return hashlib.sha1(encoded.encode("utf-8")).hexdigest()
