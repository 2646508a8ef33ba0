"""
Load place records from a local JSON file.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List

from pydantic import ValidationError

from ..domain.exceptions import PlaceDataError
from ..domain.records import PlaceRecord

logger = logging.getLogger(__name__)


class PlaceFileLoader:
    """
    Reads a JSON array of place objects, e.g. an exported API response.

    Entries that fail validation are skipped with a warning so that one bad
    place does not hide the rest of the file.
    """

    def __init__(self, data_file: Path):
        self.data_file = data_file
        self._places: Dict[str, PlaceRecord] | None = None

    def load(self) -> List[PlaceRecord]:
        """
        Load all valid places from the file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            PlaceDataError: If the file is not a JSON array
        """
        return list(self._load_index().values())

    def get(self, place_id: str) -> PlaceRecord | None:
        """Find a place by its id."""
        return self._load_index().get(place_id)

    def _load_index(self) -> Dict[str, PlaceRecord]:
        if self._places is not None:
            return self._places

        if not self.data_file.exists():
            raise FileNotFoundError(f"Place data file not found: {self.data_file}")

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise PlaceDataError(f"Invalid JSON in {self.data_file}: {exc}") from exc

        # Accept a bare array or an API envelope {"data": [...]}
        if isinstance(raw, dict) and isinstance(raw.get("data"), list):
            raw = raw["data"]

        if not isinstance(raw, list):
            raise PlaceDataError(f"{self.data_file} must contain a list of places")

        places: Dict[str, PlaceRecord] = {}
        for index, item in enumerate(raw):
            try:
                place = PlaceRecord.model_validate(item)
            except ValidationError as exc:
                logger.warning("Skipping invalid place #%d in %s: %s", index, self.data_file, exc)
                continue
            places[place.id] = place

        logger.debug("Loaded %d places from %s", len(places), self.data_file)
        self._places = places
        return places
