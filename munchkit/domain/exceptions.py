"""
Domain-specific exception hierarchy for munchkit.
"""


class MunchError(Exception):
    """Base class for all application-level errors."""


class StorageError(MunchError):
    """Raised when the recents store cannot be read or written."""


class PlaceDataError(MunchError):
    """Raised when place data cannot be loaded or parsed."""
