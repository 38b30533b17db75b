# multicache/exceptions.py
from typing import Optional


class CacheError(Exception):
    """Base class for every error raised by multicache."""


class ConfigurationError(CacheError):
    """A connection descriptor is missing, malformed or duplicated."""

    def __init__(self, message: str, index: Optional[int] = None):
        if index is not None:
            message = f"{message} [connection: {index}]"
        super().__init__(message)
        self.index = index


class ConnectivityError(CacheError):
    """The store could not be reached (ping or network failure)."""


class SerializationError(CacheError):
    """A value could not be encoded to, or decoded from, JSON."""
