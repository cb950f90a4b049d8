"""Classified failures raised by the Minimal Life core.

Every core operation either succeeds or raises exactly one of these.  Engine
and Pillow exceptions are translated at the module boundary and chained so
callers can map a failure onto a user-facing message without inspecting
third-party types.
"""


class MinimalLifeError(Exception):
    """Base class for all classified core failures."""


class StorageOpenError(MinimalLifeError):
    """Raised when the item store cannot be opened."""


class StorageWriteError(MinimalLifeError):
    """Raised when a write transaction aborts."""


class StorageReadError(MinimalLifeError):
    """Raised when a read transaction aborts."""


class DecodeError(MinimalLifeError):
    """Raised when a source image cannot be decoded."""


class EncodeError(MinimalLifeError):
    """Raised when an image cannot be serialized."""


class ValidationError(MinimalLifeError, ValueError):
    """Raised for missing images, missing dates or overlong reasons."""


__all__ = [
    "MinimalLifeError",
    "StorageOpenError",
    "StorageWriteError",
    "StorageReadError",
    "DecodeError",
    "EncodeError",
    "ValidationError",
]
