"""Minimal Life: record discarded items and export them as a collage."""

from .errors import (
    DecodeError,
    EncodeError,
    MinimalLifeError,
    StorageOpenError,
    StorageReadError,
    StorageWriteError,
    ValidationError,
)
from .models import Item, ItemDraft

__all__ = [
    "DecodeError",
    "EncodeError",
    "Item",
    "ItemDraft",
    "MinimalLifeError",
    "StorageOpenError",
    "StorageReadError",
    "StorageWriteError",
    "ValidationError",
]
