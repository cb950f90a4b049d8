"""Record types for discarded items."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Union

from . import config

DateLike = Union[date, str]


@dataclass(frozen=True, slots=True)
class ItemDraft:
    """Caller-supplied fields for a new item.

    ``image`` is the normalized payload produced by
    :class:`utils.image_processor.ImageNormalizer`.  ``date`` may be a
    :class:`datetime.date` or a ``YYYY-MM-DD`` string as submitted by a form.
    """

    image: bytes
    date: DateLike
    reason: str
    disposal_method: str = ""


@dataclass(frozen=True, slots=True)
class Item:
    """A stored discarded-item record.

    Attributes:
        id (int): Store-assigned key, never reused
        image (bytes): Normalized 512x512 JPEG payload
        date (date): Calendar date the item was discarded
        reason (str): Short note, at most ``REASON_MAX_LENGTH`` characters
        disposal_method (str): Optional tag, may be empty
        created_at (datetime): UTC timestamp assigned on insert
    """

    id: int
    image: bytes
    date: date
    reason: str
    disposal_method: str
    created_at: datetime

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Item":
        """Create an item from a storage row or mapping."""
        return cls(
            id=int(record["id"]),
            image=bytes(record["image"]),
            date=datetime.strptime(record["date"], config.STORAGE_DATE_FORMAT).date(),
            reason=record["reason"],
            disposal_method=record["disposal_method"] or "",
            created_at=datetime.fromisoformat(record["created_at"]),
        )


__all__ = ["DateLike", "Item", "ItemDraft"]
