"""Journal service for recording discarded items and exporting collages.

This module introduces :class:`DiscardJournal`, a small service layer that
mediates between a front end (form, clipboard paste, gallery) and the core
pipeline.  Recording an item normalizes the raw image before storing it;
exporting lists every item, composes the collage and writes it to disk under
``<prefix>-<count>items-<epochMillis>.png``.  The journal holds no state of
its own beyond the store handle it was given, so any number of front ends
can share one.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional, Union

from utils.image_processor import ImageNormalizer
from utils.validation import parse_item_date, validate_output_dir, validate_reason

from .. import config
from ..compositor import CollageCompositor, CollageResult
from ..errors import StorageWriteError, ValidationError
from ..logging_setup import configure_logging
from ..models import DateLike, Item, ItemDraft
from ..store import ItemStore

LOGGER = logging.getLogger(__name__)


def collage_filename(prefix: str, item_count: int, epoch_millis: int) -> str:
    """Return the export file name for a collage of *item_count* items."""
    return f"{prefix}-{item_count}items-{epoch_millis}{config.COLLAGE_EXTENSION}"


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class DiscardJournal:
    """Record, list, delete and export discarded items."""

    def __init__(
        self,
        store: ItemStore,
        *,
        normalizer: Optional[ImageNormalizer] = None,
        compositor: Optional[CollageCompositor] = None,
        prefix: str = config.COLLAGE_PREFIX,
        today: Callable[[], date] = date.today,
        clock: Callable[[], int] = _epoch_millis,
    ) -> None:
        self._store = store
        self._normalizer = normalizer or ImageNormalizer()
        self._compositor = compositor or CollageCompositor()
        self.prefix = prefix
        self._today = today
        self._clock = clock

    @property
    def store(self) -> ItemStore:
        return self._store

    async def __aenter__(self) -> "DiscardJournal":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying store handle."""
        await self._store.close()

    async def record(
        self,
        image: bytes,
        *,
        reason: str,
        disposal_method: str = "",
        item_date: Optional[DateLike] = None,
    ) -> int:
        """Normalize *image* and store it as a new item.

        ``item_date`` defaults to today.  Text fields are checked before the
        image is decoded so an overlong reason fails fast.
        """
        if not image:
            raise ValidationError("An image is required")
        parsed_date = parse_item_date(item_date if item_date is not None else self._today())
        validate_reason(reason)

        payload = await self._normalizer.normalize_async(image)
        draft = ItemDraft(
            image=payload,
            date=parsed_date,
            reason=reason,
            disposal_method=disposal_method or "",
        )
        return await self._store.add(draft)

    async def remove(self, item_id: int) -> None:
        await self._store.delete(item_id)

    async def items(self) -> List[Item]:
        return await self._store.list_all()

    async def count(self) -> int:
        return await self._store.count()

    async def build_collage(self) -> CollageResult:
        """Compose every stored item into a collage without writing it."""
        items = await self._store.list_all()
        return await self._compositor.compose(items)

    async def export_collage(self, output_dir: Union[str, Path]) -> Path:
        """Compose the collage and write it into *output_dir*.

        Returns the written path.  Nothing is written when there are no items
        or composition fails.
        """
        directory = validate_output_dir(output_dir)
        result = await self.build_collage()
        path = directory / collage_filename(self.prefix, result.item_count, self._clock())
        try:
            await asyncio.to_thread(path.write_bytes, result.image)
        except OSError as exc:
            LOGGER.error("Failed to write collage %s: %s", path, exc)
            raise StorageWriteError(f"Failed to write collage to {path}: {exc}") from exc
        LOGGER.info(
            "Exported collage of %d items to %s (%d blank cells)",
            result.item_count,
            path,
            len(result.failed_ids),
        )
        return path


async def open_journal(
    db_path: Union[str, Path, None] = None,
    *,
    log_path: Union[str, Path, None] = None,
    **kwargs,
) -> DiscardJournal:
    """Start a session: configure logging, open the store and wrap it.

    Extra keyword arguments are passed to :class:`DiscardJournal`.  The
    caller owns the returned journal and must close it.
    """
    configure_logging(log_path)
    store = await ItemStore.open(db_path)
    return DiscardJournal(store, **kwargs)
