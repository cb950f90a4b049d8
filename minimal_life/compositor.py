"""Collage compositing for discarded-item exports.

:class:`CollageCompositor` lays every stored item out on a near-square grid
in chronological order under a header band that names the covered date
range, and returns the result as PNG bytes.

Cell images are decoded concurrently and joined without short-circuiting:
an item whose image cannot be decoded leaves a blank cell and is reported in
:attr:`CollageResult.failed_ids`, it never aborts the export.  Only an empty
item list (:class:`~minimal_life.errors.ValidationError`) or a failure to
encode the finished canvas (:class:`~minimal_life.errors.EncodeError`)
propagate.  Counts are recorded on the module-level ``compose_metrics``.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from utils.image_operations import cover_fit, flatten
from utils.image_processor import decode_image, encode_image

from . import config
from .errors import ValidationError
from .grid_layout import CollageGrid, GridCell
from .models import Item

LOGGER = logging.getLogger(__name__)

Outcome = Union[Image.Image, BaseException]


class _ComposeMetrics:
    """Simple in-memory metrics collector."""

    def __init__(self) -> None:
        self.counters: Counter[str] = Counter()
        self.durations: list[float] = []

    def record(self, name: str, count: int = 1, duration: float | None = None) -> None:
        self.counters[name] += count
        if duration is not None:
            self.durations.append(duration)

    def reset(self) -> None:
        self.counters.clear()
        self.durations.clear()


compose_metrics = _ComposeMetrics()


@dataclass(frozen=True, slots=True)
class CollageResult:
    """A finished collage and what went into it."""

    image: bytes
    item_count: int
    rows: int
    columns: int
    width: int
    height: int
    first_date: date
    last_date: date
    failed_ids: Tuple[int, ...] = ()

    @property
    def drawn(self) -> int:
        """Number of cells that received an image."""
        return self.item_count - len(self.failed_ids)


def sort_chronologically(items: Iterable[Item]) -> List[Item]:
    """Return *items* oldest first; same-day items keep insertion order."""
    return sorted(items, key=lambda item: (item.date, item.id))


def format_date_range(first: date, last: date) -> str:
    """Format an inclusive date range as ``YYYY.MM.DD ~ YYYY.MM.DD``."""
    return f"{first.strftime(config.HEADER_DATE_FORMAT)} ~ {last.strftime(config.HEADER_DATE_FORMAT)}"


def _load_font(size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    try:
        return ImageFont.load_default(size=size)
    except (TypeError, OSError, ImportError):
        # Pillow builds without FreeType only ship the fixed bitmap font
        return ImageFont.load_default()


class CollageCompositor:
    """Renders a list of items into a single collage image."""

    def __init__(
        self,
        *,
        title: str = config.COLLAGE_TITLE,
        thumb: int = config.THUMB_SIZE,
        padding: int = config.CELL_PADDING,
        header_height: int = config.HEADER_HEIGHT,
    ) -> None:
        self.title = title
        self.thumb = thumb
        self.padding = padding
        self.header_height = header_height

    def layout(self, count: int) -> CollageGrid:
        """Return the canvas geometry for *count* items."""
        return CollageGrid.for_count(
            count,
            thumb=self.thumb,
            padding=self.padding,
            header_height=self.header_height,
        )

    def _prepare_thumb(self, payload: bytes) -> Image.Image:
        """Decode a stored payload and cover-fit it to the cell size."""
        image = decode_image(payload)
        return cover_fit(flatten(image, config.FLATTEN_BACKGROUND), (self.thumb, self.thumb))

    async def _load_cells(self, items: Sequence[Item]) -> List[Outcome]:
        """Load every cell image concurrently, collecting per-item outcomes.

        Never raises for an individual failure; failed loads come back as the
        exception instance in the matching position.
        """
        tasks = [asyncio.to_thread(self._prepare_thumb, item.image) for item in items]
        return await asyncio.gather(*tasks, return_exceptions=True)

    def _draw_header(self, draw: ImageDraw.ImageDraw, grid: CollageGrid, subtitle: str) -> None:
        title_font = _load_font(config.TITLE_FONT_SIZE)
        subtitle_font = _load_font(config.SUBTITLE_FONT_SIZE)
        lines = (
            (self.title, title_font, config.TITLE_COLOR, 0.42),
            (subtitle, subtitle_font, config.SUBTITLE_COLOR, 0.78),
        )
        for text, font, colour, centre_ratio in lines:
            left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
            x = (grid.width - (right - left)) / 2 - left
            y = self.header_height * centre_ratio - (bottom - top) / 2 - top
            draw.text((x, y), text, font=font, fill=colour)

    def _draw_cell(
        self,
        canvas: Image.Image,
        draw: ImageDraw.ImageDraw,
        cell: GridCell,
        thumb: Optional[Image.Image],
    ) -> None:
        left, top, right, bottom = cell.box
        draw.rectangle((left, top, right - 1, bottom - 1), fill=config.CELL_BACKGROUND)
        if thumb is not None:
            canvas.paste(thumb, (cell.x, cell.y))
        draw.rectangle(
            (left, top, right - 1, bottom - 1),
            outline=config.CELL_BORDER,
            width=config.CELL_BORDER_WIDTH,
        )

    def render(
        self,
        items: Sequence[Item],
        outcomes: Sequence[Outcome],
        log: logging.LoggerAdapter | logging.Logger = LOGGER,
    ) -> Tuple[Image.Image, CollageGrid, Tuple[int, ...]]:
        """Draw the canvas for chronologically sorted *items*.

        Returns the canvas, its grid and the ids of items left blank.
        """
        grid = self.layout(len(items))
        canvas = Image.new("RGB", grid.size, config.CANVAS_BACKGROUND)
        draw = ImageDraw.Draw(canvas)
        self._draw_header(draw, grid, format_date_range(items[0].date, items[-1].date))

        failed: List[int] = []
        for cell, item, outcome in zip(grid, items, outcomes):
            if isinstance(outcome, BaseException):
                log.warning(
                    "cell %d for item %s left blank: %s", cell.index, item.id, outcome
                )
                failed.append(item.id)
                thumb = None
            else:
                thumb = outcome
            self._draw_cell(canvas, draw, cell, thumb)
        return canvas, grid, tuple(failed)

    async def compose(self, items: Sequence[Item]) -> CollageResult:
        """
        Compose *items* into a PNG collage.

        Args:
            items: Items in any order; they are sorted oldest first

        Returns:
            CollageResult: Encoded PNG plus layout and failure details

        Raises:
            ValidationError: If *items* is empty
            EncodeError: If the finished canvas cannot be encoded
        """
        if not items:
            raise ValidationError("Cannot compose a collage without items")

        log = logging.LoggerAdapter(LOGGER, {"cid": uuid.uuid4().hex})
        start = time.perf_counter()
        ordered = sort_chronologically(items)

        outcomes = await self._load_cells(ordered)
        canvas, grid, failed = await asyncio.to_thread(self.render, ordered, outcomes, log)
        png = await asyncio.to_thread(encode_image, canvas, "PNG", compress_level=6)

        duration = (time.perf_counter() - start) * 1000
        compose_metrics.record("composed", duration=duration)
        compose_metrics.record("cells_drawn", len(ordered) - len(failed))
        compose_metrics.record("cells_failed", len(failed))
        log.info(
            "composed %d items into %dx%d grid (%d blank) in %.1f ms",
            len(ordered),
            grid.rows,
            grid.columns,
            len(failed),
            duration,
        )
        return CollageResult(
            image=png,
            item_count=len(ordered),
            rows=grid.rows,
            columns=grid.columns,
            width=grid.width,
            height=grid.height,
            first_date=ordered[0].date,
            last_date=ordered[-1].date,
            failed_ids=failed,
        )


__all__ = [
    "CollageCompositor",
    "CollageResult",
    "compose_metrics",
    "format_date_range",
    "sort_chronologically",
]
