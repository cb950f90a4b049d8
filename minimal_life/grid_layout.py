"""Grid layout for collage export.

This module provides a pure-Python representation of the collage grid: how
many rows and columns a given number of items needs, and where each cell and
the header band sit on the canvas.  It is independent of Pillow so it can be
unit tested on its own.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from . import config


def compute_grid(n: int) -> Tuple[int, int]:
    """Return ``(rows, cols)`` for a near-square grid holding *n* cells.

    Starts from ``cols = ceil(sqrt(n))`` and then drops whole columns or rows
    while every item still fits, so the grid never has a redundant row or
    column.  ``compute_grid(0)`` is ``(0, 0)``.
    """
    if n < 0:
        raise ValueError("Item count must be non-negative")
    if n == 0:
        return 0, 0

    cols = math.ceil(math.sqrt(n))
    rows = math.ceil(n / cols)
    while cols * rows > n and rows > 1:
        if (cols - 1) * rows >= n:
            cols -= 1
        elif cols * (rows - 1) >= n:
            rows -= 1
        else:
            break
    return rows, cols


@dataclass(frozen=True, slots=True)
class GridCell:
    """Position of a single cell on the collage canvas."""

    index: int
    row: int
    column: int
    x: int
    y: int
    size: int

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """Return the ``(left, top, right, bottom)`` box, right/bottom exclusive."""
        return self.x, self.y, self.x + self.size, self.y + self.size


@dataclass(frozen=True, slots=True)
class CollageGrid:
    """Canvas geometry for a collage of ``count`` cells."""

    count: int
    rows: int
    columns: int
    thumb: int = config.THUMB_SIZE
    padding: int = config.CELL_PADDING
    header_height: int = config.HEADER_HEIGHT

    @classmethod
    def for_count(
        cls,
        count: int,
        *,
        thumb: int = config.THUMB_SIZE,
        padding: int = config.CELL_PADDING,
        header_height: int = config.HEADER_HEIGHT,
    ) -> "CollageGrid":
        if count <= 0:
            raise ValueError("A collage grid needs at least one cell")
        rows, columns = compute_grid(count)
        return cls(count, rows, columns, thumb, padding, header_height)

    @property
    def pitch(self) -> int:
        """Distance between the origins of adjacent cells."""
        return self.thumb + self.padding

    @property
    def width(self) -> int:
        return self.columns * self.pitch + self.padding

    @property
    def height(self) -> int:
        return self.rows * self.pitch + self.padding + self.header_height

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def cell(self, index: int) -> GridCell:
        """Return the row-major cell at *index*."""
        if not 0 <= index < self.count:
            raise IndexError(f"Cell index {index} out of range for {self.count} cells")
        row, column = divmod(index, self.columns)
        return GridCell(
            index=index,
            row=row,
            column=column,
            x=column * self.pitch + self.padding,
            y=row * self.pitch + self.padding + self.header_height,
            size=self.thumb,
        )

    def cells(self) -> List[GridCell]:
        return list(self)

    def __iter__(self) -> Iterator[GridCell]:
        for index in range(self.count):
            yield self.cell(index)


__all__ = ["CollageGrid", "GridCell", "compute_grid"]
