"""Reusable image manipulation operations.

This module centralizes the cover-fit geometry shared by the normalizer and
the collage compositor.  Functions are intentionally small and pure to keep
them easy to test and to encourage reuse.
"""

from __future__ import annotations

from dataclasses import dataclass

from PIL import Image

ColorValue = int | tuple[int, ...]


@dataclass(frozen=True, slots=True)
class CoverFit:
    """Placement of a source scaled to cover a target box.

    ``offset_x`` and ``offset_y`` are where the scaled source's top-left
    corner lands on the target canvas; both are ``<= 0``.
    """

    scale: float
    scaled_width: float
    scaled_height: float
    offset_x: float
    offset_y: float

    def source_box(self) -> tuple[float, float, float, float]:
        """Return the region of the source that ends up visible."""
        left = -self.offset_x / self.scale
        top = -self.offset_y / self.scale
        right = left + (self.scaled_width + 2 * self.offset_x) / self.scale
        bottom = top + (self.scaled_height + 2 * self.offset_y) / self.scale
        return left, top, right, bottom


def cover_fit_geometry(
    source_width: int,
    source_height: int,
    target_width: int,
    target_height: int | None = None,
) -> CoverFit:
    """Compute the cover-fit placement of a source inside a target box.

    The source is scaled by ``max(tw / w, th / h)`` so it covers the target
    in both dimensions and is then centred, leaving the overflow outside the
    canvas.
    """
    if target_height is None:
        target_height = target_width
    if source_width <= 0 or source_height <= 0:
        raise ValueError(f"Invalid source dimensions: {source_width}x{source_height}")
    if target_width <= 0 or target_height <= 0:
        raise ValueError(f"Invalid target dimensions: {target_width}x{target_height}")

    scale = max(target_width / source_width, target_height / source_height)
    scaled_width = source_width * scale
    scaled_height = source_height * scale
    return CoverFit(
        scale=scale,
        scaled_width=scaled_width,
        scaled_height=scaled_height,
        offset_x=(target_width - scaled_width) / 2,
        offset_y=(target_height - scaled_height) / 2,
    )


def cover_fit(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Return ``image`` scaled to cover ``size`` and centre-cropped to it.

    Only the visible source region is resampled, which is equivalent to
    drawing the whole scaled source at the negative offsets and clipping.
    """
    fit = cover_fit_geometry(image.width, image.height, size[0], size[1])
    return image.resize(size, Image.Resampling.LANCZOS, box=fit.source_box())


def flatten(image: Image.Image, background: ColorValue = (255, 255, 255)) -> Image.Image:
    """Return an RGB copy of ``image`` composited over ``background``.

    JPEG has no alpha channel, so transparent pixels would otherwise turn
    black on encode.
    """
    if image.mode == "RGB":
        return image
    if image.mode == "P" and "transparency" in image.info:
        image = image.convert("RGBA")
    if image.mode in {"RGBA", "LA", "PA"}:
        rgba = image.convert("RGBA")
        canvas = Image.new("RGB", rgba.size, background)
        canvas.paste(rgba, mask=rgba.getchannel("A"))
        return canvas
    return image.convert("RGB")


__all__ = [
    "CoverFit",
    "cover_fit",
    "cover_fit_geometry",
    "flatten",
]
