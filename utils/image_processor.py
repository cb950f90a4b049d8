from __future__ import annotations

import asyncio
import hashlib
import io
import logging
from typing import Any, Dict, Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from minimal_life import config
from minimal_life.cache import PayloadCache, get_cache
from minimal_life.errors import DecodeError, EncodeError
from .image_operations import cover_fit, flatten

LOGGER = logging.getLogger(__name__)


def decode_image(data: bytes) -> Image.Image:
    """
    Decode raw image bytes into a fully loaded, upright Pillow image.

    Args:
        data: Encoded image bytes (any format Pillow can read)

    Returns:
        Image.Image: Decoded image with EXIF orientation applied

    Raises:
        DecodeError: If the data is empty, corrupt or has no dimensions
    """
    if not data:
        raise DecodeError("Image data is empty")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            upright = ImageOps.exif_transpose(img)
            if upright is img:
                upright = img.copy()
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as e:
        raise DecodeError(f"Cannot decode image: {e}") from e
    except Image.DecompressionBombError as e:
        raise DecodeError(f"Image too large to decode: {e}") from e

    width, height = upright.size
    if width <= 0 or height <= 0:
        raise DecodeError(f"Image has invalid dimensions {width}x{height}")
    return upright


def encode_image(image: Image.Image, fmt: str, **params: Any) -> bytes:
    """
    Serialize ``image`` to bytes in ``fmt``.

    Raises:
        EncodeError: If Pillow cannot write the image
    """
    buffer = io.BytesIO()
    try:
        image.save(buffer, format=fmt, **params)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(f"Failed to encode {fmt} image: {e}") from e
    return buffer.getvalue()


class ImageNormalizer:
    """Turns arbitrary source images into fixed-size square JPEG thumbnails.

    The output is a pure function of the source bytes: the image is decoded,
    oriented, cover-fitted onto a ``size`` x ``size`` canvas and encoded with a
    fixed JPEG quality.  Results are memoised in a :class:`PayloadCache`.
    """

    def __init__(
        self,
        size: int = config.NORMALIZED_SIZE,
        quality: int = config.NORMALIZED_QUALITY,
        cache: Optional[PayloadCache] = None,
    ):
        if size <= 0:
            raise ValueError("size must be positive")
        self.size = size
        self.quality = quality
        self._cache: PayloadCache = cache if cache is not None else get_cache()

    def _cache_key(self, data: bytes) -> str:
        """Generate a unique cache key for the source bytes and settings."""
        digest = hashlib.sha256(data).hexdigest()
        return f"{digest}:{self.size}:{self.quality}"

    def _save_params(self) -> Dict[str, Any]:
        return {
            "quality": self.quality,
            "subsampling": "4:2:0",
            "optimize": False,
            "progressive": False,
        }

    def normalize_image(self, image: Image.Image) -> Image.Image:
        """Return ``image`` cover-fitted to the normalized square size."""
        target = (self.size, self.size)
        return cover_fit(flatten(image, config.FLATTEN_BACKGROUND), target)

    def normalize(self, data: bytes) -> bytes:
        """
        Normalize encoded image bytes into the stored payload.

        Args:
            data: Raw uploaded or pasted image bytes

        Returns:
            bytes: JPEG payload of exactly ``size`` x ``size`` pixels

        Raises:
            DecodeError: If the source cannot be decoded
            EncodeError: If the result cannot be encoded
        """
        key = self._cache_key(data) if data else None
        if key is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        source = decode_image(data)
        LOGGER.debug("Normalizing %dx%d %s image", source.width, source.height, source.mode)
        result = self.normalize_image(source)
        payload = encode_image(result, config.NORMALIZED_FORMAT, **self._save_params())

        self._cache.put(key, payload)
        return payload

    async def normalize_async(self, data: bytes) -> bytes:
        """Run :meth:`normalize` off the event loop."""
        return await asyncio.to_thread(self.normalize, data)


__all__ = ["ImageNormalizer", "decode_image", "encode_image"]
