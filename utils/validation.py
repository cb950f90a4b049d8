"""Input validation helpers for item drafts and export targets."""
from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Optional, Tuple, Union
from urllib.parse import urlparse

from minimal_life import config
from minimal_life.errors import ValidationError


def _has_url_scheme(path_str: str) -> bool:
    """Return True if *path_str* looks like a URL with a scheme.

    Single-letter schemes such as ``"C"`` are treated as drive letters on
    Windows and therefore ignored.
    """
    parsed = urlparse(path_str)
    return bool(parsed.scheme and len(parsed.scheme) > 1)


def parse_item_date(value: Optional[Union[date, str]]) -> date:
    """Return *value* as a :class:`datetime.date`.

    Accepts ``date`` objects and ``YYYY-MM-DD`` strings.  ``datetime`` values
    are reduced to their calendar date.
    """
    if value is None or value == "":
        raise ValidationError("A date is required")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), config.STORAGE_DATE_FORMAT).date()
        except ValueError as exc:
            raise ValidationError(f"Invalid date: {value!r}") from exc
    raise ValidationError(f"Unsupported date value: {value!r}")


def validate_reason(reason: Optional[str], max_length: int = config.REASON_MAX_LENGTH) -> str:
    """Validate the free-text reason.

    Length is measured in code points.  Overlong reasons are rejected rather
    than truncated.
    """
    if reason is None:
        raise ValidationError("A reason is required")
    if not isinstance(reason, str):
        raise ValidationError("Reason must be text")
    if len(reason) > max_length:
        raise ValidationError(
            f"Reason must be at most {max_length} characters (got {len(reason)})"
        )
    return reason


def validate_draft_fields(
    image: Optional[bytes],
    item_date: Optional[Union[date, str]],
    reason: Optional[str],
    disposal_method: Optional[str] = "",
) -> Tuple[bytes, date, str, str]:
    """Validate the fields of an item draft.

    Returns ``(image, date, reason, disposal_method)`` with the date parsed
    and a missing disposal method coerced to ``""``.
    """
    if not image:
        raise ValidationError("An image is required")
    if not isinstance(image, (bytes, bytearray, memoryview)):
        raise ValidationError("Image payload must be bytes")
    parsed_date = parse_item_date(item_date)
    checked_reason = validate_reason(reason)
    method = disposal_method or ""
    if not isinstance(method, str):
        raise ValidationError("Disposal method must be text")
    return bytes(image), parsed_date, checked_reason, method


def validate_output_dir(path: Union[str, Path]) -> Path:
    """Validate an export directory *path*.

    The directory must exist and the path must not contain a URL scheme.
    Returns the resolved ``Path``.
    """
    path_str = str(path)
    if _has_url_scheme(path_str):
        raise ValidationError("URLs are not allowed")

    p = Path(path_str).expanduser().resolve()
    if not p.is_dir():
        raise ValidationError(f"Directory does not exist: {p}")
    return p
