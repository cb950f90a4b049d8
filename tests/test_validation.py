from datetime import date, datetime

import pytest

from minimal_life.errors import ValidationError
from utils.validation import (
    parse_item_date,
    validate_draft_fields,
    validate_output_dir,
    validate_reason,
)


def test_parse_item_date_accepts_strings_and_dates():
    assert parse_item_date("2024-01-05") == date(2024, 1, 5)
    assert parse_item_date(date(2024, 1, 5)) == date(2024, 1, 5)
    assert parse_item_date(datetime(2024, 1, 5, 13, 30)) == date(2024, 1, 5)


@pytest.mark.parametrize("value", [None, "", "2024/01/05", "2024-13-01", 20240105])
def test_parse_item_date_rejects_missing_or_malformed(value):
    with pytest.raises(ValidationError):
        parse_item_date(value)


def test_validate_reason_counts_code_points():
    assert validate_reason("가" * 50) == "가" * 50
    with pytest.raises(ValidationError):
        validate_reason("가" * 51)
    with pytest.raises(ValidationError):
        validate_reason(None)


def test_validate_draft_fields_requires_image():
    with pytest.raises(ValidationError):
        validate_draft_fields(b"", "2024-01-01", "reason")


def test_validate_draft_fields_defaults_disposal_method():
    image, item_date, reason, method = validate_draft_fields(
        bytearray(b"jpeg"), "2024-01-01", "too small", None
    )
    assert image == b"jpeg"
    assert item_date == date(2024, 1, 1)
    assert reason == "too small"
    assert method == ""


def test_validation_error_is_a_value_error():
    assert issubclass(ValidationError, ValueError)


def test_validate_output_dir_rejects_urls_and_missing(tmp_path):
    with pytest.raises(ValidationError):
        validate_output_dir("http://example.com/out")
    with pytest.raises(ValidationError):
        validate_output_dir(tmp_path / "missing")
    assert validate_output_dir(tmp_path) == tmp_path.resolve()
