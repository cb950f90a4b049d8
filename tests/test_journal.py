"""Tests for the discard journal service."""

from __future__ import annotations

import asyncio
import io
from datetime import date

import pytest
from PIL import Image

from minimal_life.cache import PayloadCache
from minimal_life.controllers import DiscardJournal, collage_filename
from minimal_life.errors import DecodeError, ValidationError
from minimal_life.store import ItemStore
from utils.image_processor import ImageNormalizer


def png_bytes(colour="red", size=(120, 80)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, colour).save(buffer, format="PNG")
    return buffer.getvalue()


def run_with_journal(tmp_path, scenario, **kwargs):
    async def runner():
        async with await ItemStore.open(tmp_path / "journal.db") as store:
            journal = DiscardJournal(
                store,
                normalizer=ImageNormalizer(cache=PayloadCache()),
                **kwargs,
            )
            return await scenario(journal)

    return asyncio.run(runner())


def test_collage_filename():
    assert collage_filename("minimal-life-collage", 3, 1700000000123) == (
        "minimal-life-collage-3items-1700000000123.png"
    )


def test_record_stores_normalized_image(tmp_path):
    async def scenario(journal):
        item_id = await journal.record(
            png_bytes(), reason="Broken handle", disposal_method="recycle", item_date="2024-01-05"
        )
        return item_id, await journal.items()

    item_id, items = run_with_journal(tmp_path, scenario)

    assert [item.id for item in items] == [item_id]
    item = items[0]
    assert item.date == date(2024, 1, 5)
    assert item.disposal_method == "recycle"
    with Image.open(io.BytesIO(item.image)) as stored:
        assert stored.format == "JPEG"
        assert stored.size == (512, 512)


def test_record_defaults_to_today(tmp_path):
    async def scenario(journal):
        await journal.record(png_bytes(), reason="Old mug")
        return await journal.items()

    items = run_with_journal(tmp_path, scenario, today=lambda: date(2025, 6, 30))
    assert items[0].date == date(2025, 6, 30)
    assert items[0].disposal_method == ""


def test_record_rejects_undecodable_image(tmp_path):
    async def scenario(journal):
        with pytest.raises(DecodeError):
            await journal.record(b"not an image", reason="Mystery")
        return await journal.count()

    assert run_with_journal(tmp_path, scenario) == 0


def test_record_validates_text_before_decoding(tmp_path):
    async def scenario(journal):
        with pytest.raises(ValidationError):
            await journal.record(b"not an image", reason="x" * 51)
        with pytest.raises(ValidationError):
            await journal.record(b"", reason="empty")
        return await journal.count()

    assert run_with_journal(tmp_path, scenario) == 0


def test_remove_is_idempotent(tmp_path):
    async def scenario(journal):
        item_id = await journal.record(png_bytes(), reason="Duplicate")
        await journal.remove(item_id)
        await journal.remove(item_id)
        return await journal.items()

    assert run_with_journal(tmp_path, scenario) == []


def test_export_collage_writes_named_png(tmp_path):
    out_dir = tmp_path / "exports"
    out_dir.mkdir()

    async def scenario(journal):
        await journal.record(png_bytes("red"), reason="a", item_date="2024-01-05")
        await journal.record(png_bytes("blue"), reason="b", item_date="2024-01-01")
        return await journal.export_collage(out_dir)

    path = run_with_journal(tmp_path, scenario, clock=lambda: 1700000000000)

    assert path.name == "minimal-life-collage-2items-1700000000000.png"
    assert path.parent == out_dir.resolve()
    with Image.open(path) as collage:
        assert collage.format == "PNG"
        assert collage.size == (2 * 210 + 10, 210 + 10 + 80)


def test_export_collage_with_no_items_writes_nothing(tmp_path):
    out_dir = tmp_path / "exports"
    out_dir.mkdir()

    async def scenario(journal):
        with pytest.raises(ValidationError):
            await journal.export_collage(out_dir)

    run_with_journal(tmp_path, scenario)
    assert list(out_dir.iterdir()) == []


def test_export_collage_requires_existing_directory(tmp_path):
    async def scenario(journal):
        await journal.record(png_bytes(), reason="a")
        with pytest.raises(ValidationError):
            await journal.export_collage(tmp_path / "missing")

    run_with_journal(tmp_path, scenario)
