"""
GalleryPresenter: turns stored items into gallery cards and maps core failures
onto user-facing messages, decoupled from any concrete view.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, List, Optional

from .controllers import DiscardJournal
from .errors import (
    DecodeError,
    EncodeError,
    MinimalLifeError,
    StorageReadError,
    StorageWriteError,
    ValidationError,
)
from .models import DateLike, Item

MISSING_IMAGE_MESSAGE = "사진을 첨부해주세요."
SAVE_FAILED_MESSAGE = "저장에 실패했습니다."
LOAD_FAILED_MESSAGE = "기록을 불러오지 못했습니다."
DELETE_FAILED_MESSAGE = "삭제에 실패했습니다."


@dataclass(frozen=True)
class GalleryCard:
    id: int
    image: bytes
    display_date: str
    reason: str
    disposal_method: Optional[str]


def format_display_date(value: date) -> str:
    """Long Korean date, e.g. ``2024년 1월 5일``."""
    return f"{value.year}년 {value.month}월 {value.day}일"


def sort_newest_first(items: Iterable[Item]) -> List[Item]:
    return sorted(items, key=lambda item: (item.date, item.id), reverse=True)


def build_cards(items: Iterable[Item]) -> List[GalleryCard]:
    return [
        GalleryCard(
            id=item.id,
            image=item.image,
            display_date=format_display_date(item.date),
            reason=item.reason,
            disposal_method=item.disposal_method or None,
        )
        for item in sort_newest_first(items)
    ]


class GalleryPresenter:
    def __init__(self, view, journal: DiscardJournal):
        self.view = view
        self.journal = journal
        self.logger = logging.getLogger("minimal_life.presenter")

    async def refresh(self) -> List[GalleryCard]:
        try:
            items = await self.journal.items()
        except StorageReadError as exc:
            self.logger.error("Failed to load items: %s", exc)
            self.view.show_error(LOAD_FAILED_MESSAGE)
            return []

        cards = build_cards(items)
        self.view.set_total_count(len(cards))
        if cards:
            self.view.show_cards(cards)
        else:
            self.view.show_empty_state()
        return cards

    async def submit(
        self,
        image: Optional[bytes],
        *,
        reason: str,
        disposal_method: str = "",
        item_date: Optional[DateLike] = None,
    ) -> Optional[int]:
        """Record a new item and refresh the gallery; returns the new id."""
        if not image:
            self.view.show_error(MISSING_IMAGE_MESSAGE)
            return None
        try:
            item_id = await self.journal.record(
                image,
                reason=reason,
                disposal_method=disposal_method,
                item_date=item_date,
            )
        except ValidationError as exc:
            self.view.show_error(str(exc))
            return None
        except (DecodeError, EncodeError, StorageWriteError) as exc:
            self.logger.error("Error saving item: %s", exc)
            self.view.show_error(SAVE_FAILED_MESSAGE)
            return None

        self.view.close_form()
        await self.refresh()
        return item_id

    async def delete_item(self, item_id: int, confirm: Callable[[], bool]) -> bool:
        """Delete *item_id* once *confirm* agrees, then refresh."""
        if not confirm():
            return False
        try:
            await self.journal.remove(item_id)
        except MinimalLifeError as exc:
            self.logger.error("Error deleting item %s: %s", item_id, exc)
            self.view.show_error(DELETE_FAILED_MESSAGE)
            return False
        await self.refresh()
        return True
