"""Controller layer for decoupling front ends from the storage pipeline."""

from .journal import DiscardJournal, collage_filename, open_journal

__all__ = [
    "DiscardJournal",
    "collage_filename",
    "open_journal",
]
