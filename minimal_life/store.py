"""Durable keyed storage for discarded items.

:class:`ItemStore` wraps a SQLite database holding one record table keyed by
an auto-incrementing ``id`` with a secondary, non-unique index on ``date``.
Every public operation runs in its own transaction on a dedicated worker
thread and is exposed as a coroutine, so the event loop only suspends while
the engine is busy.  There is no module-level connection: :meth:`ItemStore.open`
returns the handle and the caller owns its lifetime.

Failures surface as :class:`~minimal_life.errors.StorageOpenError`,
:class:`~minimal_life.errors.StorageWriteError` or
:class:`~minimal_life.errors.StorageReadError`; a failed write leaves no
partial record behind.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Type, TypeVar, Union

from utils.validation import validate_draft_fields

from . import config
from .errors import (
    MinimalLifeError,
    StorageOpenError,
    StorageReadError,
    StorageWriteError,
)
from .models import Item, ItemDraft

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_MEMORY = ":memory:"

_CREATE_TABLE = f"""
CREATE TABLE IF NOT EXISTS {config.STORE_NAME} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    image BLOB NOT NULL,
    date TEXT NOT NULL,
    reason TEXT NOT NULL CHECK (length(reason) <= {config.REASON_MAX_LENGTH}),
    disposal_method TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL
);
"""

_CREATE_DATE_INDEX = (
    f"CREATE INDEX IF NOT EXISTS {config.DATE_INDEX_NAME} "
    f"ON {config.STORE_NAME} (date);"
)

_COLUMNS = "id, image, date, reason, disposal_method, created_at"


def _connect(path: str) -> sqlite3.Connection:
    """Open *path* and make sure the schema exists.

    Runs on the store's worker thread.  Reopening an existing database only
    verifies the schema version; data is never touched.
    """
    if path != _MEMORY:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(
        path,
        timeout=config.STORE_BUSY_TIMEOUT_SECS,
        check_same_thread=False,
    )
    try:
        conn.row_factory = sqlite3.Row
        version = conn.execute("PRAGMA user_version;").fetchone()[0]
        if version > config.SCHEMA_VERSION:
            raise StorageOpenError(
                f"Store schema version {version} is newer than supported "
                f"version {config.SCHEMA_VERSION}"
            )
        conn.execute("PRAGMA journal_mode=WAL;")
        with conn:
            conn.execute(_CREATE_TABLE)
            conn.execute(_CREATE_DATE_INDEX)
            if version < config.SCHEMA_VERSION:
                conn.execute(f"PRAGMA user_version = {config.SCHEMA_VERSION};")
    except BaseException:
        conn.close()
        raise
    return conn


class ItemStore:
    """Handle to an open item store.

    Obtain one with ``await ItemStore.open(path)`` and release it with
    :meth:`close`, or use it as an async context manager.
    """

    def __init__(
        self,
        path: str,
        conn: sqlite3.Connection,
        executor: ThreadPoolExecutor,
    ) -> None:
        self.path = path
        self._conn: Optional[sqlite3.Connection] = conn
        self._executor = executor

    @classmethod
    async def open(cls, path: Union[str, Path, None] = None) -> "ItemStore":
        """Open (creating on first use) the store at *path*.

        Defaults to :data:`minimal_life.config.DB_PATH`.
        """
        db_path = str(path if path is not None else config.DB_PATH)
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="item-store")
        loop = asyncio.get_running_loop()
        try:
            conn = await loop.run_in_executor(executor, _connect, db_path)
        except StorageOpenError as exc:
            executor.shutdown(wait=False)
            LOGGER.error("Failed to open item store %s: %s", db_path, exc)
            raise
        except (sqlite3.Error, OSError) as exc:
            executor.shutdown(wait=False)
            LOGGER.error("Failed to open item store %s: %s", db_path, exc)
            raise StorageOpenError(f"Cannot open item store at {db_path}: {exc}") from exc
        LOGGER.info("Opened item store %s", db_path)
        return cls(db_path, conn, executor)

    @property
    def closed(self) -> bool:
        return self._conn is None

    async def __aenter__(self) -> "ItemStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the connection and stop the worker thread.  Idempotent."""
        conn = self._conn
        if conn is None:
            return
        self._conn = None
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(self._executor, conn.close)
        finally:
            self._executor.shutdown(wait=True)
        LOGGER.info("Closed item store %s", self.path)

    async def _run(
        self,
        fn: Callable[[sqlite3.Connection], T],
        error_cls: Type[MinimalLifeError],
        action: str,
    ) -> T:
        """Run *fn* on the worker thread, translating engine failures."""
        conn = self._conn
        if conn is None:
            raise error_cls(f"Cannot {action}: item store is closed")
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._executor, fn, conn)
        except (sqlite3.Error, ValueError, KeyError) as exc:
            raise error_cls(f"Failed to {action}: {exc}") from exc

    async def add(self, draft: ItemDraft) -> int:
        """Validate and insert *draft*, returning the assigned ``id``."""
        image, item_date, reason, method = validate_draft_fields(
            draft.image, draft.date, draft.reason, draft.disposal_method
        )
        created_at = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        log = logging.LoggerAdapter(LOGGER, {"cid": uuid.uuid4().hex})

        def _insert(conn: sqlite3.Connection) -> int:
            with conn:
                cursor = conn.execute(
                    f"INSERT INTO {config.STORE_NAME} "
                    "(image, date, reason, disposal_method, created_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (
                        sqlite3.Binary(image),
                        item_date.strftime(config.STORAGE_DATE_FORMAT),
                        reason,
                        method,
                        created_at,
                    ),
                )
                return int(cursor.lastrowid)

        try:
            item_id = await self._run(_insert, StorageWriteError, "add item")
        except StorageWriteError as exc:
            log.error("item write aborted: %s", exc)
            raise
        log.info("stored item %d dated %s", item_id, item_date.isoformat())
        return item_id

    async def delete(self, item_id: int) -> None:
        """Remove the item with *item_id*; missing ids are not an error."""

        def _delete(conn: sqlite3.Connection) -> int:
            with conn:
                cursor = conn.execute(
                    f"DELETE FROM {config.STORE_NAME} WHERE id = ?", (int(item_id),)
                )
                return cursor.rowcount

        removed = await self._run(_delete, StorageWriteError, f"delete item {item_id}")
        if removed:
            LOGGER.info("Deleted item %s", item_id)
        else:
            LOGGER.debug("Delete of missing item %s ignored", item_id)

    async def list_all(self) -> List[Item]:
        """Return every stored item from a single read snapshot."""

        def _select(conn: sqlite3.Connection) -> List[Item]:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM {config.STORE_NAME} ORDER BY id"
            ).fetchall()
            return [Item.from_record(row) for row in rows]

        return await self._run(_select, StorageReadError, "list items")

    async def count(self) -> int:
        """Return the number of stored items."""

        def _count(conn: sqlite3.Connection) -> int:
            return int(conn.execute(f"SELECT COUNT(*) FROM {config.STORE_NAME}").fetchone()[0])

        return await self._run(_count, StorageReadError, "count items")


__all__ = ["ItemStore"]
