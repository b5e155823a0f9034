"""Key-value storage backends for the booking store.

The booking store keeps its whole collection as one JSON document under a
single key, the same shape the browser app keeps in ``localStorage``. A
backend only has to get, set and remove strings by key.
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.storage_item import StorageItem

logger = logging.getLogger(__name__)

DATABASE = "database"
MEMORY = "memory"
STORAGE_KINDS = (DATABASE, MEMORY)


class StorageBackend(Protocol):
    async def get_item(self, key: str) -> str | None: ...

    async def set_item(self, key: str, value: str) -> None: ...

    async def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage; contents vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class DatabaseStorage:
    """Rows of the ``storage_items`` table, one per key.

    Each call runs in its own session and transaction, so a write is
    committed before ``set_item`` returns.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_item(self, key: str) -> str | None:
        async with self._session_factory() as session:
            item = await session.get(StorageItem, key)
            return item.value if item is not None else None

    async def set_item(self, key: str, value: str) -> None:
        async with self._session_factory.begin() as session:
            item = await session.get(StorageItem, key)
            if item is None:
                session.add(StorageItem(key=key, value=value))
            else:
                item.value = value
        logger.debug("Stored %d characters under %r", len(value), key)

    async def remove_item(self, key: str) -> None:
        async with self._session_factory.begin() as session:
            await session.execute(delete(StorageItem).where(StorageItem.key == key))


def storage_from_settings(kind: str, session_factory: async_sessionmaker[AsyncSession]) -> StorageBackend:
    """Build the backend named by ``settings.booking_storage``.

    Args:
        kind: ``"database"`` for the ``storage_items`` table, ``"memory"``
            for a process-local dict.
        session_factory: Sessions for the database backend.

    Raises:
        ValueError: If ``kind`` names no known backend.
    """
    if kind == DATABASE:
        return DatabaseStorage(session_factory)
    if kind == MEMORY:
        logger.warning("BOOKING_STORAGE is 'memory', bookings are lost when the process exits")
        return MemoryStorage()
    raise ValueError(f"Unknown booking storage {kind!r}. Must be one of: {', '.join(STORAGE_KINDS)}")
