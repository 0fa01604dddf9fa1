"""
In-process keyed lock

One asyncio.Lock per key (e.g. "event:42", "ticket:<uuid>"). Holders of the same key
serialize; different keys proceed concurrently. Entries are dropped once no task holds
or waits for them, so the table stays proportional to in-flight work.

Cross-process serialization is provided by the storage layer (row locks, conditional
updates and unique indexes); this lock only removes avoidable contention inside one worker.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from src.platform.logging.loguru_io import Logger


class _Entry:
    __slots__ = ('lock', 'users')

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class KeyedLock:
    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}

    @asynccontextmanager
    async def hold(self, *, key: str) -> AsyncIterator[None]:
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _Entry()
        entry.users += 1
        try:
            async with entry.lock:
                Logger.base.debug(f'🔒 [LOCK] Acquired {key}')
                yield
        finally:
            entry.users -= 1
            if not entry.users:
                self._entries.pop(key, None)
            Logger.base.debug(f'🔓 [LOCK] Released {key}')

    def __len__(self) -> int:
        return len(self._entries)


def event_lock_key(event_id: int) -> str:
    return f'event:{event_id}'


def ticket_lock_key(ticket_id: object) -> str:
    return f'ticket:{ticket_id}'
