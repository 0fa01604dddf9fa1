from typing import Any

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.service.shared_kernel.driven_adapter.memory.in_memory_event_repo import (
    InMemoryEventCommandRepo,
)
from src.service.shared_kernel.driven_adapter.memory.in_memory_store import (
    InMemoryStore,
    InMemoryTables,
)
from src.service.shared_kernel.driven_adapter.memory.in_memory_ticket_repo import (
    InMemoryTicketCommandRepo,
)


class InMemoryUnitOfWork(AbstractUnitOfWork):
    """Serializable by construction: one Unit of Work at a time holds the store lock."""

    def __init__(self, *, store: InMemoryStore) -> None:
        self.store = store
        self._working: InMemoryTables | None = None
        self._locked = False

    async def __aenter__(self) -> AbstractUnitOfWork:
        await self.store.lock.acquire()
        self._locked = True
        self._working = self.store.tables.copy()
        self.event_command_repo = InMemoryEventCommandRepo(tables=self._working, store=self.store)
        self.ticket_command_repo = InMemoryTicketCommandRepo(tables=self._working)
        return await super().__aenter__()

    async def __aexit__(self, *args: Any) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            if self._locked:
                self._locked = False
                self.store.lock.release()

    async def _commit(self) -> None:
        assert self._working is not None
        self.store.tables = self._working.copy()

    async def rollback(self) -> None:
        if self._working is not None:
            self._working.replace_with(self.store.tables)
