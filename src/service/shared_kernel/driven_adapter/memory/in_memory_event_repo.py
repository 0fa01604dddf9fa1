from datetime import datetime
from typing import List, Optional

import attrs

from src.platform.exception.exceptions import NotFoundError
from src.service.shared_kernel.app.interface.i_event_command_repo import IEventCommandRepo
from src.service.shared_kernel.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.enum.event_status import EventStatus
from src.service.shared_kernel.driven_adapter.memory.in_memory_store import (
    InMemoryStore,
    InMemoryTables,
)


class InMemoryEventCommandRepo(IEventCommandRepo):
    def __init__(self, *, tables: InMemoryTables, store: InMemoryStore) -> None:
        self.tables = tables
        self.store = store

    async def get_by_id(self, *, event_id: int, for_update: bool = False) -> Optional[Event]:
        # The Unit of Work already holds the store lock; for_update needs nothing more
        event = self.tables.events.get(event_id)
        return attrs.evolve(event) if event else None

    async def create(self, *, event: Event) -> Event:
        created = attrs.evolve(event, id=self.store.next_event_id(), tickets_sold=0)
        self.tables.events[created.id] = created  # type: ignore[index]
        return attrs.evolve(created)

    async def update(self, *, event: Event) -> Event:
        stored = self.tables.events.get(event.id) if event.id is not None else None
        if stored is None:
            raise NotFoundError('Event not found')
        updated = attrs.evolve(event, tickets_sold=stored.tickets_sold)
        self.tables.events[stored.id] = updated  # type: ignore[index]
        return attrs.evolve(updated)

    async def adjust_tickets_sold(self, *, event_id: int, delta: int) -> bool:
        event = self.tables.events.get(event_id)
        if event is None:
            return False
        new_value = event.tickets_sold + delta
        if not 0 <= new_value <= event.capacity:
            return False
        self.tables.events[event_id] = attrs.evolve(event, tickets_sold=new_value)
        return True


class InMemoryEventQueryRepo(IEventQueryRepo):
    def __init__(self, *, store: InMemoryStore) -> None:
        self.store = store

    async def get_by_id(self, *, event_id: int) -> Optional[Event]:
        event = self.store.tables.events.get(event_id)
        return attrs.evolve(event) if event else None

    async def list_published(
        self,
        *,
        starting_after: datetime,
        category: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Event]:
        events = sorted(
            (
                e
                for e in self.store.tables.events.values()
                if e.status == EventStatus.PUBLISHED
                and e.start_at > starting_after
                and (category is None or e.category == category)
            ),
            key=lambda e: (e.start_at, e.id),
        )
        return [attrs.evolve(e) for e in events[offset : offset + limit]]

    async def list_by_host(self, *, host_id: int) -> List[Event]:
        events = [e for e in self.store.tables.events.values() if e.host_id == host_id]
        return [attrs.evolve(e) for e in sorted(events, key=lambda e: e.start_at)]

    async def list_by_staff(self, *, staff_id: int) -> List[Event]:
        events = [e for e in self.store.tables.events.values() if e.is_staff_assigned(staff_id)]
        return [attrs.evolve(e) for e in sorted(events, key=lambda e: e.start_at)]

    async def is_staff_assigned(self, *, event_id: int, staff_id: int) -> bool:
        event = self.store.tables.events.get(event_id)
        return bool(event and event.is_staff_assigned(staff_id))
