"""
In-process storage backend

Committed state lives in InMemoryStore.tables. A Unit of Work copies the tables,
works on the copy while holding the store lock, and publishes the copy on commit,
so readers only ever see committed state and writers are serialized.
"""

import asyncio
import itertools
from typing import Dict
from uuid import UUID

import attrs

from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.entity.ticket_entity import Ticket


@attrs.define
class InMemoryTables:
    events: Dict[int, Event] = attrs.field(factory=dict)
    tickets: Dict[UUID, Ticket] = attrs.field(factory=dict)

    def copy(self) -> 'InMemoryTables':
        return InMemoryTables(events=dict(self.events), tickets=dict(self.tickets))

    def replace_with(self, other: 'InMemoryTables') -> None:
        self.events = dict(other.events)
        self.tickets = dict(other.tickets)


class InMemoryStore:
    def __init__(self) -> None:
        self.tables = InMemoryTables()
        self.lock = asyncio.Lock()
        self._event_ids = itertools.count(1)

    def next_event_id(self) -> int:
        # Like a database sequence: ids are not reused after rollback
        return next(self._event_ids)
