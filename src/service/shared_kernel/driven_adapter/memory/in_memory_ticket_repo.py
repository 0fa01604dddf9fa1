from datetime import datetime, timezone
from typing import Callable, List, Optional
from uuid import UUID

import attrs

from src.platform.exception.exceptions import (
    DuplicateBookingError,
    IdentifierCollisionError,
    NotFoundError,
    PaymentNotConfirmedError,
)
from src.service.shared_kernel.app.dto.ticket_query_dto import (
    AttendanceStats,
    TicketSearchCriteria,
)
from src.service.shared_kernel.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.shared_kernel.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.shared_kernel.domain.entity.ticket_entity import Ticket
from src.service.shared_kernel.domain.enum.ticket_status import TicketStatus
from src.service.shared_kernel.domain.value_object.verification import StaffNote
from src.service.shared_kernel.driven_adapter.memory.in_memory_store import (
    InMemoryStore,
    InMemoryTables,
)


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _find(tables: InMemoryTables, predicate: Callable[[Ticket], bool]) -> Optional[Ticket]:
    for ticket in tables.tickets.values():
        if predicate(ticket):
            return attrs.evolve(ticket)
    return None


def _active_for_attendee(
    tables: InMemoryTables, event_id: int, attendee_id: int
) -> Optional[Ticket]:
    return _find(
        tables,
        lambda t: t.event_id == event_id
        and t.attendee_id == attendee_id
        and t.status != TicketStatus.CANCELLED,
    )


class InMemoryTicketCommandRepo(ITicketCommandRepo):
    def __init__(self, *, tables: InMemoryTables) -> None:
        self.tables = tables

    async def get_by_id(self, *, ticket_id: UUID, for_update: bool = False) -> Optional[Ticket]:
        ticket = self.tables.tickets.get(ticket_id)
        return attrs.evolve(ticket) if ticket else None

    async def get_by_ticket_number(
        self, *, ticket_number: str, for_update: bool = False
    ) -> Optional[Ticket]:
        return _find(self.tables, lambda t: t.ticket_number == ticket_number)

    async def get_by_verification_token(
        self, *, verification_token: str, for_update: bool = False
    ) -> Optional[Ticket]:
        return _find(self.tables, lambda t: t.verification_token == verification_token)

    async def get_active_for_attendee(self, *, event_id: int, attendee_id: int) -> Optional[Ticket]:
        return _active_for_attendee(self.tables, event_id, attendee_id)

    async def create(self, *, ticket: Ticket) -> Ticket:
        # Same constraints the database enforces with unique indexes
        if _active_for_attendee(self.tables, ticket.event_id, ticket.attendee_id):
            raise DuplicateBookingError()
        for existing in self.tables.tickets.values():
            if (
                existing.id == ticket.id
                or existing.ticket_number == ticket.ticket_number
                or existing.verification_token == ticket.verification_token
            ):
                raise IdentifierCollisionError()
            if ticket.payment_ref and existing.payment_ref == ticket.payment_ref:
                raise PaymentNotConfirmedError('Payment reference already backs another ticket')
        self.tables.tickets[ticket.id] = attrs.evolve(ticket)
        return attrs.evolve(ticket)

    async def update(self, *, ticket: Ticket) -> Ticket:
        stored = self.tables.tickets.get(ticket.id)
        if stored is None:
            raise NotFoundError('Ticket not found')
        # Identifiers, price and notes are not touched by update
        updated = attrs.evolve(
            stored,
            status=ticket.status,
            payment_status=ticket.payment_status,
            verification=ticket.verification,
            cancellation=ticket.cancellation,
            updated_at=ticket.updated_at,
        )
        self.tables.tickets[ticket.id] = updated
        return attrs.evolve(updated)

    async def add_note(self, *, ticket_id: UUID, note: StaffNote) -> None:
        stored = self.tables.tickets.get(ticket_id)
        if stored is None:
            raise NotFoundError('Ticket not found')
        self.tables.tickets[ticket_id] = attrs.evolve(
            stored, staff_notes=[*stored.staff_notes, note]
        )

    async def list_active_by_event(self, *, event_id: int) -> List[Ticket]:
        tickets = [
            t
            for t in self.tables.tickets.values()
            if t.event_id == event_id and t.status == TicketStatus.ACTIVE
        ]
        return [attrs.evolve(t) for t in sorted(tickets, key=lambda t: t.booked_at or _EPOCH)]

    async def list_awaiting_refund(self, *, limit: int) -> List[Ticket]:
        tickets = [t for t in self.tables.tickets.values() if t.awaits_refund]
        tickets.sort(key=lambda t: t.cancellation.cancelled_at if t.cancellation else _EPOCH)
        return [attrs.evolve(t) for t in tickets[:limit]]


class InMemoryTicketQueryRepo(ITicketQueryRepo):
    def __init__(self, *, store: InMemoryStore) -> None:
        self.store = store

    def _tickets(self) -> List[Ticket]:
        return list(self.store.tables.tickets.values())

    async def get_by_id(self, *, ticket_id: UUID) -> Optional[Ticket]:
        ticket = self.store.tables.tickets.get(ticket_id)
        return attrs.evolve(ticket) if ticket else None

    async def get_active_for_attendee(self, *, event_id: int, attendee_id: int) -> Optional[Ticket]:
        return _active_for_attendee(self.store.tables, event_id, attendee_id)

    async def list_by_attendee(
        self, *, attendee_id: int, status: Optional[TicketStatus] = None
    ) -> List[Ticket]:
        tickets = [
            t
            for t in self._tickets()
            if t.attendee_id == attendee_id and (status is None or t.status == status)
        ]
        tickets.sort(key=lambda t: t.booked_at or _EPOCH, reverse=True)
        return [attrs.evolve(t) for t in tickets]

    async def attendance_stats(self, *, event_id: int) -> AttendanceStats:
        active = [
            t for t in self._tickets() if t.event_id == event_id and t.status == TicketStatus.ACTIVE
        ]
        return AttendanceStats(
            total=len(active), scanned=sum(1 for t in active if t.verification.is_scanned)
        )

    async def list_recent_scans(self, *, event_id: int, limit: int) -> List[Ticket]:
        scanned = [
            t
            for t in self._tickets()
            if t.event_id == event_id
            and t.status == TicketStatus.ACTIVE
            and t.verification.is_scanned
        ]
        scanned.sort(key=lambda t: t.verification.scanned_at or _EPOCH, reverse=True)
        return [attrs.evolve(t) for t in scanned[:limit]]

    async def search(self, *, criteria: TicketSearchCriteria) -> List[Ticket]:
        tickets = [
            t
            for t in self._tickets()
            if (criteria.event_id is None or t.event_id == criteria.event_id)
            and (criteria.attendee_id is None or t.attendee_id == criteria.attendee_id)
            and (criteria.status is None or t.status == criteria.status)
            and criteria.matches_booked_at(t.booked_at)
        ]
        tickets.sort(key=lambda t: (t.booked_at or _EPOCH, str(t.id)), reverse=True)
        page = tickets[criteria.offset : criteria.offset + criteria.limit]
        return [attrs.evolve(t) for t in page]

    async def list_scan_times(self, *, event_id: int) -> List[datetime]:
        return [
            t.verification.scanned_at
            for t in self._tickets()
            if t.event_id == event_id and t.verification.scanned_at is not None
        ]
