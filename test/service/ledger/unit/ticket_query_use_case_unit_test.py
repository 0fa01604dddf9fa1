"""
Unit tests for the attendee-facing ticket reads

Test Focus:
1. ListMyTicketsUseCase: filters, upcoming, per-status counts, can_cancel flag
2. GetTicketUseCase: who may read a ticket
"""

from datetime import timedelta
import uuid

import pytest

from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.service.ledger.app.command.cancel_ticket_use_case import CancelTicketUseCase
from src.service.ledger.app.query.get_ticket_use_case import GetTicketUseCase
from src.service.ledger.app.query.list_my_tickets_use_case import ListMyTicketsUseCase
from src.service.shared_kernel.domain.entity.principal_entity import Principal
from src.service.shared_kernel.domain.enum.ticket_status import TicketStatus
from src.service.shared_kernel.domain.enum.user_role import UserRole
from src.service.shared_kernel.driven_adapter.memory.in_memory_event_repo import (
    InMemoryEventQueryRepo,
)
from src.service.shared_kernel.driven_adapter.memory.in_memory_store import InMemoryStore
from src.service.shared_kernel.driven_adapter.memory.in_memory_ticket_repo import (
    InMemoryTicketQueryRepo,
)
from test.shared.fakes import FrozenClock
from test.shared.seed import (
    ATTENDEE_ID,
    OTHER_HOST_ID,
    OTHER_STAFF_ID,
    STAFF_ID,
    seed_event,
    seed_ticket,
)


@pytest.mark.unit
class TestListMyTickets:
    @pytest.fixture
    def use_case(
        self,
        ticket_query_repo: InMemoryTicketQueryRepo,
        event_query_repo: InMemoryEventQueryRepo,
        clock: FrozenClock,
    ) -> ListMyTicketsUseCase:
        return ListMyTicketsUseCase(
            ticket_query_repo=ticket_query_repo,
            event_query_repo=event_query_repo,
            clock=clock,
            window=timedelta(hours=24),
        )

    @pytest.mark.asyncio
    async def test_counts_cover_all_tickets_while_items_are_filtered(
        self,
        use_case: ListMyTicketsUseCase,
        cancel_use_case: CancelTicketUseCase,
        store: InMemoryStore,
    ) -> None:
        """
        Given: One active and one cancelled ticket
        When: The attendee lists active tickets only
        Then: One item, but counts still report both
        """
        # Arrange
        first_event = await seed_event(store)
        second_event = await seed_event(store)
        await seed_ticket(store, event=first_event)
        cancelled = await seed_ticket(store, event=second_event)
        await cancel_use_case.execute(ticket_id=cancelled.id, attendee_id=ATTENDEE_ID)

        # Act
        result = await use_case.execute(attendee_id=ATTENDEE_ID, status=TicketStatus.ACTIVE)

        # Assert
        assert [item.event.id for item in result.items] == [first_event.id]
        assert result.counts == {
            'total': 2,
            'active': 1,
            'cancelled': 1,
            'used': 0,
            'expired': 0,
        }

    @pytest.mark.asyncio
    async def test_can_cancel_reflects_the_window(
        self, use_case: ListMyTicketsUseCase, store: InMemoryStore
    ) -> None:
        # Arrange
        soon = await seed_event(store, starts_in=timedelta(hours=2))
        later = await seed_event(store, starts_in=timedelta(days=3))
        await seed_ticket(store, event=soon)
        await seed_ticket(store, event=later)

        # Act
        result = await use_case.execute(attendee_id=ATTENDEE_ID)

        # Assert
        flags = {item.event.id: item.can_cancel for item in result.items}
        assert flags == {soon.id: False, later.id: True}

    @pytest.mark.asyncio
    async def test_upcoming_hides_started_events(
        self, use_case: ListMyTicketsUseCase, store: InMemoryStore, clock: FrozenClock
    ) -> None:
        # Arrange
        started = await seed_event(store, starts_in=timedelta(hours=1))
        future = await seed_event(store, starts_in=timedelta(days=2))
        await seed_ticket(store, event=started)
        await seed_ticket(store, event=future)
        clock.advance(timedelta(hours=2))

        # Act
        result = await use_case.execute(attendee_id=ATTENDEE_ID, upcoming=True)

        # Assert
        assert [item.event.id for item in result.items] == [future.id]
        assert result.counts['total'] == 2


@pytest.mark.unit
class TestGetTicket:
    @pytest.fixture
    def use_case(
        self,
        ticket_query_repo: InMemoryTicketQueryRepo,
        event_query_repo: InMemoryEventQueryRepo,
    ) -> GetTicketUseCase:
        return GetTicketUseCase(
            ticket_query_repo=ticket_query_repo, event_query_repo=event_query_repo
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'principal',
        [
            Principal(id=ATTENDEE_ID, role=UserRole.ATTENDEE),
            Principal(id=10, role=UserRole.HOST),
            Principal(id=STAFF_ID, role=UserRole.STAFF),
            Principal(id=1, role=UserRole.ADMIN),
        ],
        ids=['owner', 'event-host', 'assigned-staff', 'admin'],
    )
    async def test_allowed_readers(
        self, use_case: GetTicketUseCase, store: InMemoryStore, principal: Principal
    ) -> None:
        # Arrange
        event = await seed_event(store)
        ticket = await seed_ticket(store, event=event)

        # Act
        result = await use_case.execute(ticket_id=ticket.id, principal=principal)

        # Assert
        assert result.id == ticket.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'principal',
        [
            Principal(id=ATTENDEE_ID + 1, role=UserRole.ATTENDEE),
            Principal(id=OTHER_HOST_ID, role=UserRole.HOST),
            Principal(id=OTHER_STAFF_ID, role=UserRole.STAFF),
        ],
        ids=['other-attendee', 'other-host', 'unassigned-staff'],
    )
    async def test_forbidden_readers(
        self, use_case: GetTicketUseCase, store: InMemoryStore, principal: Principal
    ) -> None:
        # Arrange
        event = await seed_event(store)
        ticket = await seed_ticket(store, event=event)

        # Act & Assert
        with pytest.raises(ForbiddenError):
            await use_case.execute(ticket_id=ticket.id, principal=principal)

    @pytest.mark.asyncio
    async def test_unknown_ticket(self, use_case: GetTicketUseCase, attendee: Principal) -> None:
        with pytest.raises(NotFoundError):
            await use_case.execute(ticket_id=uuid.uuid4(), principal=attendee)
