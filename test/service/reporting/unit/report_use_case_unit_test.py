"""
Unit tests for reporting reads

Test Focus:
1. Ticket search: filters, paging, booked_at range, who may search what
2. Scan histogram: hourly UTC buckets, naive timestamps treated as UTC
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.platform.exception.exceptions import DomainError, ForbiddenError, NotFoundError
from src.service.checkin.app.command.scan_ticket_use_case import ScanLookup, ScanTicketUseCase
from src.service.ledger.app.command.cancel_ticket_use_case import CancelTicketUseCase
from src.service.reporting.app.query.scan_histogram_use_case import (
    HourBucket,
    ScanHistogramUseCase,
    bucket_by_utc_hour,
)
from src.service.reporting.app.query.search_tickets_use_case import SearchTicketsUseCase
from src.service.shared_kernel.app.dto.ticket_query_dto import TicketSearchCriteria
from src.service.shared_kernel.domain.entity.principal_entity import Principal
from src.service.shared_kernel.domain.enum.ticket_status import ScanAction, TicketStatus
from src.service.shared_kernel.domain.enum.user_role import UserRole
from src.service.shared_kernel.driven_adapter.memory.in_memory_event_repo import (
    InMemoryEventQueryRepo,
)
from src.service.shared_kernel.driven_adapter.memory.in_memory_store import InMemoryStore
from src.service.shared_kernel.driven_adapter.memory.in_memory_ticket_repo import (
    InMemoryTicketQueryRepo,
)
from test.shared.fakes import FrozenClock
from test.shared.seed import NOW, OTHER_HOST_ID, STAFF_ID, seed_event, seed_ticket


@pytest.mark.unit
class TestSearchTickets:
    @pytest.fixture
    def use_case(
        self,
        event_query_repo: InMemoryEventQueryRepo,
        ticket_query_repo: InMemoryTicketQueryRepo,
    ) -> SearchTicketsUseCase:
        return SearchTicketsUseCase(
            event_query_repo=event_query_repo, ticket_query_repo=ticket_query_repo
        )

    @pytest.mark.asyncio
    async def test_host_filters_by_status_and_pages(
        self,
        use_case: SearchTicketsUseCase,
        cancel_use_case: CancelTicketUseCase,
        store: InMemoryStore,
        host: Principal,
    ) -> None:
        # Arrange
        event = await seed_event(store)
        tickets = [await seed_ticket(store, event=event, attendee_id=200 + i) for i in range(4)]
        await cancel_use_case.execute(ticket_id=tickets[0].id, attendee_id=200)

        # Act
        active = await use_case.execute(
            criteria=TicketSearchCriteria(event_id=event.id, status=TicketStatus.ACTIVE),
            principal=host,
        )
        page = await use_case.execute(
            criteria=TicketSearchCriteria(event_id=event.id, limit=2, offset=2), principal=host
        )

        # Assert
        assert {t.id for t in active} == {t.id for t in tickets[1:]}
        assert len(page) == 2

    @pytest.mark.asyncio
    async def test_booked_range(
        self,
        use_case: SearchTicketsUseCase,
        store: InMemoryStore,
        admin: Principal,
    ) -> None:
        # Arrange
        event = await seed_event(store)
        early = await seed_ticket(store, event=event, attendee_id=200, now=NOW)
        await seed_ticket(store, event=event, attendee_id=201, now=NOW + timedelta(days=2))

        # Act
        found = await use_case.execute(
            criteria=TicketSearchCriteria(
                booked_from=NOW - timedelta(hours=1), booked_to=NOW + timedelta(hours=1)
            ),
            principal=admin,
        )

        # Assert
        assert [t.id for t in found] == [early.id]

    @pytest.mark.asyncio
    async def test_inverted_range(self, use_case: SearchTicketsUseCase, admin: Principal) -> None:
        with pytest.raises(DomainError, match='booked_from'):
            await use_case.execute(
                criteria=TicketSearchCriteria(booked_from=NOW, booked_to=NOW - timedelta(days=1)),
                principal=admin,
            )

    @pytest.mark.asyncio
    async def test_host_must_name_an_event(
        self, use_case: SearchTicketsUseCase, host: Principal
    ) -> None:
        with pytest.raises(ForbiddenError):
            await use_case.execute(criteria=TicketSearchCriteria(), principal=host)

    @pytest.mark.asyncio
    async def test_host_of_another_event(
        self, use_case: SearchTicketsUseCase, store: InMemoryStore
    ) -> None:
        # Arrange
        event = await seed_event(store)

        # Act & Assert
        with pytest.raises(ForbiddenError):
            await use_case.execute(
                criteria=TicketSearchCriteria(event_id=event.id),
                principal=Principal(id=OTHER_HOST_ID, role=UserRole.HOST),
            )

    @pytest.mark.asyncio
    async def test_unknown_event(self, use_case: SearchTicketsUseCase, admin: Principal) -> None:
        with pytest.raises(NotFoundError):
            await use_case.execute(criteria=TicketSearchCriteria(event_id=404), principal=admin)


@pytest.mark.unit
class TestScanHistogram:
    def test_buckets_by_utc_hour(self) -> None:
        """
        Given: Scans in two hours, one of them given in UTC+2 and one naive
        When: Bucketed
        Then: Hours are UTC, sorted, and empty hours are left out
        """
        # Arrange
        plus_two = timezone(timedelta(hours=2))
        scan_times = [
            datetime(2026, 6, 1, 18, 5, tzinfo=timezone.utc),
            datetime(2026, 6, 1, 20, 59, tzinfo=plus_two),  # 18:59 UTC
            datetime(2026, 6, 1, 21, 0),  # naive, taken as UTC
        ]

        # Act
        buckets = bucket_by_utc_hour(scan_times)

        # Assert
        assert buckets == [
            HourBucket(hour=datetime(2026, 6, 1, 18, tzinfo=timezone.utc), count=2),
            HourBucket(hour=datetime(2026, 6, 1, 21, tzinfo=timezone.utc), count=1),
        ]

    def test_no_scans(self) -> None:
        assert bucket_by_utc_hour([]) == []

    @pytest.mark.asyncio
    async def test_histogram_of_event_scans(
        self,
        event_query_repo: InMemoryEventQueryRepo,
        ticket_query_repo: InMemoryTicketQueryRepo,
        scan_use_case: ScanTicketUseCase,
        store: InMemoryStore,
        clock: FrozenClock,
        host: Principal,
    ) -> None:
        # Arrange
        event = await seed_event(store, starts_in=timedelta(hours=2), duration=timedelta(hours=4))
        tickets = [await seed_ticket(store, event=event, attendee_id=300 + i) for i in range(3)]
        clock.set(event.start_at + timedelta(minutes=10))
        for ticket in tickets[:2]:
            await scan_use_case.execute(
                lookup=ScanLookup(ticket_number=ticket.ticket_number),
                staff_id=STAFF_ID,
                action=ScanAction.ENTRY,
            )
        clock.advance(timedelta(hours=1))
        await scan_use_case.execute(
            lookup=ScanLookup(ticket_number=tickets[2].ticket_number),
            staff_id=STAFF_ID,
            action=ScanAction.ENTRY,
        )
        use_case = ScanHistogramUseCase(
            event_query_repo=event_query_repo, ticket_query_repo=ticket_query_repo
        )

        # Act
        buckets = await use_case.execute(event_id=event.id, principal=host)

        # Assert
        assert [b.count for b in buckets] == [2, 1]
        assert buckets[0].hour == event.start_at.replace(minute=0)

    @pytest.mark.asyncio
    async def test_other_host_is_forbidden(
        self,
        event_query_repo: InMemoryEventQueryRepo,
        ticket_query_repo: InMemoryTicketQueryRepo,
        store: InMemoryStore,
    ) -> None:
        # Arrange
        event = await seed_event(store)
        use_case = ScanHistogramUseCase(
            event_query_repo=event_query_repo, ticket_query_repo=ticket_query_repo
        )

        # Act & Assert
        with pytest.raises(ForbiddenError):
            await use_case.execute(
                event_id=event.id, principal=Principal(id=OTHER_HOST_ID, role=UserRole.HOST)
            )
