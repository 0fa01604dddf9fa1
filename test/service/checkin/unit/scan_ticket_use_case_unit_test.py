"""
Unit tests for ScanTicketUseCase

Test Focus:
1. First entry vs re-entry: scan_count, scanned_at and scanned_by
2. Exit requires a prior entry
3. Check order: ticket, event, staff assignment, ticket state, time window
4. Lookup by ticket number or verification token, and conflicting keys
5. Concurrent scans of one ticket produce exactly one first entry
"""

from datetime import timedelta

import anyio
import pytest

from src.platform.exception.exceptions import (
    DomainError,
    EventWindowClosedError,
    InconsistentStateError,
    NotCheckedInError,
    NotFoundError,
    StaffNotAssignedError,
    TicketNotActiveError,
)
from src.service.checkin.app.command.scan_ticket_use_case import ScanLookup, ScanTicketUseCase
from src.service.ledger.app.command.cancel_ticket_use_case import CancelTicketUseCase
from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.enum.ticket_status import ScanAction
from src.service.shared_kernel.driven_adapter.memory.in_memory_store import InMemoryStore
from test.shared.fakes import FrozenClock
from test.shared.seed import (
    ATTENDEE_ID,
    OTHER_ATTENDEE_ID,
    OTHER_STAFF_ID,
    STAFF_ID,
    load_ticket,
    seed_event,
    seed_ticket,
)


async def _running_event(store: InMemoryStore, clock: FrozenClock) -> Event:
    """Event that started an hour ago and runs for two more."""
    event = await seed_event(
        store, starts_in=timedelta(hours=48), duration=timedelta(hours=3)
    )
    clock.advance(timedelta(hours=49))
    return event


@pytest.mark.unit
class TestEntryScan:
    @pytest.mark.asyncio
    async def test_first_entry_then_rescan(
        self, scan_use_case: ScanTicketUseCase, store: InMemoryStore, clock: FrozenClock
    ) -> None:
        """
        Given: An active ticket for a running event
        When: Assigned staff scans it twice
        Then: The first scan records who and when; the second only bumps scan_count
        """
        # Arrange
        event = await _running_event(store, clock)
        ticket = await seed_ticket(store, event=event)
        lookup = ScanLookup(ticket_number=ticket.ticket_number)
        first_scan_at = clock.now()

        # Act
        first = await scan_use_case.execute(
            lookup=lookup, staff_id=STAFF_ID, action=ScanAction.ENTRY
        )
        clock.advance(timedelta(minutes=5))
        second = await scan_use_case.execute(
            lookup=lookup, staff_id=STAFF_ID, action=ScanAction.ENTRY
        )

        # Assert
        assert first.is_first_scan
        assert not second.is_first_scan
        verification = load_ticket(store, ticket).verification
        assert verification.is_scanned
        assert verification.scan_count == 2
        assert verification.scanned_at == first_scan_at
        assert verification.entry_time == first_scan_at
        assert verification.scanned_by == STAFF_ID

    @pytest.mark.asyncio
    async def test_rescan_by_second_staff_member(
        self, scan_use_case: ScanTicketUseCase, store: InMemoryStore, clock: FrozenClock
    ) -> None:
        """
        Given: A running event with two assigned staff members
        When: The first admits the ticket and the second scans it again
        Then: The second scan is not a first scan and scanned_by keeps the first staff member
        """
        # Arrange
        event = await seed_event(
            store,
            starts_in=timedelta(hours=48),
            duration=timedelta(hours=3),
            staff=(STAFF_ID, OTHER_STAFF_ID),
        )
        clock.advance(timedelta(hours=49))
        ticket = await seed_ticket(store, event=event)
        lookup = ScanLookup(ticket_number=ticket.ticket_number)

        # Act
        first = await scan_use_case.execute(
            lookup=lookup, staff_id=STAFF_ID, action=ScanAction.ENTRY
        )
        clock.advance(timedelta(minutes=2))
        second = await scan_use_case.execute(
            lookup=lookup, staff_id=OTHER_STAFF_ID, action=ScanAction.ENTRY
        )

        # Assert
        assert first.is_first_scan
        assert not second.is_first_scan
        verification = load_ticket(store, ticket).verification
        assert verification.scan_count == 2
        assert verification.scanned_by == STAFF_ID

    @pytest.mark.asyncio
    async def test_lookup_by_verification_token(
        self, scan_use_case: ScanTicketUseCase, store: InMemoryStore, clock: FrozenClock
    ) -> None:
        # Arrange
        event = await _running_event(store, clock)
        ticket = await seed_ticket(store, event=event)

        # Act
        result = await scan_use_case.execute(
            lookup=ScanLookup(verification_token=ticket.verification_token),
            staff_id=STAFF_ID,
            action=ScanAction.ENTRY,
        )

        # Assert
        assert result.ticket.id == ticket.id
        assert result.event.id == event.id

    @pytest.mark.asyncio
    async def test_concurrent_scans_have_one_first_entry(
        self, scan_use_case: ScanTicketUseCase, store: InMemoryStore, clock: FrozenClock
    ) -> None:
        # Arrange
        event = await _running_event(store, clock)
        ticket = await seed_ticket(store, event=event)
        lookup = ScanLookup(ticket_number=ticket.ticket_number)
        firsts: list[bool] = []

        async def scan() -> None:
            result = await scan_use_case.execute(
                lookup=lookup, staff_id=STAFF_ID, action=ScanAction.ENTRY
            )
            firsts.append(result.is_first_scan)

        # Act
        async with anyio.create_task_group() as tg:
            for _ in range(5):
                tg.start_soon(scan)

        # Assert
        assert sorted(firsts) == [False, False, False, False, True]
        assert load_ticket(store, ticket).verification.scan_count == 5


@pytest.mark.unit
class TestExitScan:
    @pytest.mark.asyncio
    async def test_exit_before_entry(
        self, scan_use_case: ScanTicketUseCase, store: InMemoryStore, clock: FrozenClock
    ) -> None:
        # Arrange
        event = await _running_event(store, clock)
        ticket = await seed_ticket(store, event=event)

        # Act & Assert
        with pytest.raises(NotCheckedInError):
            await scan_use_case.execute(
                lookup=ScanLookup(ticket_number=ticket.ticket_number),
                staff_id=STAFF_ID,
                action=ScanAction.EXIT,
            )

    @pytest.mark.asyncio
    async def test_exit_after_entry_records_exit_time(
        self, scan_use_case: ScanTicketUseCase, store: InMemoryStore, clock: FrozenClock
    ) -> None:
        # Arrange
        event = await _running_event(store, clock)
        ticket = await seed_ticket(store, event=event)
        lookup = ScanLookup(ticket_number=ticket.ticket_number)
        await scan_use_case.execute(lookup=lookup, staff_id=STAFF_ID, action=ScanAction.ENTRY)
        clock.advance(timedelta(minutes=30))

        # Act
        result = await scan_use_case.execute(
            lookup=lookup, staff_id=STAFF_ID, action=ScanAction.EXIT
        )

        # Assert
        assert result.ticket.verification.exit_time == clock.now()
        assert result.ticket.verification.scan_count == 1


@pytest.mark.unit
class TestScanRejections:
    @pytest.mark.asyncio
    async def test_unknown_ticket(self, scan_use_case: ScanTicketUseCase) -> None:
        with pytest.raises(NotFoundError):
            await scan_use_case.execute(
                lookup=ScanLookup(ticket_number='TCK-NOPE'),
                staff_id=STAFF_ID,
                action=ScanAction.ENTRY,
            )

    def test_lookup_needs_a_key(self) -> None:
        with pytest.raises(DomainError):
            ScanLookup()

    @pytest.mark.asyncio
    async def test_number_and_token_of_different_tickets(
        self, scan_use_case: ScanTicketUseCase, store: InMemoryStore, clock: FrozenClock
    ) -> None:
        # Arrange
        event = await _running_event(store, clock)
        mine = await seed_ticket(store, event=event)
        theirs = await seed_ticket(store, event=event, attendee_id=OTHER_ATTENDEE_ID)

        # Act & Assert
        with pytest.raises(InconsistentStateError, match='do not match'):
            await scan_use_case.execute(
                lookup=ScanLookup(
                    ticket_number=mine.ticket_number,
                    verification_token=theirs.verification_token,
                ),
                staff_id=STAFF_ID,
                action=ScanAction.ENTRY,
            )

    @pytest.mark.asyncio
    async def test_ticket_for_another_event(
        self, scan_use_case: ScanTicketUseCase, store: InMemoryStore, clock: FrozenClock
    ) -> None:
        # Arrange
        event = await _running_event(store, clock)
        ticket = await seed_ticket(store, event=event)

        # Act & Assert
        with pytest.raises(NotFoundError, match='for this event'):
            await scan_use_case.execute(
                lookup=ScanLookup(ticket_number=ticket.ticket_number),
                staff_id=STAFF_ID,
                action=ScanAction.ENTRY,
                event_id_hint=event.id + 1,
            )

    @pytest.mark.asyncio
    async def test_unassigned_staff(
        self, scan_use_case: ScanTicketUseCase, store: InMemoryStore, clock: FrozenClock
    ) -> None:
        # Arrange
        event = await _running_event(store, clock)
        ticket = await seed_ticket(store, event=event)

        # Act & Assert
        with pytest.raises(StaffNotAssignedError):
            await scan_use_case.execute(
                lookup=ScanLookup(ticket_number=ticket.ticket_number),
                staff_id=OTHER_STAFF_ID,
                action=ScanAction.ENTRY,
            )
        assert load_ticket(store, ticket).verification.scan_count == 0

    @pytest.mark.asyncio
    async def test_unassigned_staff_with_wrong_event_hint(
        self, scan_use_case: ScanTicketUseCase, store: InMemoryStore, clock: FrozenClock
    ) -> None:
        """
        Given: A valid ticket and a staff member not assigned to its event
        When: The scan carries an event id that does not match the ticket
        Then: StaffNotAssigned wins over the event mismatch
        """
        # Arrange
        event = await _running_event(store, clock)
        ticket = await seed_ticket(store, event=event)

        # Act & Assert
        with pytest.raises(StaffNotAssignedError):
            await scan_use_case.execute(
                lookup=ScanLookup(ticket_number=ticket.ticket_number),
                staff_id=OTHER_STAFF_ID,
                action=ScanAction.ENTRY,
                event_id_hint=event.id + 1,
            )

    @pytest.mark.asyncio
    async def test_unassigned_staff_with_unknown_ticket(
        self, scan_use_case: ScanTicketUseCase, store: InMemoryStore, clock: FrozenClock
    ) -> None:
        # Arrange
        event = await _running_event(store, clock)

        # Act & Assert
        with pytest.raises(StaffNotAssignedError):
            await scan_use_case.execute(
                lookup=ScanLookup(ticket_number='TCK-00000000-DEADBEEF'),
                staff_id=OTHER_STAFF_ID,
                action=ScanAction.ENTRY,
                event_id_hint=event.id,
            )

    @pytest.mark.asyncio
    async def test_cancelled_ticket(
        self,
        scan_use_case: ScanTicketUseCase,
        cancel_use_case: CancelTicketUseCase,
        store: InMemoryStore,
        clock: FrozenClock,
    ) -> None:
        """
        Given: A ticket cancelled well before the event
        When: It is presented at the door
        Then: TicketNotActive, after the staff assignment check
        """
        # Arrange
        event = await seed_event(store, starts_in=timedelta(hours=48))
        ticket = await seed_ticket(store, event=event)
        await cancel_use_case.execute(ticket_id=ticket.id, attendee_id=ATTENDEE_ID)
        clock.advance(timedelta(hours=49))

        # Act & Assert
        with pytest.raises(TicketNotActiveError, match='cancelled'):
            await scan_use_case.execute(
                lookup=ScanLookup(ticket_number=ticket.ticket_number),
                staff_id=STAFF_ID,
                action=ScanAction.ENTRY,
            )
        with pytest.raises(StaffNotAssignedError):
            await scan_use_case.execute(
                lookup=ScanLookup(ticket_number=ticket.ticket_number),
                staff_id=OTHER_STAFF_ID,
                action=ScanAction.ENTRY,
            )

    @pytest.mark.asyncio
    async def test_entry_before_start(
        self, scan_use_case: ScanTicketUseCase, store: InMemoryStore
    ) -> None:
        # Arrange
        event = await seed_event(store, starts_in=timedelta(hours=2))
        ticket = await seed_ticket(store, event=event)

        # Act & Assert
        with pytest.raises(EventWindowClosedError, match='not started'):
            await scan_use_case.execute(
                lookup=ScanLookup(ticket_number=ticket.ticket_number),
                staff_id=STAFF_ID,
                action=ScanAction.ENTRY,
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize('action', [ScanAction.ENTRY, ScanAction.EXIT])
    async def test_scan_after_end(
        self,
        scan_use_case: ScanTicketUseCase,
        store: InMemoryStore,
        clock: FrozenClock,
        action: ScanAction,
    ) -> None:
        # Arrange
        event = await seed_event(store, starts_in=timedelta(hours=1), duration=timedelta(hours=2))
        ticket = await seed_ticket(store, event=event)
        clock.advance(timedelta(hours=3, seconds=1))

        # Act & Assert
        with pytest.raises(EventWindowClosedError, match='already ended'):
            await scan_use_case.execute(
                lookup=ScanLookup(ticket_number=ticket.ticket_number),
                staff_id=STAFF_ID,
                action=action,
            )

    @pytest.mark.asyncio
    async def test_scan_at_exact_end_is_accepted(
        self, scan_use_case: ScanTicketUseCase, store: InMemoryStore, clock: FrozenClock
    ) -> None:
        # Arrange
        event = await seed_event(store, starts_in=timedelta(hours=1), duration=timedelta(hours=2))
        ticket = await seed_ticket(store, event=event)
        clock.set(event.end_at)

        # Act
        result = await scan_use_case.execute(
            lookup=ScanLookup(ticket_number=ticket.ticket_number),
            staff_id=STAFF_ID,
            action=ScanAction.ENTRY,
        )

        # Assert
        assert result.is_first_scan
