"""
Unit tests for CancelTicketUseCase

Test Focus:
1. The 24-hour rule, including the exact boundary
2. Ownership and state checks
3. Seat release in the same transaction as the status change
4. Refund outcome: refunded, pending on gateway failure, never undoing the cancellation
"""

from datetime import timedelta
import uuid

import pytest

from src.platform.exception.exceptions import (
    CapacityExceededError,
    NotCancellableError,
    NotFoundError,
    NotOwnerError,
)
from src.service.ledger.app.command.cancel_ticket_use_case import (
    CancelTicketUseCase,
    RefundStatus,
)
from src.service.ledger.app.command.issue_ticket_use_case import IssueTicketUseCase
from src.service.ledger.app.command.refund_ticket_use_case import RefundTicketUseCase
from src.service.ledger.app.command.retry_pending_refunds_use_case import (
    RetryPendingRefundsUseCase,
)
from src.service.shared_kernel.domain.entity.ticket_entity import DEFAULT_CANCELLATION_REASON
from src.service.shared_kernel.domain.enum.ticket_status import PaymentStatus, TicketStatus
from src.service.shared_kernel.driven_adapter.memory.in_memory_store import InMemoryStore
from test.shared.fakes import GATEWAY_DOWN, ScriptedPaymentGateway
from test.shared.seed import (
    ATTENDEE_ID,
    OTHER_ATTENDEE_ID,
    load_event,
    load_ticket,
    seed_event,
    seed_ticket,
)


@pytest.mark.unit
class TestCancellationWindow:
    @pytest.mark.asyncio
    async def test_exactly_24_hours_before_start_is_allowed(
        self, cancel_use_case: CancelTicketUseCase, store: InMemoryStore
    ) -> None:
        """
        Given: An event starting in exactly 24 hours
        When: The owner cancels
        Then: The ticket is cancelled and the seat goes back to the pool
        """
        # Arrange
        event = await seed_event(store, starts_in=timedelta(hours=24))
        ticket = await seed_ticket(store, event=event)

        # Act
        result = await cancel_use_case.execute(ticket_id=ticket.id, attendee_id=ATTENDEE_ID)

        # Assert
        assert result.ticket.status == TicketStatus.CANCELLED
        assert result.refund_status == RefundStatus.NOT_REQUIRED
        assert result.refund_amount == 0
        assert load_ticket(store, ticket).status == TicketStatus.CANCELLED
        assert load_event(store, event.id).tickets_sold == 0

    @pytest.mark.asyncio
    async def test_one_second_inside_the_window_is_rejected(
        self, cancel_use_case: CancelTicketUseCase, store: InMemoryStore
    ) -> None:
        # Arrange
        event = await seed_event(store, starts_in=timedelta(hours=24) - timedelta(seconds=1))
        ticket = await seed_ticket(store, event=event)

        # Act & Assert
        with pytest.raises(NotCancellableError, match='at least 24 hours'):
            await cancel_use_case.execute(ticket_id=ticket.id, attendee_id=ATTENDEE_ID)
        assert load_ticket(store, ticket).status == TicketStatus.ACTIVE
        assert load_event(store, event.id).tickets_sold == 1

    @pytest.mark.asyncio
    async def test_reason_defaults_when_blank(
        self, cancel_use_case: CancelTicketUseCase, store: InMemoryStore
    ) -> None:
        # Arrange
        event = await seed_event(store)
        ticket = await seed_ticket(store, event=event)

        # Act
        result = await cancel_use_case.execute(
            ticket_id=ticket.id, attendee_id=ATTENDEE_ID, reason='   '
        )

        # Assert
        assert result.ticket.cancellation is not None
        assert result.ticket.cancellation.reason == DEFAULT_CANCELLATION_REASON


@pytest.mark.unit
class TestCancellationChecks:
    @pytest.mark.asyncio
    async def test_unknown_ticket(self, cancel_use_case: CancelTicketUseCase) -> None:
        with pytest.raises(NotFoundError):
            await cancel_use_case.execute(ticket_id=uuid.uuid4(), attendee_id=ATTENDEE_ID)

    @pytest.mark.asyncio
    async def test_someone_elses_ticket(
        self, cancel_use_case: CancelTicketUseCase, store: InMemoryStore
    ) -> None:
        # Arrange
        event = await seed_event(store)
        ticket = await seed_ticket(store, event=event)

        # Act & Assert
        with pytest.raises(NotOwnerError):
            await cancel_use_case.execute(ticket_id=ticket.id, attendee_id=OTHER_ATTENDEE_ID)

    @pytest.mark.asyncio
    async def test_already_cancelled(
        self, cancel_use_case: CancelTicketUseCase, store: InMemoryStore
    ) -> None:
        # Arrange
        event = await seed_event(store)
        ticket = await seed_ticket(store, event=event)
        await cancel_use_case.execute(ticket_id=ticket.id, attendee_id=ATTENDEE_ID)

        # Act & Assert
        with pytest.raises(NotCancellableError, match='cancelled'):
            await cancel_use_case.execute(ticket_id=ticket.id, attendee_id=ATTENDEE_ID)
        assert load_event(store, event.id).tickets_sold == 0

    @pytest.mark.asyncio
    async def test_attendee_can_book_again_after_cancelling(
        self,
        cancel_use_case: CancelTicketUseCase,
        issue_use_case: IssueTicketUseCase,
        store: InMemoryStore,
    ) -> None:
        # Arrange
        event = await seed_event(store, capacity=1)
        first = await issue_use_case.execute(attendee_id=ATTENDEE_ID, event_id=event.id)
        await cancel_use_case.execute(ticket_id=first.id, attendee_id=ATTENDEE_ID)

        # Act
        second = await issue_use_case.execute(attendee_id=ATTENDEE_ID, event_id=event.id)

        # Assert
        assert second.id != first.id
        assert load_event(store, event.id).tickets_sold == 1

    @pytest.mark.asyncio
    async def test_cancelled_seat_goes_to_the_next_attendee(
        self,
        cancel_use_case: CancelTicketUseCase,
        issue_use_case: IssueTicketUseCase,
        store: InMemoryStore,
    ) -> None:
        """
        Given: An event with capacity 2 booked by attendees A and B
        When: C is turned away, then A cancels and C tries again
        Then: C gets the released seat and tickets_sold is back at 2
        """
        # Arrange
        event = await seed_event(store, capacity=2)
        third_attendee_id = OTHER_ATTENDEE_ID + 1
        ticket_a = await issue_use_case.execute(attendee_id=ATTENDEE_ID, event_id=event.id)
        await issue_use_case.execute(attendee_id=OTHER_ATTENDEE_ID, event_id=event.id)
        with pytest.raises(CapacityExceededError):
            await issue_use_case.execute(attendee_id=third_attendee_id, event_id=event.id)
        assert load_event(store, event.id).tickets_sold == 2

        # Act
        await cancel_use_case.execute(ticket_id=ticket_a.id, attendee_id=ATTENDEE_ID)
        sold_after_cancel = load_event(store, event.id).tickets_sold
        ticket_c = await issue_use_case.execute(attendee_id=third_attendee_id, event_id=event.id)

        # Assert
        assert sold_after_cancel == 1
        assert ticket_c.attendee_id == third_attendee_id
        assert ticket_c.status == TicketStatus.ACTIVE
        assert load_event(store, event.id).tickets_sold == 2


@pytest.mark.unit
class TestCancellationRefund:
    @pytest.fixture
    async def paid_ticket(
        self,
        issue_use_case: IssueTicketUseCase,
        store: InMemoryStore,
        gateway: ScriptedPaymentGateway,
    ):
        event = await seed_event(store, price=4000)
        payment_ref = await gateway.paid(event_id=event.id, user_id=ATTENDEE_ID, amount=4000)
        return await issue_use_case.execute(
            attendee_id=ATTENDEE_ID, event_id=event.id, payment_ref=payment_ref
        )

    @pytest.mark.asyncio
    async def test_paid_ticket_is_refunded(
        self,
        cancel_use_case: CancelTicketUseCase,
        store: InMemoryStore,
        gateway: ScriptedPaymentGateway,
        paid_ticket,
    ) -> None:
        # Act
        result = await cancel_use_case.execute(ticket_id=paid_ticket.id, attendee_id=ATTENDEE_ID)

        # Assert
        assert result.refund_status == RefundStatus.REFUNDED
        assert result.refund_amount == 4000
        assert result.ticket.payment_status == PaymentStatus.REFUNDED
        assert load_ticket(store, paid_ticket).payment_status == PaymentStatus.REFUNDED
        assert gateway.refund_calls == [(paid_ticket.payment_ref, 4000)]

    @pytest.mark.asyncio
    async def test_gateway_failure_keeps_cancellation_and_leaves_refund_pending(
        self,
        cancel_use_case: CancelTicketUseCase,
        store: InMemoryStore,
        gateway: ScriptedPaymentGateway,
        paid_ticket,
    ) -> None:
        """
        Given: The payment provider is down
        When: The owner cancels a paid ticket
        Then: The ticket is cancelled, the seat is freed and the refund is left pending
        """
        # Arrange
        gateway.refund_error = GATEWAY_DOWN

        # Act
        result = await cancel_use_case.execute(ticket_id=paid_ticket.id, attendee_id=ATTENDEE_ID)

        # Assert
        assert result.refund_status == RefundStatus.PENDING
        stored = load_ticket(store, paid_ticket)
        assert stored.status == TicketStatus.CANCELLED
        assert stored.awaits_refund
        assert load_event(store, paid_ticket.event_id).tickets_sold == 0

    @pytest.mark.asyncio
    async def test_gateway_timeout_leaves_refund_pending(
        self,
        cancel_use_case: CancelTicketUseCase,
        store: InMemoryStore,
        gateway: ScriptedPaymentGateway,
        paid_ticket,
    ) -> None:
        # Arrange
        gateway.refund_delay = 1.0

        # Act
        result = await cancel_use_case.execute(ticket_id=paid_ticket.id, attendee_id=ATTENDEE_ID)

        # Assert
        assert result.refund_status == RefundStatus.PENDING
        assert load_ticket(store, paid_ticket).status == TicketStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_retry_worker_settles_pending_refunds(
        self,
        cancel_use_case: CancelTicketUseCase,
        refund_use_case: RefundTicketUseCase,
        uow_factory,
        store: InMemoryStore,
        gateway: ScriptedPaymentGateway,
        paid_ticket,
    ) -> None:
        """
        Given: A cancelled ticket whose refund failed
        When: The gateway recovers and the retry pass runs (twice)
        Then: The ticket is refunded once and the second pass finds nothing to do
        """
        # Arrange
        gateway.refund_error = GATEWAY_DOWN
        await cancel_use_case.execute(ticket_id=paid_ticket.id, attendee_id=ATTENDEE_ID)
        gateway.refund_error = None
        retry = RetryPendingRefundsUseCase(
            uow_factory=uow_factory, refund_use_case=refund_use_case, batch_size=10
        )

        # Act
        first_pass = await retry.execute()
        second_pass = await retry.execute()

        # Assert
        assert first_pass == 1
        assert second_pass == 0
        assert load_ticket(store, paid_ticket).payment_status == PaymentStatus.REFUNDED
        payment = await gateway.get_payment(payment_ref=paid_ticket.payment_ref)
        assert payment.status == PaymentStatus.REFUNDED
        assert payment.refunded_amount == 4000
