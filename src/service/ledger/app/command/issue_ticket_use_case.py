from datetime import datetime
import time
from typing import Optional, Self

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    CapacityExceededError,
    CustomBaseError,
    DuplicateBookingError,
    EventNotBookableError,
    IdentifierCollisionError,
    InternalError,
    NotFoundError,
    PaymentNotConfirmedError,
    PaymentPendingError,
    PaymentRequiredError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.platform.state.keyed_lock import KeyedLock, event_lock_key
from src.service.ledger.app.command.refund_ticket_use_case import RefundTicketUseCase
from src.service.ledger.app.interface.i_payment_gateway import (
    IPaymentGateway,
    PaymentGatewayError,
)
from src.service.shared_kernel.app.interface.i_clock import IClock
from src.service.shared_kernel.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.shared_kernel.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.entity.ticket_entity import Ticket


class IssueTicketUseCase:
    """
    Issue one ticket for an attendee.

    Flow:
    1. Fail fast on the read side (event exists, bookable, has seats, no active ticket)
    2. Confirm the payment with the gateway under a bounded timeout (paid events only)
    3. Under the per-event lock, in one transaction:
       lock the event row, re-check, bump tickets_sold conditionally, insert the ticket
    4. On an identifier collision, retry with fresh identifiers a bounded number of times

    A confirmed payment that does not end up backing a ticket is handed back to the
    gateway as a compensating refund.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        event_query_repo: IEventQueryRepo,
        ticket_query_repo: ITicketQueryRepo,
        payment_gateway: IPaymentGateway,
        clock: IClock,
        keyed_lock: KeyedLock,
        refund_use_case: RefundTicketUseCase,
        payment_timeout_seconds: float = settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS,
        max_attempts: int = settings.TICKET_ID_MAX_ATTEMPTS,
    ) -> None:
        self.uow_factory = uow_factory
        self.event_query_repo = event_query_repo
        self.ticket_query_repo = ticket_query_repo
        self.payment_gateway = payment_gateway
        self.clock = clock
        self.keyed_lock = keyed_lock
        self.refund_use_case = refund_use_case
        self.payment_timeout_seconds = payment_timeout_seconds
        self.max_attempts = max_attempts
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        ticket_query_repo: ITicketQueryRepo = Depends(Provide[Container.ticket_query_repo]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        clock: IClock = Depends(Provide[Container.clock]),
        keyed_lock: KeyedLock = Depends(Provide[Container.keyed_lock]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            event_query_repo=event_query_repo,
            ticket_query_repo=ticket_query_repo,
            payment_gateway=payment_gateway,
            clock=clock,
            keyed_lock=keyed_lock,
            refund_use_case=RefundTicketUseCase(
                uow_factory=uow_factory, payment_gateway=payment_gateway, clock=clock
            ),
        )

    @Logger.io
    async def execute(
        self, *, attendee_id: int, event_id: int, payment_ref: Optional[str] = None
    ) -> Ticket:
        started = time.perf_counter()
        with self.tracer.start_as_current_span(
            'use_case.issue_ticket',
            attributes={'event.id': event_id, 'attendee.id': attendee_id},
        ):
            try:
                ticket = await self._issue(
                    attendee_id=attendee_id, event_id=event_id, payment_ref=payment_ref
                )
            except CustomBaseError as e:
                metrics.record_issue(result=e.kind.value, duration=time.perf_counter() - started)
                raise
            metrics.record_issue(result='issued', duration=time.perf_counter() - started)
            Logger.base.info(
                f'🎫 [ISSUE] Ticket {ticket.ticket_number} issued for event {event_id} '
                f'to attendee {attendee_id}'
            )
            return ticket

    async def _issue(
        self, *, attendee_id: int, event_id: int, payment_ref: Optional[str]
    ) -> Ticket:
        now = self.clock.now()

        # Fail fast before touching the gateway or taking locks
        event = await self.event_query_repo.get_by_id(event_id=event_id)
        if event is None:
            raise NotFoundError('Event not found')
        event.ensure_bookable(now=now)
        if not event.has_capacity:
            raise CapacityExceededError()
        if await self.ticket_query_repo.get_active_for_attendee(
            event_id=event_id, attendee_id=attendee_id
        ):
            raise DuplicateBookingError()

        amount_due = event.pricing.amount_due
        if amount_due > 0:
            await self._confirm_payment(
                payment_ref=payment_ref, amount_due=amount_due, attendee_id=attendee_id, event=event
            )
            assert payment_ref is not None
        else:
            payment_ref = None

        async with self.keyed_lock.hold(key=event_lock_key(event_id)):
            try:
                return await self._persist_with_retry(
                    attendee_id=attendee_id,
                    event_id=event_id,
                    price_paid=amount_due,
                    payment_ref=payment_ref,
                )
            except (CapacityExceededError, EventNotBookableError):
                if payment_ref is not None:
                    await self.refund_use_case.compensate(
                        payment_ref=payment_ref, amount=amount_due
                    )
                raise
            except DuplicateBookingError:
                if payment_ref is not None:
                    existing = await self.ticket_query_repo.get_active_for_attendee(
                        event_id=event_id, attendee_id=attendee_id
                    )
                    # Same payment already backs the winning ticket, so nothing to give back
                    if existing is None or existing.payment_ref != payment_ref:
                        await self.refund_use_case.compensate(
                            payment_ref=payment_ref, amount=amount_due
                        )
                raise

    async def _confirm_payment(
        self, *, payment_ref: Optional[str], amount_due: int, attendee_id: int, event: Event
    ) -> None:
        if not payment_ref:
            raise PaymentRequiredError()

        try:
            with anyio.fail_after(self.payment_timeout_seconds):
                confirmation = await self.payment_gateway.confirm_payment(payment_ref=payment_ref)
        except TimeoutError as e:
            Logger.base.warning(f'⏳ [ISSUE] Payment confirmation timed out for {payment_ref}')
            raise PaymentPendingError() from e
        except PaymentGatewayError as e:
            raise PaymentNotConfirmedError(str(e)) from e

        if not confirmation.confirmed:
            raise PaymentNotConfirmedError()
        if confirmation.amount < amount_due:
            raise PaymentNotConfirmedError('Payment amount does not cover the ticket price')
        wrong_user = confirmation.user_id not in (None, attendee_id)
        wrong_event = confirmation.event_id not in (None, event.id)
        if wrong_user or wrong_event:
            raise PaymentNotConfirmedError('Payment belongs to a different booking')

    async def _persist_with_retry(
        self, *, attendee_id: int, event_id: int, price_paid: int, payment_ref: Optional[str]
    ) -> Ticket:
        now = self.clock.now()
        ticket = Ticket.issue(
            event_id=event_id,
            attendee_id=attendee_id,
            price_paid=price_paid,
            payment_ref=payment_ref,
            now=now,
        )
        for attempt in range(1, self.max_attempts + 1):
            if attempt > 1:
                ticket = ticket.with_fresh_identifiers(now=now)
            try:
                return await self._persist(ticket=ticket, now=now)
            except IdentifierCollisionError:
                metrics.identifier_collisions.inc()
                Logger.base.warning(
                    f'🔁 [ISSUE] Identifier collision on attempt {attempt}/{self.max_attempts}'
                )

        Logger.base.error(f'❌ [ISSUE] Gave up after {self.max_attempts} identifier collisions')
        raise InternalError('Could not allocate a unique ticket identifier')

    async def _persist(self, *, ticket: Ticket, now: datetime) -> Ticket:
        async with self.uow_factory() as uow:
            event = await uow.event_command_repo.get_by_id(
                event_id=ticket.event_id, for_update=True
            )
            if event is None:
                raise NotFoundError('Event not found')
            event.ensure_bookable(now=now)

            if await uow.ticket_command_repo.get_active_for_attendee(
                event_id=ticket.event_id, attendee_id=ticket.attendee_id
            ):
                raise DuplicateBookingError()

            if not await uow.event_command_repo.adjust_tickets_sold(
                event_id=ticket.event_id, delta=1
            ):
                raise CapacityExceededError()

            created = await uow.ticket_command_repo.create(ticket=ticket)
            await uow.commit()
        return created
