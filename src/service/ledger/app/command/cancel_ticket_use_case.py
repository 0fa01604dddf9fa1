from datetime import timedelta
from enum import StrEnum
from typing import Self
from uuid import UUID

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    CustomBaseError,
    InconsistentStateError,
    NotFoundError,
    NotOwnerError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.platform.state.keyed_lock import KeyedLock, event_lock_key
from src.service.ledger.app.command.refund_ticket_use_case import RefundTicketUseCase
from src.service.ledger.app.interface.i_payment_gateway import IPaymentGateway
from src.service.shared_kernel.app.interface.i_clock import IClock
from src.service.shared_kernel.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.shared_kernel.domain.entity.ticket_entity import Ticket


class RefundStatus(StrEnum):
    NOT_REQUIRED = 'not_required'
    REFUNDED = 'refunded'
    PENDING = 'pending'


@attrs.frozen
class CancellationResult:
    ticket: Ticket
    refund_amount: int
    refund_status: RefundStatus


class CancelTicketUseCase:
    """
    Cancel an attendee's own ticket at least CANCELLATION_WINDOW_HOURS before start.

    The seat goes back to the pool in the same transaction as the status change.
    The refund runs after commit and never undoes the cancellation; when it fails
    the ticket stays awaiting refund for the retry worker.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        ticket_query_repo: ITicketQueryRepo,
        clock: IClock,
        keyed_lock: KeyedLock,
        refund_use_case: RefundTicketUseCase,
        window: timedelta = timedelta(hours=settings.CANCELLATION_WINDOW_HOURS),
    ) -> None:
        self.uow_factory = uow_factory
        self.ticket_query_repo = ticket_query_repo
        self.clock = clock
        self.keyed_lock = keyed_lock
        self.refund_use_case = refund_use_case
        self.window = window
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        ticket_query_repo: ITicketQueryRepo = Depends(Provide[Container.ticket_query_repo]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        clock: IClock = Depends(Provide[Container.clock]),
        keyed_lock: KeyedLock = Depends(Provide[Container.keyed_lock]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            ticket_query_repo=ticket_query_repo,
            clock=clock,
            keyed_lock=keyed_lock,
            refund_use_case=RefundTicketUseCase(
                uow_factory=uow_factory, payment_gateway=payment_gateway, clock=clock
            ),
        )

    @Logger.io
    async def execute(
        self, *, ticket_id: UUID, attendee_id: int, reason: str = ''
    ) -> CancellationResult:
        with self.tracer.start_as_current_span(
            'use_case.cancel_ticket',
            attributes={'ticket.id': str(ticket_id), 'attendee.id': attendee_id},
        ):
            try:
                cancelled = await self._cancel(
                    ticket_id=ticket_id, attendee_id=attendee_id, reason=reason
                )
            except CustomBaseError as e:
                metrics.record_cancellation(result=e.kind.value)
                raise
            metrics.record_cancellation(result='cancelled')
            Logger.base.info(f'🚫 [CANCEL] Ticket {cancelled.ticket_number} cancelled')

            if not cancelled.awaits_refund:
                return CancellationResult(
                    ticket=cancelled, refund_amount=0, refund_status=RefundStatus.NOT_REQUIRED
                )

            refunded = await self.refund_use_case.execute(ticket_id=cancelled.id)
            if refunded:
                cancelled = cancelled.mark_refunded(now=self.clock.now())
            return CancellationResult(
                ticket=cancelled,
                refund_amount=cancelled.price_paid,
                refund_status=RefundStatus.REFUNDED if refunded else RefundStatus.PENDING,
            )

    async def _cancel(self, *, ticket_id: UUID, attendee_id: int, reason: str) -> Ticket:
        ticket = await self.ticket_query_repo.get_by_id(ticket_id=ticket_id)
        if ticket is None:
            raise NotFoundError('Ticket not found')

        async with self.keyed_lock.hold(key=event_lock_key(ticket.event_id)):
            async with self.uow_factory() as uow:
                ticket = await uow.ticket_command_repo.get_by_id(
                    ticket_id=ticket_id, for_update=True
                )
                if ticket is None:
                    raise NotFoundError('Ticket not found')
                if ticket.attendee_id != attendee_id:
                    raise NotOwnerError()

                event = await uow.event_command_repo.get_by_id(
                    event_id=ticket.event_id, for_update=True
                )
                if event is None:
                    raise InconsistentStateError('Ticket references a missing event')

                now = self.clock.now()
                cancelled = ticket.cancel(
                    event_start_at=event.start_at, now=now, window=self.window, reason=reason
                )
                await uow.ticket_command_repo.update(ticket=cancelled)
                if not await uow.event_command_repo.adjust_tickets_sold(
                    event_id=ticket.event_id, delta=-1
                ):
                    raise InconsistentStateError('Event sold count is already zero')
                await uow.commit()
        return cancelled
