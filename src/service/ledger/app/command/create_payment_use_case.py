from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ledger.app.interface.i_payment_gateway import IPaymentGateway, PaymentRecord
from src.service.shared_kernel.app.interface.i_clock import IClock
from src.service.shared_kernel.app.interface.i_event_query_repo import IEventQueryRepo


class CreatePaymentUseCase:
    """Open a pending payment for the event's ticket price."""

    def __init__(
        self, *, event_query_repo: IEventQueryRepo, payment_gateway: IPaymentGateway, clock: IClock
    ) -> None:
        self.event_query_repo = event_query_repo
        self.payment_gateway = payment_gateway
        self.clock = clock

    @classmethod
    @inject
    def depends(
        cls,
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        clock: IClock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(event_query_repo=event_query_repo, payment_gateway=payment_gateway, clock=clock)

    @Logger.io
    async def execute(self, *, event_id: int, user_id: int, method: str) -> PaymentRecord:
        event = await self.event_query_repo.get_by_id(event_id=event_id)
        if event is None:
            raise NotFoundError('Event not found')
        event.ensure_bookable(now=self.clock.now())
        if event.pricing.amount_due == 0:
            raise DomainError('Event is free; no payment needed')

        record = await self.payment_gateway.create_payment(
            event_id=event_id,
            user_id=user_id,
            amount=event.pricing.amount_due,
            currency=event.pricing.currency,
            method=method,
        )
        Logger.base.info(f'💳 [PAYMENT] Created {record.payment_ref} for event {event_id}')
        return record
