from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ledger.app.interface.i_payment_gateway import IPaymentGateway, PaymentRecord


class ProcessPaymentUseCase:
    def __init__(self, *, payment_gateway: IPaymentGateway) -> None:
        self.payment_gateway = payment_gateway

    @classmethod
    @inject
    def depends(
        cls, payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway])
    ) -> Self:
        return cls(payment_gateway=payment_gateway)

    @Logger.io
    async def execute(self, *, payment_ref: str, user_id: int, card_number: str) -> PaymentRecord:
        record = await self.payment_gateway.get_payment(payment_ref=payment_ref)
        if record is None or record.user_id != user_id:
            raise NotFoundError('Payment not found')
        return await self.payment_gateway.process_payment(
            payment_ref=payment_ref, card_number=card_number
        )
