from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.service.ledger.app.command.refund_ticket_use_case import RefundTicketUseCase
from src.service.ledger.app.interface.i_payment_gateway import IPaymentGateway
from src.service.shared_kernel.app.interface.i_clock import IClock


class RetryPendingRefundsUseCase:
    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        refund_use_case: RefundTicketUseCase,
        batch_size: int = settings.REFUND_RETRY_BATCH_SIZE,
    ) -> None:
        self.uow_factory = uow_factory
        self.refund_use_case = refund_use_case
        self.batch_size = batch_size

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        clock: IClock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            refund_use_case=RefundTicketUseCase(
                uow_factory=uow_factory, payment_gateway=payment_gateway, clock=clock
            ),
        )

    @Logger.io
    async def execute(self) -> int:
        """Retry one batch; returns how many tickets were refunded."""
        async with self.uow_factory() as uow:
            pending = await uow.ticket_command_repo.list_awaiting_refund(limit=self.batch_size)

        if not pending:
            return 0

        refunded = 0
        for ticket in pending:
            if await self.refund_use_case.execute(ticket_id=ticket.id):
                refunded += 1

        Logger.base.info(f'🔁 [REFUND] Retried {len(pending)} pending, {refunded} settled')
        return refunded
