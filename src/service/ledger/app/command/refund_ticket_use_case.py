from typing import Self
from uuid import UUID

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.ledger.app.interface.i_payment_gateway import (
    IPaymentGateway,
    PaymentGatewayError,
    RefundResult,
)
from src.service.shared_kernel.app.interface.i_clock import IClock


class RefundTicketUseCase:
    """
    Best-effort refund of a cancelled ticket.

    A failed or timed-out gateway call leaves the ticket awaiting refund for the
    retry worker; it never reverts the cancellation. The gateway deduplicates by
    payment reference, so repeating a refund is safe.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        payment_gateway: IPaymentGateway,
        clock: IClock,
        timeout_seconds: float = settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS,
    ) -> None:
        self.uow_factory = uow_factory
        self.payment_gateway = payment_gateway
        self.clock = clock
        self.timeout_seconds = timeout_seconds

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        clock: IClock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(uow_factory=uow_factory, payment_gateway=payment_gateway, clock=clock)

    async def _request_refund(self, *, payment_ref: str, amount: int) -> RefundResult | None:
        try:
            with anyio.fail_after(self.timeout_seconds):
                result = await self.payment_gateway.request_refund(
                    payment_ref=payment_ref, amount=amount
                )
        except TimeoutError:
            metrics.record_refund(outcome='timeout')
            Logger.base.warning(f'⏳ [REFUND] Gateway timed out for {payment_ref}, will retry')
            return None
        except PaymentGatewayError as e:
            metrics.record_refund(outcome='error')
            Logger.base.warning(f'⚠️ [REFUND] Gateway error for {payment_ref}: {e}')
            return None

        if not result.accepted:
            metrics.record_refund(outcome='rejected')
            Logger.base.warning(f'⚠️ [REFUND] Gateway rejected {payment_ref}: {result.reason}')
            return None

        metrics.record_refund(outcome='accepted')
        return result

    @Logger.io
    async def execute(self, *, ticket_id: UUID) -> bool:
        """Returns True once the ticket is marked refunded."""
        async with self.uow_factory() as uow:
            ticket = await uow.ticket_command_repo.get_by_id(ticket_id=ticket_id)
        if ticket is None or not ticket.awaits_refund:
            return False
        assert ticket.payment_ref is not None

        refund_amount = ticket.cancellation.refund_amount if ticket.cancellation else 0
        result = await self._request_refund(payment_ref=ticket.payment_ref, amount=refund_amount)
        if result is None:
            return False

        async with self.uow_factory() as uow:
            current = await uow.ticket_command_repo.get_by_id(ticket_id=ticket_id, for_update=True)
            if current is None or not current.awaits_refund:
                return current is not None
            await uow.ticket_command_repo.update(ticket=current.mark_refunded(now=self.clock.now()))
            await uow.commit()

        Logger.base.info(f'💸 [REFUND] Ticket {ticket_id} refunded {refund_amount}')
        return True

    @Logger.io
    async def compensate(self, *, payment_ref: str, amount: int) -> bool:
        """Give back a confirmed payment that did not end up backing a ticket."""
        result = await self._request_refund(payment_ref=payment_ref, amount=amount)
        if result is None:
            Logger.base.error(
                f'❌ [REFUND] Compensation for {payment_ref} failed; needs manual follow-up'
            )
            return False
        Logger.base.info(f'↩️ [REFUND] Compensated orphan payment {payment_ref}')
        return True
