from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

import attrs

from src.service.shared_kernel.domain.enum.ticket_status import PaymentStatus


class PaymentGatewayError(Exception):
    """Gateway refused or failed a request (transport errors, unknown references)"""


@attrs.frozen
class PaymentRecord:
    payment_ref: str
    event_id: int
    user_id: int
    amount: int
    currency: str
    method: str
    status: PaymentStatus
    created_at: datetime
    processed_at: Optional[datetime] = None
    refunded_amount: int = 0
    failure_reason: Optional[str] = None


@attrs.frozen
class PaymentConfirmation:
    payment_ref: str
    confirmed: bool
    amount: int = 0
    user_id: Optional[int] = None
    event_id: Optional[int] = None


@attrs.frozen
class RefundResult:
    payment_ref: str
    accepted: bool
    amount: int = 0
    reason: Optional[str] = None


class IPaymentGateway(ABC):
    """
    Payment provider port.

    confirm_payment and request_refund are the calls the ledger depends on;
    request_refund must be idempotent per payment reference.
    """

    @abstractmethod
    async def create_payment(
        self, *, event_id: int, user_id: int, amount: int, currency: str, method: str
    ) -> PaymentRecord:
        pass

    @abstractmethod
    async def process_payment(self, *, payment_ref: str, card_number: str) -> PaymentRecord:
        pass

    @abstractmethod
    async def get_payment(self, *, payment_ref: str) -> Optional[PaymentRecord]:
        pass

    @abstractmethod
    async def confirm_payment(self, *, payment_ref: str) -> PaymentConfirmation:
        pass

    @abstractmethod
    async def request_refund(self, *, payment_ref: str, amount: int) -> RefundResult:
        pass
