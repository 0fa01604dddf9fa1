"""
Deterministic demo payment provider

Card numbers starting with 4000 are declined, every other well-formed number is
approved. Payments live in process memory; a real provider adapter replaces this
class behind IPaymentGateway.
"""

from typing import Dict, Optional

import attrs
from uuid_utils import uuid7

from src.platform.logging.loguru_io import Logger
from src.service.ledger.app.interface.i_payment_gateway import (
    IPaymentGateway,
    PaymentConfirmation,
    PaymentGatewayError,
    PaymentRecord,
    RefundResult,
)
from src.service.shared_kernel.app.interface.i_clock import IClock
from src.service.shared_kernel.domain.enum.ticket_status import PaymentStatus


DECLINED_CARD_PREFIX = '4000'


class DemoPaymentGatewayImpl(IPaymentGateway):
    def __init__(self, *, clock: IClock) -> None:
        self.clock = clock
        self._payments: Dict[str, PaymentRecord] = {}

    @Logger.io
    async def create_payment(
        self, *, event_id: int, user_id: int, amount: int, currency: str, method: str
    ) -> PaymentRecord:
        payment_ref = f'PAY_{uuid7().hex.upper()}'
        record = PaymentRecord(
            payment_ref=payment_ref,
            event_id=event_id,
            user_id=user_id,
            amount=amount,
            currency=currency,
            method=method,
            status=PaymentStatus.PENDING,
            created_at=self.clock.now(),
        )
        self._payments[payment_ref] = record
        return record

    @Logger.io
    async def process_payment(self, *, payment_ref: str, card_number: str) -> PaymentRecord:
        record = self._require(payment_ref)
        if record.status != PaymentStatus.PENDING:
            return record  # already processed; replaying is harmless

        digits = card_number.replace(' ', '').replace('-', '')
        if digits.startswith(DECLINED_CARD_PREFIX):
            record = attrs.evolve(
                record,
                status=PaymentStatus.FAILED,
                processed_at=self.clock.now(),
                failure_reason='Card declined',
            )
        else:
            record = attrs.evolve(
                record, status=PaymentStatus.COMPLETED, processed_at=self.clock.now()
            )
        self._payments[payment_ref] = record
        Logger.base.info(f'💳 [PAYMENT] {payment_ref} -> {record.status.value}')
        return record

    async def get_payment(self, *, payment_ref: str) -> Optional[PaymentRecord]:
        return self._payments.get(payment_ref)

    @Logger.io
    async def confirm_payment(self, *, payment_ref: str) -> PaymentConfirmation:
        record = self._payments.get(payment_ref)
        if record is None or record.status != PaymentStatus.COMPLETED:
            return PaymentConfirmation(payment_ref=payment_ref, confirmed=False)
        return PaymentConfirmation(
            payment_ref=payment_ref,
            confirmed=True,
            amount=record.amount,
            user_id=record.user_id,
            event_id=record.event_id,
        )

    @Logger.io
    async def request_refund(self, *, payment_ref: str, amount: int) -> RefundResult:
        record = self._require(payment_ref)
        if record.status == PaymentStatus.REFUNDED:
            # Idempotent: the first refund already went through
            return RefundResult(
                payment_ref=payment_ref, accepted=True, amount=record.refunded_amount
            )
        if record.status != PaymentStatus.COMPLETED:
            return RefundResult(
                payment_ref=payment_ref, accepted=False, reason='Payment was never captured'
            )
        if amount > record.amount:
            return RefundResult(
                payment_ref=payment_ref, accepted=False, reason='Refund exceeds captured amount'
            )

        self._payments[payment_ref] = attrs.evolve(
            record, status=PaymentStatus.REFUNDED, refunded_amount=amount
        )
        Logger.base.info(f'💸 [REFUND] {payment_ref} refunded {amount}')
        return RefundResult(payment_ref=payment_ref, accepted=True, amount=amount)

    def _require(self, payment_ref: str) -> PaymentRecord:
        record = self._payments.get(payment_ref)
        if record is None:
            raise PaymentGatewayError(f'Unknown payment reference {payment_ref}')
        return record
