from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from src.service.ledger.app.interface.i_payment_gateway import PaymentRecord


class PaymentCreateRequest(BaseModel):
    event_id: int = Field(gt=0)
    method: Literal['card', 'wallet'] = 'card'


class PaymentProcessRequest(BaseModel):
    card_number: str = Field(min_length=12, max_length=23)

    model_config = {'json_schema_extra': {'example': {'card_number': '4111111111111111'}}}


class PaymentData(BaseModel):
    payment_ref: str
    event_id: int
    amount: int
    currency: str
    method: str
    status: str
    created_at: datetime
    processed_at: Optional[datetime] = None
    refunded_amount: int = 0
    failure_reason: Optional[str] = None

    @classmethod
    def from_record(cls, record: PaymentRecord) -> 'PaymentData':
        return cls(
            payment_ref=record.payment_ref,
            event_id=record.event_id,
            amount=record.amount,
            currency=record.currency,
            method=record.method,
            status=record.status.value,
            created_at=record.created_at,
            processed_at=record.processed_at,
            refunded_amount=record.refunded_amount,
            failure_reason=record.failure_reason,
        )


class PaymentResponse(BaseModel):
    success: bool = True
    payment: PaymentData
