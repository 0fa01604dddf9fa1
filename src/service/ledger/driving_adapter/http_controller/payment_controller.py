from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.ledger.app.command.create_payment_use_case import CreatePaymentUseCase
from src.service.ledger.app.command.process_payment_use_case import ProcessPaymentUseCase
from src.service.ledger.app.query.get_payment_use_case import GetPaymentUseCase
from src.service.ledger.driving_adapter.http_controller.schema.payment_schema import (
    PaymentCreateRequest,
    PaymentData,
    PaymentProcessRequest,
    PaymentResponse,
)
from src.service.shared_kernel.domain.entity.principal_entity import Principal
from src.service.shared_kernel.driving_adapter.http_controller.auth.role_auth import (
    require_attendee,
)


router = APIRouter()


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_payment(
    request: PaymentCreateRequest,
    principal: Principal = Depends(require_attendee),
    use_case: CreatePaymentUseCase = Depends(CreatePaymentUseCase.depends),
) -> PaymentResponse:
    record = await use_case.execute(
        event_id=request.event_id, user_id=principal.id, method=request.method
    )
    return PaymentResponse(payment=PaymentData.from_record(record))


@router.post('/{payment_ref}/process')
@Logger.io
async def process_payment(
    payment_ref: str,
    request: PaymentProcessRequest,
    principal: Principal = Depends(require_attendee),
    use_case: ProcessPaymentUseCase = Depends(ProcessPaymentUseCase.depends),
) -> PaymentResponse:
    record = await use_case.execute(
        payment_ref=payment_ref, user_id=principal.id, card_number=request.card_number
    )
    return PaymentResponse(payment=PaymentData.from_record(record))


@router.get('/{payment_ref}')
@Logger.io
async def get_payment(
    payment_ref: str,
    principal: Principal = Depends(require_attendee),
    use_case: GetPaymentUseCase = Depends(GetPaymentUseCase.depends),
) -> PaymentResponse:
    record = await use_case.execute(payment_ref=payment_ref, user_id=principal.id)
    return PaymentResponse(payment=PaymentData.from_record(record))
