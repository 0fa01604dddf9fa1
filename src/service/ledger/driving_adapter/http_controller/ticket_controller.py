from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.ledger.app.command.cancel_ticket_use_case import CancelTicketUseCase
from src.service.ledger.app.command.issue_ticket_use_case import IssueTicketUseCase
from src.service.ledger.app.query.get_ticket_use_case import GetTicketUseCase
from src.service.ledger.app.query.list_my_tickets_use_case import ListMyTicketsUseCase
from src.service.ledger.driving_adapter.http_controller.schema.ticket_schema import (
    MyTicketItem,
    MyTicketsResponse,
    TicketCancelRequest,
    TicketCancelResponse,
    TicketDetailResponse,
    TicketEventSummary,
    TicketIssueRequest,
    TicketIssueResponse,
    TicketResponse,
)
from src.service.shared_kernel.domain.entity.principal_entity import Principal
from src.service.shared_kernel.domain.enum.ticket_status import TicketStatus
from src.service.shared_kernel.driving_adapter.http_controller.auth.role_auth import (
    get_current_principal,
    require_attendee,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def issue_ticket(
    request: TicketIssueRequest,
    principal: Principal = Depends(require_attendee),
    use_case: IssueTicketUseCase = Depends(IssueTicketUseCase.depends),
) -> TicketIssueResponse:
    with tracer.start_as_current_span('controller.issue_ticket') as span:
        span.set_attribute('event_id', request.event_id)
        span.set_attribute('attendee_id', principal.id)

        ticket = await use_case.execute(
            attendee_id=principal.id,
            event_id=request.event_id,
            payment_ref=request.payment_ref,
        )
        span.set_attribute('ticket.id', str(ticket.id))
        return TicketIssueResponse(ticket=TicketResponse.from_ticket(ticket, include_token=True))


@router.get('/mine')
@Logger.io
async def list_my_tickets(
    ticket_status: Optional[TicketStatus] = None,
    upcoming: bool = False,
    principal: Principal = Depends(require_attendee),
    use_case: ListMyTicketsUseCase = Depends(ListMyTicketsUseCase.depends),
) -> MyTicketsResponse:
    result = await use_case.execute(
        attendee_id=principal.id, status=ticket_status, upcoming=upcoming
    )
    return MyTicketsResponse(
        tickets=[
            MyTicketItem(
                ticket=TicketResponse.from_ticket(item.ticket, include_token=True),
                event=TicketEventSummary.from_event(item.event) if item.event else None,
                can_cancel=item.can_cancel,
            )
            for item in result.items
        ],
        counts=result.counts,
    )


@router.get('/{ticket_id}')
@Logger.io
async def get_ticket(
    ticket_id: UUID,
    principal: Principal = Depends(get_current_principal),
    use_case: GetTicketUseCase = Depends(GetTicketUseCase.depends),
) -> TicketDetailResponse:
    ticket = await use_case.execute(ticket_id=ticket_id, principal=principal)
    return TicketDetailResponse(
        ticket=TicketResponse.from_ticket(
            ticket, include_token=ticket.attendee_id == principal.id
        )
    )


@router.delete('/{ticket_id}')
@Logger.io
async def cancel_ticket(
    ticket_id: UUID,
    request: Optional[TicketCancelRequest] = Body(default=None),
    principal: Principal = Depends(require_attendee),
    use_case: CancelTicketUseCase = Depends(CancelTicketUseCase.depends),
) -> TicketCancelResponse:
    result = await use_case.execute(
        ticket_id=ticket_id,
        attendee_id=principal.id,
        reason=request.reason if request else '',
    )
    return TicketCancelResponse(
        ticket=TicketResponse.from_ticket(result.ticket),
        refund_amount=result.refund_amount,
        refund_status=result.refund_status.value,
    )
