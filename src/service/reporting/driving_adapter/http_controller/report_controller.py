from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.platform.logging.loguru_io import Logger
from src.service.ledger.driving_adapter.http_controller.schema.ticket_schema import TicketResponse
from src.service.reporting.app.query.scan_histogram_use_case import ScanHistogramUseCase
from src.service.reporting.app.query.search_tickets_use_case import SearchTicketsUseCase
from src.service.reporting.driving_adapter.http_controller.schema.report_schema import (
    HourBucketData,
    ScanHistogramResponse,
    TicketSearchResponse,
)
from src.service.shared_kernel.app.dto.ticket_query_dto import TicketSearchCriteria
from src.service.shared_kernel.domain.entity.principal_entity import Principal
from src.service.shared_kernel.domain.enum.ticket_status import TicketStatus
from src.service.shared_kernel.driving_adapter.http_controller.auth.role_auth import (
    require_host_or_admin,
)


router = APIRouter()


@router.get('/tickets')
@Logger.io
async def search_tickets(
    event_id: Optional[int] = None,
    attendee_id: Optional[int] = None,
    ticket_status: Optional[TicketStatus] = None,
    booked_from: Optional[datetime] = None,
    booked_to: Optional[datetime] = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(require_host_or_admin),
    use_case: SearchTicketsUseCase = Depends(SearchTicketsUseCase.depends),
) -> TicketSearchResponse:
    tickets = await use_case.execute(
        criteria=TicketSearchCriteria(
            event_id=event_id,
            attendee_id=attendee_id,
            status=ticket_status,
            booked_from=booked_from,
            booked_to=booked_to,
            limit=limit,
            offset=offset,
        ),
        principal=principal,
    )
    return TicketSearchResponse(
        count=len(tickets), tickets=[TicketResponse.from_ticket(ticket) for ticket in tickets]
    )


@router.get('/events/{event_id}/scan-histogram')
@Logger.io
async def scan_histogram(
    event_id: int,
    principal: Principal = Depends(require_host_or_admin),
    use_case: ScanHistogramUseCase = Depends(ScanHistogramUseCase.depends),
) -> ScanHistogramResponse:
    buckets = await use_case.execute(event_id=event_id, principal=principal)
    return ScanHistogramResponse(
        event_id=event_id,
        total_scans=sum(bucket.count for bucket in buckets),
        buckets=[HourBucketData(hour=bucket.hour, count=bucket.count) for bucket in buckets],
    )
