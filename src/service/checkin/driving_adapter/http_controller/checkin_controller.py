from uuid import UUID

from fastapi import APIRouter, Depends
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.checkin.app.command.add_ticket_note_use_case import AddTicketNoteUseCase
from src.service.checkin.app.command.close_admission_use_case import CloseAdmissionUseCase
from src.service.checkin.app.command.scan_ticket_use_case import ScanLookup, ScanTicketUseCase
from src.service.checkin.app.query.attendance_summary_use_case import AttendanceSummaryUseCase
from src.service.checkin.app.query.list_assigned_events_use_case import ListAssignedEventsUseCase
from src.service.checkin.driving_adapter.http_controller.schema.checkin_schema import (
    AssignedEventItem,
    AssignedEventsResponse,
    AttendanceResponse,
    AttendanceStatistics,
    CloseAdmissionResponse,
    RecentScan,
    ScanData,
    ScanRequest,
    ScanResponse,
    TicketNoteData,
    TicketNoteRequest,
    TicketNoteResponse,
)
from src.service.ledger.driving_adapter.http_controller.schema.ticket_schema import (
    TicketEventSummary,
    VerificationResponse,
)
from src.service.shared_kernel.app.dto.ticket_query_dto import AttendanceStats
from src.service.shared_kernel.domain.entity.principal_entity import Principal
from src.service.shared_kernel.driving_adapter.http_controller.auth.role_auth import (
    require_host_or_admin,
    require_staff,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def _statistics(stats: AttendanceStats) -> AttendanceStatistics:
    return AttendanceStatistics(
        total=stats.total, scanned=stats.scanned, unscanned=stats.unscanned, rate=stats.rate
    )


@router.post('/scans')
@Logger.io
async def scan_ticket(
    request: ScanRequest,
    principal: Principal = Depends(require_staff),
    use_case: ScanTicketUseCase = Depends(ScanTicketUseCase.depends),
) -> ScanResponse:
    with tracer.start_as_current_span('controller.scan_ticket') as span:
        span.set_attribute('staff_id', principal.id)
        span.set_attribute('action', request.action.value)

        result = await use_case.execute(
            lookup=ScanLookup(
                ticket_number=request.ticket_number,
                verification_token=request.verification_token,
            ),
            staff_id=principal.id,
            action=request.action,
            event_id_hint=request.event_id,
        )
        ticket = result.ticket
        verification = ticket.verification
        return ScanResponse(
            message=f'Ticket {result.action.value} recorded successfully',
            data=ScanData(
                ticket_id=ticket.id,
                ticket_number=ticket.ticket_number,
                attendee_id=ticket.attendee_id,
                event=TicketEventSummary.from_event(result.event),
                action=result.action.value,
                verification=VerificationResponse.from_verification(verification),
                scan_count=verification.scan_count,
                is_first_scan=result.is_first_scan,
            ),
        )


@router.post('/tickets/{ticket_id}/notes')
@Logger.io
async def add_ticket_note(
    ticket_id: UUID,
    request: TicketNoteRequest,
    principal: Principal = Depends(require_staff),
    use_case: AddTicketNoteUseCase = Depends(AddTicketNoteUseCase.depends),
) -> TicketNoteResponse:
    note = await use_case.execute(ticket_id=ticket_id, staff_id=principal.id, note=request.note)
    return TicketNoteResponse(
        note=TicketNoteData(staff_id=note.staff_id, note=note.note, created_at=note.created_at)
    )


@router.get('/staff/events')
@Logger.io
async def list_assigned_events(
    principal: Principal = Depends(require_staff),
    use_case: ListAssignedEventsUseCase = Depends(ListAssignedEventsUseCase.depends),
) -> AssignedEventsResponse:
    assigned = await use_case.execute(staff_id=principal.id)
    return AssignedEventsResponse(
        events=[
            AssignedEventItem(
                event=TicketEventSummary.from_event(item.event),
                statistics=_statistics(item.stats),
            )
            for item in assigned
        ]
    )


@router.get('/events/{event_id}/attendance')
@Logger.io
async def attendance_summary(
    event_id: int,
    principal: Principal = Depends(require_staff),
    use_case: AttendanceSummaryUseCase = Depends(AttendanceSummaryUseCase.depends),
) -> AttendanceResponse:
    summary = await use_case.execute(event_id=event_id, staff_id=principal.id)
    return AttendanceResponse(
        event=TicketEventSummary.from_event(summary.event),
        statistics=_statistics(summary.stats),
        recent_scans=[
            RecentScan(
                ticket_number=ticket.ticket_number,
                attendee_id=ticket.attendee_id,
                scanned_at=ticket.verification.scanned_at,
                scan_count=ticket.verification.scan_count,
            )
            for ticket in summary.recent_scans
        ],
    )


@router.post('/events/{event_id}/close-admission')
@Logger.io
async def close_admission(
    event_id: int,
    principal: Principal = Depends(require_host_or_admin),
    use_case: CloseAdmissionUseCase = Depends(CloseAdmissionUseCase.depends),
) -> CloseAdmissionResponse:
    closed = await use_case.execute(event_id=event_id, principal=principal)
    return CloseAdmissionResponse(
        event_id=closed.event_id, used=closed.used, expired=closed.expired
    )
