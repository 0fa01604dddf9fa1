from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.entity.ticket_entity import Ticket
from src.service.shared_kernel.domain.value_object.verification import Verification


class TicketIssueRequest(BaseModel):
    event_id: int = Field(gt=0)
    payment_ref: Optional[str] = Field(default=None, max_length=64)

    model_config = {
        'json_schema_extra': {
            'examples': [
                {'event_id': 1},
                {'event_id': 2, 'payment_ref': 'PAY_0193A1B2C3D4E5F60718293A4B5C6D7E'},
            ]
        }
    }


class TicketCancelRequest(BaseModel):
    reason: str = Field(default='', max_length=500)


class VerificationResponse(BaseModel):
    is_scanned: bool
    scanned_at: Optional[datetime] = None
    scanned_by: Optional[int] = None
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None
    scan_count: int = 0

    @classmethod
    def from_verification(cls, verification: Verification) -> 'VerificationResponse':
        return cls(
            is_scanned=verification.is_scanned,
            scanned_at=verification.scanned_at,
            scanned_by=verification.scanned_by,
            entry_time=verification.entry_time,
            exit_time=verification.exit_time,
            scan_count=verification.scan_count,
        )


class CancellationResponse(BaseModel):
    cancelled_at: datetime
    reason: str
    refund_amount: int


class TicketResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'ticket_number': 'TCK-20260301-9F2A01BC',
                'event_id': 1,
                'attendee_id': 7,
                'status': 'active',
                'price_paid': 2500,
                'payment_status': 'completed',
            }
        },
    }

    id: UUID
    ticket_number: str
    event_id: int
    attendee_id: int
    status: str
    price_paid: int
    payment_ref: Optional[str] = None
    payment_status: str
    verification_token: Optional[str] = None
    verification: VerificationResponse
    cancellation: Optional[CancellationResponse] = None
    booked_at: Optional[datetime] = None

    @classmethod
    def from_ticket(cls, ticket: Ticket, *, include_token: bool = False) -> 'TicketResponse':
        cancellation = ticket.cancellation
        return cls(
            id=ticket.id,
            ticket_number=ticket.ticket_number,
            event_id=ticket.event_id,
            attendee_id=ticket.attendee_id,
            status=ticket.status.value,
            price_paid=ticket.price_paid,
            payment_ref=ticket.payment_ref,
            payment_status=ticket.payment_status.value,
            verification_token=ticket.verification_token if include_token else None,
            verification=VerificationResponse.from_verification(ticket.verification),
            cancellation=CancellationResponse(
                cancelled_at=cancellation.cancelled_at,
                reason=cancellation.reason,
                refund_amount=cancellation.refund_amount,
            )
            if cancellation
            else None,
            booked_at=ticket.booked_at,
        )


class TicketEventSummary(BaseModel):
    id: int
    title: str
    start_at: datetime
    end_at: datetime
    location: str
    status: str

    @classmethod
    def from_event(cls, event: Event) -> 'TicketEventSummary':
        return cls(
            id=event.id or 0,
            title=event.title,
            start_at=event.start_at,
            end_at=event.end_at,
            location=event.location,
            status=event.status.value,
        )


class TicketIssueResponse(BaseModel):
    success: bool = True
    ticket: TicketResponse


class TicketDetailResponse(BaseModel):
    success: bool = True
    ticket: TicketResponse


class TicketCancelResponse(BaseModel):
    success: bool = True
    ticket: TicketResponse
    refund_amount: int
    refund_status: str


class MyTicketItem(BaseModel):
    ticket: TicketResponse
    event: Optional[TicketEventSummary] = None
    can_cancel: bool


class MyTicketsResponse(BaseModel):
    success: bool = True
    tickets: List[MyTicketItem]
    counts: Dict[str, int]
