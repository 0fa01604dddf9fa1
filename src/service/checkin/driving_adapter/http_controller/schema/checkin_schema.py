from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from src.service.ledger.driving_adapter.http_controller.schema.ticket_schema import (
    TicketEventSummary,
    VerificationResponse,
)
from src.service.shared_kernel.domain.enum.ticket_status import ScanAction


class ScanRequest(BaseModel):
    ticket_number: Optional[str] = Field(default=None, max_length=32)
    verification_token: Optional[str] = Field(default=None, max_length=128)
    event_id: Optional[int] = Field(default=None, gt=0)
    action: ScanAction = ScanAction.ENTRY

    model_config = {
        'json_schema_extra': {
            'example': {'ticket_number': 'TCK-20260301-9F2A01BC', 'event_id': 1, 'action': 'entry'}
        }
    }

    @model_validator(mode='after')
    def require_lookup_key(self) -> 'ScanRequest':
        if not self.ticket_number and not self.verification_token:
            raise ValueError('ticket_number or verification_token is required')
        return self


class ScanData(BaseModel):
    ticket_id: UUID
    ticket_number: str
    attendee_id: int
    event: TicketEventSummary
    action: str
    verification: VerificationResponse
    scan_count: int
    is_first_scan: bool


class ScanResponse(BaseModel):
    success: bool = True
    message: str
    data: ScanData


class TicketNoteRequest(BaseModel):
    note: str = Field(min_length=1, max_length=1000)


class TicketNoteData(BaseModel):
    staff_id: int
    note: str
    created_at: datetime


class TicketNoteResponse(BaseModel):
    success: bool = True
    note: TicketNoteData


class AttendanceStatistics(BaseModel):
    total: int
    scanned: int
    unscanned: int
    rate: float


class RecentScan(BaseModel):
    ticket_number: str
    attendee_id: int
    scanned_at: Optional[datetime] = None
    scan_count: int


class AttendanceResponse(BaseModel):
    success: bool = True
    event: TicketEventSummary
    statistics: AttendanceStatistics
    recent_scans: List[RecentScan]


class AssignedEventItem(BaseModel):
    event: TicketEventSummary
    statistics: AttendanceStatistics


class AssignedEventsResponse(BaseModel):
    success: bool = True
    events: List[AssignedEventItem]


class CloseAdmissionResponse(BaseModel):
    success: bool = True
    event_id: int
    used: int
    expired: int
