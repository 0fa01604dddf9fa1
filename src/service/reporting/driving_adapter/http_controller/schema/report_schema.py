from datetime import datetime
from typing import List

from pydantic import BaseModel

from src.service.ledger.driving_adapter.http_controller.schema.ticket_schema import TicketResponse


class TicketSearchResponse(BaseModel):
    success: bool = True
    count: int
    tickets: List[TicketResponse]


class HourBucketData(BaseModel):
    hour: datetime
    count: int


class ScanHistogramResponse(BaseModel):
    success: bool = True
    event_id: int
    total_scans: int
    buckets: List[HourBucketData]
