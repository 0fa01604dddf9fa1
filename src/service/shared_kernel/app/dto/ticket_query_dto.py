from datetime import datetime
from typing import Optional

import attrs

from src.service.shared_kernel.domain.enum.ticket_status import TicketStatus


@attrs.frozen
class AttendanceStats:
    total: int
    scanned: int

    @property
    def unscanned(self) -> int:
        return self.total - self.scanned

    @property
    def rate(self) -> float:
        """Fraction of active tickets scanned in, rounded to 2 decimals."""
        if not self.total:
            return 0.0
        return round(self.scanned / self.total, 2)


@attrs.frozen
class TicketSearchCriteria:
    event_id: Optional[int] = None
    attendee_id: Optional[int] = None
    status: Optional[TicketStatus] = None
    booked_from: Optional[datetime] = None
    booked_to: Optional[datetime] = None
    limit: int = 100
    offset: int = 0

    def matches_booked_at(self, booked_at: Optional[datetime]) -> bool:
        if booked_at is None:
            return self.booked_from is None and self.booked_to is None
        if self.booked_from is not None and booked_at < self.booked_from:
            return False
        if self.booked_to is not None and booked_at > self.booked_to:
            return False
        return True
