from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.service.shared_kernel.app.dto.ticket_query_dto import (
    AttendanceStats,
    TicketSearchCriteria,
)
from src.service.shared_kernel.domain.entity.ticket_entity import Ticket
from src.service.shared_kernel.domain.enum.ticket_status import TicketStatus


class ITicketQueryRepo(ABC):
    """Read side over tickets; never takes locks"""

    @abstractmethod
    async def get_by_id(self, *, ticket_id: UUID) -> Optional[Ticket]:
        pass

    @abstractmethod
    async def get_active_for_attendee(self, *, event_id: int, attendee_id: int) -> Optional[Ticket]:
        pass

    @abstractmethod
    async def list_by_attendee(
        self, *, attendee_id: int, status: Optional[TicketStatus] = None
    ) -> List[Ticket]:
        """Newest booking first"""
        pass

    @abstractmethod
    async def attendance_stats(self, *, event_id: int) -> AttendanceStats:
        """Counts over active tickets of the event"""
        pass

    @abstractmethod
    async def list_recent_scans(self, *, event_id: int, limit: int) -> List[Ticket]:
        """Active scanned tickets, latest first scan first"""
        pass

    @abstractmethod
    async def search(self, *, criteria: TicketSearchCriteria) -> List[Ticket]:
        pass

    @abstractmethod
    async def list_scan_times(self, *, event_id: int) -> List[datetime]:
        """First-entry timestamps of every scanned ticket of the event"""
        pass
