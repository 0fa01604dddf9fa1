from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.service.shared_kernel.domain.entity.event_entity import Event


class IEventQueryRepo(ABC):
    """Read-only view of the event catalog"""

    @abstractmethod
    async def get_by_id(self, *, event_id: int) -> Optional[Event]:
        pass

    @abstractmethod
    async def list_published(
        self,
        *,
        starting_after: datetime,
        category: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Event]:
        """Published events that have not started yet, soonest first"""
        pass

    @abstractmethod
    async def list_by_host(self, *, host_id: int) -> List[Event]:
        """Every event the host owns, drafts included, soonest first"""
        pass

    @abstractmethod
    async def list_by_staff(self, *, staff_id: int) -> List[Event]:
        """Events the staff member is assigned to, soonest first"""
        pass

    @abstractmethod
    async def is_staff_assigned(self, *, event_id: int, staff_id: int) -> bool:
        pass
