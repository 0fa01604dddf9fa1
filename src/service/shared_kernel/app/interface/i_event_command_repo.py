from abc import ABC, abstractmethod
from typing import Optional

from src.service.shared_kernel.domain.entity.event_entity import Event


class IEventCommandRepo(ABC):
    """Event writes inside a Unit of Work"""

    @abstractmethod
    async def get_by_id(self, *, event_id: int, for_update: bool = False) -> Optional[Event]:
        """for_update locks the event row until the Unit of Work ends"""
        pass

    @abstractmethod
    async def create(self, *, event: Event) -> Event:
        pass

    @abstractmethod
    async def update(self, *, event: Event) -> Event:
        """Persist catalog fields (not tickets_sold) and the staff assignment"""
        pass

    @abstractmethod
    async def adjust_tickets_sold(self, *, event_id: int, delta: int) -> bool:
        """
        Atomically add delta to tickets_sold.

        Returns False (and changes nothing) when the result would leave 0..capacity.
        """
        pass
