from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.service.shared_kernel.domain.entity.ticket_entity import Ticket
from src.service.shared_kernel.domain.value_object.verification import StaffNote


class ITicketCommandRepo(ABC):
    """Ticket writes inside a Unit of Work"""

    @abstractmethod
    async def get_by_id(self, *, ticket_id: UUID, for_update: bool = False) -> Optional[Ticket]:
        pass

    @abstractmethod
    async def get_by_ticket_number(
        self, *, ticket_number: str, for_update: bool = False
    ) -> Optional[Ticket]:
        pass

    @abstractmethod
    async def get_by_verification_token(
        self, *, verification_token: str, for_update: bool = False
    ) -> Optional[Ticket]:
        pass

    @abstractmethod
    async def get_active_for_attendee(self, *, event_id: int, attendee_id: int) -> Optional[Ticket]:
        pass

    @abstractmethod
    async def create(self, *, ticket: Ticket) -> Ticket:
        """
        Raises:
            DuplicateBookingError: attendee already holds a non-cancelled ticket for the event
            IdentifierCollisionError: ticket number / verification token already taken
            PaymentNotConfirmedError: payment reference already backs another ticket
        """
        pass

    @abstractmethod
    async def update(self, *, ticket: Ticket) -> Ticket:
        """Persist status, payment status, verification and cancellation"""
        pass

    @abstractmethod
    async def add_note(self, *, ticket_id: UUID, note: StaffNote) -> None:
        pass

    @abstractmethod
    async def list_active_by_event(self, *, event_id: int) -> List[Ticket]:
        pass

    @abstractmethod
    async def list_awaiting_refund(self, *, limit: int) -> List[Ticket]:
        """Cancelled paid tickets whose refund has not been confirmed yet, oldest first"""
        pass
