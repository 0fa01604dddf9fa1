from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import (
    DuplicateBookingError,
    IdentifierCollisionError,
    NotFoundError,
    PaymentNotConfirmedError,
)
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.shared_kernel.domain.entity.ticket_entity import Ticket
from src.service.shared_kernel.domain.enum.ticket_status import PaymentStatus, TicketStatus
from src.service.shared_kernel.domain.value_object.verification import StaffNote
from src.service.shared_kernel.driven_adapter.model.ticket_model import (
    UQ_TICKET_ACTIVE_ATTENDEE,
    UQ_TICKET_NUMBER,
    UQ_TICKET_PAYMENT_REF,
    UQ_TICKET_VERIFICATION_TOKEN,
    TicketModel,
    TicketStaffNoteModel,
)
from src.service.shared_kernel.driven_adapter.repo.model_mapper import (
    apply_ticket_state_to_model,
    model_to_ticket,
    ticket_to_model,
)


def translate_ticket_integrity_error(error: IntegrityError) -> Exception:
    detail = str(error.orig)
    if UQ_TICKET_ACTIVE_ATTENDEE in detail:
        return DuplicateBookingError()
    if UQ_TICKET_NUMBER in detail or UQ_TICKET_VERIFICATION_TOKEN in detail:
        return IdentifierCollisionError()
    if 'ticket_pkey' in detail:
        return IdentifierCollisionError('Generated ticket id collided')
    if UQ_TICKET_PAYMENT_REF in detail:
        return PaymentNotConfirmedError('Payment reference already backs another ticket')
    return error


class TicketCommandRepoImpl(ITicketCommandRepo):
    """Ticket writes on the Unit of Work session"""

    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    async def _load_one(self, *conditions: Any, for_update: bool = False) -> Optional[TicketModel]:
        stmt = (
            select(TicketModel).where(*conditions).execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update(of=TicketModel)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID, for_update: bool = False) -> Optional[Ticket]:
        ticket_model = await self._load_one(TicketModel.id == ticket_id, for_update=for_update)
        return model_to_ticket(ticket_model) if ticket_model else None

    @Logger.io
    async def get_by_ticket_number(
        self, *, ticket_number: str, for_update: bool = False
    ) -> Optional[Ticket]:
        ticket_model = await self._load_one(
            TicketModel.ticket_number == ticket_number, for_update=for_update
        )
        return model_to_ticket(ticket_model) if ticket_model else None

    @Logger.io
    async def get_by_verification_token(
        self, *, verification_token: str, for_update: bool = False
    ) -> Optional[Ticket]:
        ticket_model = await self._load_one(
            TicketModel.verification_token == verification_token, for_update=for_update
        )
        return model_to_ticket(ticket_model) if ticket_model else None

    @Logger.io
    async def get_active_for_attendee(self, *, event_id: int, attendee_id: int) -> Optional[Ticket]:
        ticket_model = await self._load_one(
            TicketModel.event_id == event_id,
            TicketModel.attendee_id == attendee_id,
            TicketModel.status != TicketStatus.CANCELLED.value,
        )
        return model_to_ticket(ticket_model) if ticket_model else None

    @Logger.io
    async def create(self, *, ticket: Ticket) -> Ticket:
        ticket_model = ticket_to_model(ticket)
        self.session.add(ticket_model)
        try:
            await self.session.flush()
        except IntegrityError as e:
            translated = translate_ticket_integrity_error(e)
            if translated is e:
                raise
            raise translated from e
        return model_to_ticket(ticket_model)

    @Logger.io
    async def update(self, *, ticket: Ticket) -> Ticket:
        ticket_model = await self.session.get(TicketModel, ticket.id)
        if ticket_model is None:
            raise NotFoundError('Ticket not found')
        apply_ticket_state_to_model(ticket, ticket_model)
        await self.session.flush()
        return model_to_ticket(ticket_model)

    @Logger.io
    async def add_note(self, *, ticket_id: UUID, note: StaffNote) -> None:
        self.session.add(
            TicketStaffNoteModel(
                ticket_id=ticket_id,
                staff_id=note.staff_id,
                note=note.note,
                created_at=note.created_at,
            )
        )
        await self.session.flush()

    @Logger.io
    async def list_active_by_event(self, *, event_id: int) -> List[Ticket]:
        result = await self.session.execute(
            select(TicketModel)
            .where(
                TicketModel.event_id == event_id,
                TicketModel.status == TicketStatus.ACTIVE.value,
            )
            .order_by(TicketModel.booked_at)
            .with_for_update(of=TicketModel)
        )
        return [model_to_ticket(row) for row in result.scalars().all()]

    @Logger.io
    async def list_awaiting_refund(self, *, limit: int) -> List[Ticket]:
        result = await self.session.execute(
            select(TicketModel)
            .where(
                TicketModel.status == TicketStatus.CANCELLED.value,
                TicketModel.price_paid > 0,
                TicketModel.payment_ref.is_not(None),
                TicketModel.payment_status != PaymentStatus.REFUNDED.value,
            )
            .order_by(TicketModel.cancelled_at)
            .limit(limit)
        )
        return [model_to_ticket(row) for row in result.scalars().all()]
