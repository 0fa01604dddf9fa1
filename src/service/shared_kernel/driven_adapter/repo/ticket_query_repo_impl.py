"""
Ticket Query Repository Implementation - CQRS Read Side

Backs attendee listings, attendance statistics and reporting. Reads go to the
replica when one is configured.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncContextManager, AsyncIterator, Callable, List, Optional
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.dto.ticket_query_dto import (
    AttendanceStats,
    TicketSearchCriteria,
)
from src.service.shared_kernel.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.shared_kernel.domain.entity.ticket_entity import Ticket
from src.service.shared_kernel.domain.enum.ticket_status import TicketStatus
from src.service.shared_kernel.driven_adapter.model.ticket_model import TicketModel
from src.service.shared_kernel.driven_adapter.repo.model_mapper import model_to_ticket


class TicketQueryRepoImpl(ITicketQueryRepo):
    def __init__(
        self, session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None
    ) -> None:
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')

    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID) -> Optional[Ticket]:
        async with self._get_session() as session:
            ticket_model = await session.get(TicketModel, ticket_id)
            return model_to_ticket(ticket_model) if ticket_model else None

    @Logger.io
    async def get_active_for_attendee(self, *, event_id: int, attendee_id: int) -> Optional[Ticket]:
        async with self._get_session() as session:
            result = await session.execute(
                select(TicketModel).where(
                    TicketModel.event_id == event_id,
                    TicketModel.attendee_id == attendee_id,
                    TicketModel.status != TicketStatus.CANCELLED.value,
                )
            )
            ticket_model = result.scalar_one_or_none()
            return model_to_ticket(ticket_model) if ticket_model else None

    @Logger.io
    async def list_by_attendee(
        self, *, attendee_id: int, status: Optional[TicketStatus] = None
    ) -> List[Ticket]:
        async with self._get_session() as session:
            stmt = select(TicketModel).where(TicketModel.attendee_id == attendee_id)
            if status is not None:
                stmt = stmt.where(TicketModel.status == status.value)
            result = await session.execute(stmt.order_by(TicketModel.booked_at.desc()))
            return [model_to_ticket(row) for row in result.scalars().all()]

    @Logger.io
    async def attendance_stats(self, *, event_id: int) -> AttendanceStats:
        async with self._get_session() as session:
            result = await session.execute(
                select(
                    func.count(TicketModel.id),
                    func.coalesce(
                        func.sum(case((TicketModel.is_scanned.is_(True), 1), else_=0)), 0
                    ),
                ).where(
                    TicketModel.event_id == event_id,
                    TicketModel.status == TicketStatus.ACTIVE.value,
                )
            )
            total, scanned = result.one()
            return AttendanceStats(total=int(total), scanned=int(scanned))

    @Logger.io
    async def list_recent_scans(self, *, event_id: int, limit: int) -> List[Ticket]:
        async with self._get_session() as session:
            result = await session.execute(
                select(TicketModel)
                .where(
                    TicketModel.event_id == event_id,
                    TicketModel.status == TicketStatus.ACTIVE.value,
                    TicketModel.is_scanned.is_(True),
                )
                .order_by(TicketModel.scanned_at.desc())
                .limit(limit)
            )
            return [model_to_ticket(row) for row in result.scalars().all()]

    @Logger.io
    async def search(self, *, criteria: TicketSearchCriteria) -> List[Ticket]:
        stmt = select(TicketModel)
        if criteria.event_id is not None:
            stmt = stmt.where(TicketModel.event_id == criteria.event_id)
        if criteria.attendee_id is not None:
            stmt = stmt.where(TicketModel.attendee_id == criteria.attendee_id)
        if criteria.status is not None:
            stmt = stmt.where(TicketModel.status == criteria.status.value)
        if criteria.booked_from is not None:
            stmt = stmt.where(TicketModel.booked_at >= criteria.booked_from)
        if criteria.booked_to is not None:
            stmt = stmt.where(TicketModel.booked_at <= criteria.booked_to)
        stmt = (
            stmt.order_by(TicketModel.booked_at.desc(), TicketModel.id)
            .offset(criteria.offset)
            .limit(criteria.limit)
        )

        async with self._get_session() as session:
            result = await session.execute(stmt)
            return [model_to_ticket(row) for row in result.scalars().all()]

    @Logger.io
    async def list_scan_times(self, *, event_id: int) -> List[datetime]:
        async with self._get_session() as session:
            result = await session.execute(
                select(TicketModel.scanned_at).where(
                    TicketModel.event_id == event_id,
                    TicketModel.scanned_at.is_not(None),
                )
            )
            return [scanned_at for scanned_at in result.scalars().all() if scanned_at is not None]
