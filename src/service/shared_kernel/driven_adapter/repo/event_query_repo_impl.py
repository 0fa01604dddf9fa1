"""
Event Query Repository Implementation - CQRS Read Side
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncContextManager, AsyncIterator, Callable, List, Optional

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.enum.event_status import EventStatus
from src.service.shared_kernel.driven_adapter.model.event_model import EventModel, EventStaffModel
from src.service.shared_kernel.driven_adapter.repo.model_mapper import model_to_event


class EventQueryRepoImpl(IEventQueryRepo):
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
    async def get_by_id(self, *, event_id: int) -> Optional[Event]:
        async with self._get_session() as session:
            event_model = await session.get(EventModel, event_id)
            return model_to_event(event_model) if event_model else None

    @Logger.io
    async def list_published(
        self,
        *,
        starting_after: datetime,
        category: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Event]:
        stmt = select(EventModel).where(
            EventModel.status == EventStatus.PUBLISHED.value,
            EventModel.start_at > starting_after,
        )
        if category is not None:
            stmt = stmt.where(EventModel.category == category)
        stmt = stmt.order_by(EventModel.start_at, EventModel.id).limit(limit).offset(offset)
        async with self._get_session() as session:
            result = await session.execute(stmt)
            return [model_to_event(row) for row in result.scalars().all()]

    @Logger.io
    async def list_by_host(self, *, host_id: int) -> List[Event]:
        async with self._get_session() as session:
            result = await session.execute(
                select(EventModel)
                .where(EventModel.host_id == host_id)
                .order_by(EventModel.start_at)
            )
            return [model_to_event(row) for row in result.scalars().all()]

    @Logger.io
    async def list_by_staff(self, *, staff_id: int) -> List[Event]:
        async with self._get_session() as session:
            result = await session.execute(
                select(EventModel)
                .join(EventStaffModel, EventStaffModel.event_id == EventModel.id)
                .where(EventStaffModel.staff_id == staff_id)
                .order_by(EventModel.start_at)
            )
            return [model_to_event(row) for row in result.scalars().all()]

    @Logger.io
    async def is_staff_assigned(self, *, event_id: int, staff_id: int) -> bool:
        async with self._get_session() as session:
            result = await session.execute(
                select(
                    exists().where(
                        EventStaffModel.event_id == event_id,
                        EventStaffModel.staff_id == staff_id,
                    )
                )
            )
            return bool(result.scalar())
