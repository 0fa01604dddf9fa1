from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.interface.i_event_command_repo import IEventCommandRepo
from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.driven_adapter.model.event_model import EventModel, EventStaffModel
from src.service.shared_kernel.driven_adapter.repo.model_mapper import (
    apply_event_to_model,
    model_to_event,
)


class EventCommandRepoImpl(IEventCommandRepo):
    """Event writes on the Unit of Work session"""

    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    async def _load(self, *, event_id: int, for_update: bool = False) -> Optional[EventModel]:
        stmt = (
            select(EventModel)
            .where(EventModel.id == event_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update(of=EventModel)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    @Logger.io
    async def get_by_id(self, *, event_id: int, for_update: bool = False) -> Optional[Event]:
        event_model = await self._load(event_id=event_id, for_update=for_update)
        return model_to_event(event_model) if event_model else None

    @Logger.io
    async def create(self, *, event: Event) -> Event:
        event_model = EventModel(
            tickets_sold=0,
            staff=[EventStaffModel(staff_id=staff_id) for staff_id in sorted(event.assigned_staff)],
        )
        apply_event_to_model(event, event_model)
        if event.created_at is not None:
            event_model.created_at = event.created_at
            event_model.updated_at = event.created_at
        self.session.add(event_model)
        await self.session.flush()
        return model_to_event(event_model)

    @Logger.io
    async def update(self, *, event: Event) -> Event:
        assert event.id is not None, 'Event must be persisted before update'
        event_model = await self._load(event_id=event.id, for_update=True)
        if event_model is None:
            raise NotFoundError('Event not found')
        apply_event_to_model(event, event_model)
        await self.session.flush()
        return model_to_event(event_model)

    @Logger.io
    async def adjust_tickets_sold(self, *, event_id: int, delta: int) -> bool:
        new_value = EventModel.tickets_sold + delta
        result = await self.session.execute(
            update(EventModel)
            .where(EventModel.id == event_id, new_value >= 0, new_value <= EventModel.capacity)
            .values(tickets_sold=new_value)
            .execution_options(synchronize_session='fetch')
        )
        return result.rowcount == 1  # type: ignore[attr-defined]
