from datetime import datetime
from typing import FrozenSet, Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.state.keyed_lock import KeyedLock, event_lock_key
from src.service.shared_kernel.app.interface.i_clock import IClock
from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.entity.principal_entity import Principal
from src.service.shared_kernel.domain.enum.event_status import EventStatus
from src.service.shared_kernel.domain.value_object.pricing import Pricing


@attrs.frozen
class EventChanges:
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    capacity: Optional[int] = None
    status: Optional[EventStatus] = None
    pricing: Optional[Pricing] = None
    assigned_staff: Optional[FrozenSet[int]] = None


class UpdateEventUseCase:
    """
    Host edits. Runs under the per-event lock with the row locked, so the
    capacity floor is checked against the current tickets_sold.
    """

    def __init__(
        self, *, uow_factory: UnitOfWorkFactory, clock: IClock, keyed_lock: KeyedLock
    ) -> None:
        self.uow_factory = uow_factory
        self.clock = clock
        self.keyed_lock = keyed_lock

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        clock: IClock = Depends(Provide[Container.clock]),
        keyed_lock: KeyedLock = Depends(Provide[Container.keyed_lock]),
    ) -> Self:
        return cls(uow_factory=uow_factory, clock=clock, keyed_lock=keyed_lock)

    @Logger.io
    async def execute(
        self, *, event_id: int, principal: Principal, changes: EventChanges
    ) -> Event:
        async with self.keyed_lock.hold(key=event_lock_key(event_id)):
            async with self.uow_factory() as uow:
                event = await uow.event_command_repo.get_by_id(event_id=event_id, for_update=True)
                if event is None:
                    raise NotFoundError('Event not found')
                if not principal.can_manage_event(event.host_id):
                    raise ForbiddenError('Only the event host can edit this event')

                updated = self._apply(event=event, changes=changes, now=self.clock.now())
                saved = await uow.event_command_repo.update(event=updated)
                await uow.commit()

        Logger.base.info(f'✏️ [CATALOG] Event {event_id} updated')
        return saved

    @staticmethod
    def _apply(*, event: Event, changes: EventChanges, now: datetime) -> Event:
        details = {
            name: value
            for name, value in (
                ('title', changes.title),
                ('description', changes.description),
                ('category', changes.category),
                ('location', changes.location),
            )
            if value is not None
        }
        if details:
            event = attrs.evolve(event, **details, updated_at=now)
        if changes.start_at is not None or changes.end_at is not None:
            event = event.reschedule(
                start_at=changes.start_at or event.start_at,
                end_at=changes.end_at or event.end_at,
                now=now,
            )
        if changes.capacity is not None:
            event = event.change_capacity(capacity=changes.capacity, now=now)
        if changes.pricing is not None:
            event = attrs.evolve(event, pricing=changes.pricing, updated_at=now)
        if changes.assigned_staff is not None:
            event = event.assign_staff(staff_ids=changes.assigned_staff, now=now)
        if changes.status is not None:
            event = event.change_status(status=changes.status, now=now)
        return event
