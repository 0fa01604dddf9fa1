from datetime import datetime
from typing import Iterable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.interface.i_clock import IClock
from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.enum.event_status import EventStatus
from src.service.shared_kernel.domain.value_object.pricing import Pricing


class CreateEventUseCase:
    def __init__(self, *, uow_factory: UnitOfWorkFactory, clock: IClock) -> None:
        self.uow_factory = uow_factory
        self.clock = clock

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        clock: IClock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(uow_factory=uow_factory, clock=clock)

    @Logger.io
    async def execute(
        self,
        *,
        host_id: int,
        title: str,
        start_at: datetime,
        end_at: datetime,
        capacity: int,
        pricing: Pricing,
        description: str = '',
        category: str = 'other',
        location: str = '',
        assigned_staff: Iterable[int] = (),
        status: EventStatus = EventStatus.DRAFT,
    ) -> Event:
        event = Event.create(
            host_id=host_id,
            title=title,
            start_at=start_at,
            end_at=end_at,
            capacity=capacity,
            pricing=pricing,
            now=self.clock.now(),
            description=description,
            category=category,
            location=location,
            assigned_staff=assigned_staff,
            status=status,
        )
        async with self.uow_factory() as uow:
            created = await uow.event_command_repo.create(event=event)
            await uow.commit()

        Logger.base.info(f'🎪 [CATALOG] Event {created.id} created by host {host_id}')
        return created
