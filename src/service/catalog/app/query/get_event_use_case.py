from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.entity.principal_entity import Principal
from src.service.shared_kernel.domain.enum.event_status import EventStatus


class GetEventUseCase:
    def __init__(self, *, event_query_repo: IEventQueryRepo) -> None:
        self.event_query_repo = event_query_repo

    @classmethod
    @inject
    def depends(
        cls, event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo])
    ) -> Self:
        return cls(event_query_repo=event_query_repo)

    @Logger.io
    async def execute(self, *, event_id: int, principal: Principal) -> Event:
        event = await self.event_query_repo.get_by_id(event_id=event_id)
        if event is None:
            raise NotFoundError('Event not found')
        # Drafts stay private to their host
        if event.status == EventStatus.DRAFT and not principal.can_manage_event(event.host_id):
            raise NotFoundError('Event not found')
        return event
