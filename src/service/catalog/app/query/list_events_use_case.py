from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.interface.i_clock import IClock
from src.service.shared_kernel.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.shared_kernel.domain.entity.event_entity import Event


class ListEventsUseCase:
    def __init__(self, *, event_query_repo: IEventQueryRepo, clock: IClock) -> None:
        self.event_query_repo = event_query_repo
        self.clock = clock

    @classmethod
    @inject
    def depends(
        cls,
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        clock: IClock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(event_query_repo=event_query_repo, clock=clock)

    @Logger.io
    async def list_available(
        self, *, category: Optional[str] = None, limit: int = 50, offset: int = 0
    ) -> List[Event]:
        """Published events still open for booking, soonest first"""
        events = await self.event_query_repo.list_published(
            starting_after=self.clock.now(), category=category, limit=limit, offset=offset
        )
        Logger.base.info(f'🌟 [LIST_AVAILABLE] Found {len(events)} available events')
        return events

    @Logger.io
    async def list_by_host(self, *, host_id: int) -> List[Event]:
        """Every event of the host, drafts and past events included"""
        events = await self.event_query_repo.list_by_host(host_id=host_id)
        Logger.base.info(f'📋 [LIST_BY_HOST] Found {len(events)} events for host {host_id}')
        return events
