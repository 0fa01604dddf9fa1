from typing import List, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.dto.ticket_query_dto import AttendanceStats
from src.service.shared_kernel.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.shared_kernel.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.enum.event_status import EventStatus


@attrs.frozen
class AssignedEvent:
    event: Event
    stats: AttendanceStats


class ListAssignedEventsUseCase:
    """Staff dashboard: published events the caller works at, soonest first."""

    def __init__(
        self, *, event_query_repo: IEventQueryRepo, ticket_query_repo: ITicketQueryRepo
    ) -> None:
        self.event_query_repo = event_query_repo
        self.ticket_query_repo = ticket_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        ticket_query_repo: ITicketQueryRepo = Depends(Provide[Container.ticket_query_repo]),
    ) -> Self:
        return cls(event_query_repo=event_query_repo, ticket_query_repo=ticket_query_repo)

    @Logger.io
    async def execute(self, *, staff_id: int) -> List[AssignedEvent]:
        events = await self.event_query_repo.list_by_staff(staff_id=staff_id)
        published = sorted(
            (event for event in events if event.status == EventStatus.PUBLISHED),
            key=lambda event: event.start_at,
        )
        return [
            AssignedEvent(
                event=event,
                stats=await self.ticket_query_repo.attendance_stats(event_id=event.id or 0),
            )
            for event in published
        ]
