from typing import List, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError, StaffNotAssignedError
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.dto.ticket_query_dto import AttendanceStats
from src.service.shared_kernel.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.shared_kernel.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.entity.ticket_entity import Ticket


@attrs.frozen
class AttendanceSummary:
    event: Event
    stats: AttendanceStats
    recent_scans: List[Ticket]


class AttendanceSummaryUseCase:
    def __init__(
        self,
        *,
        event_query_repo: IEventQueryRepo,
        ticket_query_repo: ITicketQueryRepo,
        recent_limit: int = settings.RECENT_SCANS_LIMIT,
    ) -> None:
        self.event_query_repo = event_query_repo
        self.ticket_query_repo = ticket_query_repo
        self.recent_limit = recent_limit

    @classmethod
    @inject
    def depends(
        cls,
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        ticket_query_repo: ITicketQueryRepo = Depends(Provide[Container.ticket_query_repo]),
    ) -> Self:
        return cls(event_query_repo=event_query_repo, ticket_query_repo=ticket_query_repo)

    @Logger.io
    async def execute(self, *, event_id: int, staff_id: int) -> AttendanceSummary:
        event = await self.event_query_repo.get_by_id(event_id=event_id)
        if event is None:
            raise NotFoundError('Event not found')
        if not await self.event_query_repo.is_staff_assigned(event_id=event_id, staff_id=staff_id):
            raise StaffNotAssignedError()

        stats = await self.ticket_query_repo.attendance_stats(event_id=event_id)
        recent = await self.ticket_query_repo.list_recent_scans(
            event_id=event_id, limit=self.recent_limit
        )
        return AttendanceSummary(event=event, stats=stats, recent_scans=recent)
