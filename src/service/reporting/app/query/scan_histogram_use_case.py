from collections import Counter
from datetime import datetime, timezone
from typing import List, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.shared_kernel.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.shared_kernel.domain.entity.principal_entity import Principal


@attrs.frozen
class HourBucket:
    hour: datetime
    count: int


def bucket_by_utc_hour(scan_times: List[datetime]) -> List[HourBucket]:
    """Naive timestamps are taken as UTC. Empty hours are omitted."""
    counts = Counter(
        (t if t.tzinfo else t.replace(tzinfo=timezone.utc))
        .astimezone(timezone.utc)
        .replace(minute=0, second=0, microsecond=0)
        for t in scan_times
    )
    return [HourBucket(hour=hour, count=counts[hour]) for hour in sorted(counts)]


class ScanHistogramUseCase:
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
        ticket_query_repo: ITicketQueryRepo = Depends(
            Provide[Container.report_ticket_query_repo]
        ),
    ) -> Self:
        return cls(event_query_repo=event_query_repo, ticket_query_repo=ticket_query_repo)

    @Logger.io
    async def execute(self, *, event_id: int, principal: Principal) -> List[HourBucket]:
        event = await self.event_query_repo.get_by_id(event_id=event_id)
        if event is None:
            raise NotFoundError('Event not found')
        if not principal.can_manage_event(event.host_id):
            raise ForbiddenError('Only the event host can view its scan history')

        scan_times = await self.ticket_query_repo.list_scan_times(event_id=event_id)
        return bucket_by_utc_hour(scan_times)
