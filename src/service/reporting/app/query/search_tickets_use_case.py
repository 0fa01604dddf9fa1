from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError, ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.dto.ticket_query_dto import TicketSearchCriteria
from src.service.shared_kernel.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.shared_kernel.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.shared_kernel.domain.entity.principal_entity import Principal
from src.service.shared_kernel.domain.entity.ticket_entity import Ticket


class SearchTicketsUseCase:
    """
    Ticket search for hosts and admins.

    Admins may search across events; hosts must name one of their own events.
    Reads go through the reporting repository, never the ledger's transaction path.
    """

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
    async def execute(
        self, *, criteria: TicketSearchCriteria, principal: Principal
    ) -> List[Ticket]:
        if (
            criteria.booked_from is not None
            and criteria.booked_to is not None
            and criteria.booked_from > criteria.booked_to
        ):
            raise DomainError('booked_from must not be after booked_to')

        if criteria.event_id is None:
            if not principal.is_admin:
                raise ForbiddenError('Hosts must search within one of their events')
        else:
            event = await self.event_query_repo.get_by_id(event_id=criteria.event_id)
            if event is None:
                raise NotFoundError('Event not found')
            if not principal.can_manage_event(event.host_id):
                raise ForbiddenError('Only the event host can view its tickets')

        return await self.ticket_query_repo.search(criteria=criteria)
