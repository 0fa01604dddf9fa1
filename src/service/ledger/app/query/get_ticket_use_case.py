from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.shared_kernel.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.shared_kernel.domain.entity.principal_entity import Principal
from src.service.shared_kernel.domain.entity.ticket_entity import Ticket
from src.service.shared_kernel.domain.enum.user_role import UserRole


class GetTicketUseCase:
    def __init__(
        self, *, ticket_query_repo: ITicketQueryRepo, event_query_repo: IEventQueryRepo
    ) -> None:
        self.ticket_query_repo = ticket_query_repo
        self.event_query_repo = event_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        ticket_query_repo: ITicketQueryRepo = Depends(Provide[Container.ticket_query_repo]),
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
    ) -> Self:
        return cls(ticket_query_repo=ticket_query_repo, event_query_repo=event_query_repo)

    @Logger.io
    async def execute(self, *, ticket_id: UUID, principal: Principal) -> Ticket:
        ticket = await self.ticket_query_repo.get_by_id(ticket_id=ticket_id)
        if ticket is None:
            raise NotFoundError('Ticket not found')

        if principal.is_admin or ticket.attendee_id == principal.id:
            return ticket

        event = await self.event_query_repo.get_by_id(event_id=ticket.event_id)
        if event is not None:
            if principal.has_role(UserRole.HOST) and event.host_id == principal.id:
                return ticket
            if principal.has_role(UserRole.STAFF) and event.is_staff_assigned(principal.id):
                return ticket

        raise ForbiddenError('Not allowed to view this ticket')
