from collections import Counter
from datetime import timedelta
from typing import Dict, List, Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.interface.i_clock import IClock
from src.service.shared_kernel.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.shared_kernel.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.entity.ticket_entity import Ticket
from src.service.shared_kernel.domain.enum.ticket_status import TicketStatus


@attrs.frozen
class MyTicketView:
    ticket: Ticket
    event: Optional[Event]
    can_cancel: bool


@attrs.frozen
class MyTickets:
    items: List[MyTicketView]
    counts: Dict[str, int]


class ListMyTicketsUseCase:
    def __init__(
        self,
        *,
        ticket_query_repo: ITicketQueryRepo,
        event_query_repo: IEventQueryRepo,
        clock: IClock,
        window: timedelta = timedelta(hours=settings.CANCELLATION_WINDOW_HOURS),
    ) -> None:
        self.ticket_query_repo = ticket_query_repo
        self.event_query_repo = event_query_repo
        self.clock = clock
        self.window = window

    @classmethod
    @inject
    def depends(
        cls,
        ticket_query_repo: ITicketQueryRepo = Depends(Provide[Container.ticket_query_repo]),
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        clock: IClock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(
            ticket_query_repo=ticket_query_repo, event_query_repo=event_query_repo, clock=clock
        )

    @Logger.io
    async def execute(
        self, *, attendee_id: int, status: Optional[TicketStatus] = None, upcoming: bool = False
    ) -> MyTickets:
        """Counts always cover every ticket of the attendee; filters apply to items only."""
        now = self.clock.now()
        tickets = await self.ticket_query_repo.list_by_attendee(attendee_id=attendee_id)
        counts = Counter(ticket.status.value for ticket in tickets)

        events: Dict[int, Optional[Event]] = {}
        items: List[MyTicketView] = []
        for ticket in tickets:
            if status is not None and ticket.status != status:
                continue
            if ticket.event_id not in events:
                events[ticket.event_id] = await self.event_query_repo.get_by_id(
                    event_id=ticket.event_id
                )
            event = events[ticket.event_id]
            if upcoming and (event is None or event.start_at <= now):
                continue
            can_cancel = event is not None and ticket.can_cancel(
                event_start_at=event.start_at, now=now, window=self.window
            )
            items.append(MyTicketView(ticket=ticket, event=event, can_cancel=can_cancel))

        return MyTickets(
            items=items,
            counts={
                'total': len(tickets),
                **{s.value: counts.get(s.value, 0) for s in TicketStatus},
            },
        )
