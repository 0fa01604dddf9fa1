from typing import Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    EventWindowClosedError,
    ForbiddenError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.state.keyed_lock import KeyedLock, event_lock_key
from src.service.shared_kernel.app.interface.i_clock import IClock
from src.service.shared_kernel.domain.entity.principal_entity import Principal
from src.service.shared_kernel.domain.enum.event_status import EventStatus
from src.service.shared_kernel.domain.enum.ticket_status import TicketStatus


@attrs.frozen
class AdmissionClosed:
    event_id: int
    used: int
    expired: int


class CloseAdmissionUseCase:
    """
    Terminal marking once an event is over: active tickets that were scanned become used,
    the others expire, and the event is completed. Running it again is a no-op.
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
    async def execute(self, *, event_id: int, principal: Principal) -> AdmissionClosed:
        async with self.keyed_lock.hold(key=event_lock_key(event_id)):
            async with self.uow_factory() as uow:
                event = await uow.event_command_repo.get_by_id(event_id=event_id, for_update=True)
                if event is None:
                    raise NotFoundError('Event not found')
                if not principal.can_manage_event(event.host_id):
                    raise ForbiddenError('Only the event host can close admission')

                now = self.clock.now()
                if not event.has_ended(now=now):
                    raise EventWindowClosedError(
                        'Admission can only be closed after the event ends'
                    )

                used = expired = 0
                for ticket in await uow.ticket_command_repo.list_active_by_event(event_id=event_id):
                    closed = ticket.close_admission(now=now)
                    if closed.status == TicketStatus.USED:
                        used += 1
                    else:
                        expired += 1
                    await uow.ticket_command_repo.update(ticket=closed)

                if event.status == EventStatus.PUBLISHED:
                    await uow.event_command_repo.update(
                        event=event.change_status(status=EventStatus.COMPLETED, now=now)
                    )
                await uow.commit()

        Logger.base.info(f'🏁 [CLOSE] Event {event_id} closed: {used} used, {expired} expired')
        return AdmissionClosed(event_id=event_id, used=used, expired=expired)
