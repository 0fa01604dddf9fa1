from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import NotFoundError, StaffNotAssignedError
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.interface.i_clock import IClock
from src.service.shared_kernel.domain.value_object.verification import StaffNote


class AddTicketNoteUseCase:
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
    async def execute(self, *, ticket_id: UUID, staff_id: int, note: str) -> StaffNote:
        async with self.uow_factory() as uow:
            ticket = await uow.ticket_command_repo.get_by_id(ticket_id=ticket_id, for_update=True)
            if ticket is None:
                raise NotFoundError('Ticket not found')
            event = await uow.event_command_repo.get_by_id(event_id=ticket.event_id)
            if event is None or not event.is_staff_assigned(staff_id):
                raise StaffNotAssignedError()

            _, staff_note = ticket.add_note(staff_id=staff_id, note=note, now=self.clock.now())
            await uow.ticket_command_repo.add_note(ticket_id=ticket_id, note=staff_note)
            await uow.commit()

        Logger.base.info(f'📝 [NOTE] Staff {staff_id} annotated ticket {ticket.ticket_number}')
        return staff_note
