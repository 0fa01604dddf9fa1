from typing import Optional, Self
from uuid import UUID

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    CustomBaseError,
    DomainError,
    InconsistentStateError,
    NotFoundError,
    StaffNotAssignedError,
    TicketNotActiveError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.platform.state.keyed_lock import KeyedLock, ticket_lock_key
from src.service.shared_kernel.app.interface.i_clock import IClock
from src.service.shared_kernel.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.entity.ticket_entity import Ticket
from src.service.shared_kernel.domain.enum.ticket_status import ScanAction


@attrs.frozen
class ScanLookup:
    ticket_number: Optional[str] = None
    verification_token: Optional[str] = attrs.field(default=None, repr=False)

    def __attrs_post_init__(self) -> None:
        if not self.ticket_number and not self.verification_token:
            raise DomainError('ticket_number or verification_token is required')


@attrs.frozen
class ScanResult:
    ticket: Ticket
    event: Event
    action: ScanAction
    is_first_scan: bool


class ScanTicketUseCase:
    """
    Door scan for entry or exit.

    Check order: ticket found, event found, staff assigned, ticket active, scan window.
    Scans of the same ticket serialize on the per-ticket lock and the row lock.
    """

    def __init__(
        self, *, uow_factory: UnitOfWorkFactory, clock: IClock, keyed_lock: KeyedLock
    ) -> None:
        self.uow_factory = uow_factory
        self.clock = clock
        self.keyed_lock = keyed_lock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        clock: IClock = Depends(Provide[Container.clock]),
        keyed_lock: KeyedLock = Depends(Provide[Container.keyed_lock]),
    ) -> Self:
        return cls(uow_factory=uow_factory, clock=clock, keyed_lock=keyed_lock)

    @staticmethod
    async def _resolve(
        repo: ITicketCommandRepo, lookup: ScanLookup, *, for_update: bool = False
    ) -> Ticket:
        by_number = by_token = None
        if lookup.ticket_number:
            by_number = await repo.get_by_ticket_number(
                ticket_number=lookup.ticket_number, for_update=for_update
            )
        if lookup.verification_token:
            by_token = await repo.get_by_verification_token(
                verification_token=lookup.verification_token, for_update=for_update
            )

        if by_number is None and by_token is None:
            raise NotFoundError('Ticket not found')
        if lookup.ticket_number and lookup.verification_token:
            # Both keys given: they must name the same ticket
            if by_number is None or by_token is None or by_number.id != by_token.id:
                raise InconsistentStateError('Ticket number and verification token do not match')
        ticket = by_number or by_token
        assert ticket is not None
        return ticket

    @Logger.io
    async def execute(
        self,
        *,
        lookup: ScanLookup,
        staff_id: int,
        action: ScanAction,
        event_id_hint: Optional[int] = None,
    ) -> ScanResult:
        with (
            self.tracer.start_as_current_span(
                'use_case.scan_ticket',
                attributes={'staff.id': staff_id, 'scan.action': action.value},
            ),
            metrics.scans_in_flight.track_inprogress(),
        ):
            try:
                result = await self._scan(
                    lookup=lookup, staff_id=staff_id, action=action, event_id_hint=event_id_hint
                )
            except CustomBaseError as e:
                metrics.record_scan(action=action.value, result=e.kind.value)
                raise
            metrics.record_scan(
                action=action.value, result='first_entry' if result.is_first_scan else 'ok'
            )
            Logger.base.info(
                f'🚪 [SCAN] {action.value} {result.ticket.ticket_number} by staff {staff_id} '
                f'(count={result.ticket.verification.scan_count})'
            )
            return result

    async def _scan(
        self,
        *,
        lookup: ScanLookup,
        staff_id: int,
        action: ScanAction,
        event_id_hint: Optional[int],
    ) -> ScanResult:
        async with self.uow_factory() as uow:
            if event_id_hint is not None:
                hinted = await uow.event_command_repo.get_by_id(event_id=event_id_hint)
                if hinted is not None and not hinted.is_staff_assigned(staff_id):
                    raise StaffNotAssignedError()
            ticket_id: UUID = (await self._resolve(uow.ticket_command_repo, lookup)).id

        async with self.keyed_lock.hold(key=ticket_lock_key(ticket_id)):
            async with self.uow_factory() as uow:
                ticket = await self._resolve(uow.ticket_command_repo, lookup, for_update=True)
                event = await uow.event_command_repo.get_by_id(event_id=ticket.event_id)
                if event is None:
                    raise NotFoundError('Event not found')
                if not event.is_staff_assigned(staff_id):
                    raise StaffNotAssignedError()
                if event_id_hint is not None and ticket.event_id != event_id_hint:
                    raise NotFoundError('Ticket not found for this event')
                if not ticket.is_active:
                    raise TicketNotActiveError(
                        f'Ticket is {ticket.status.value}. Cannot scan inactive tickets'
                    )

                now = self.clock.now()
                event.ensure_scan_window(action=action, now=now)
                scanned, is_first_scan = ticket.record_scan(
                    action=action, staff_id=staff_id, now=now
                )
                await uow.ticket_command_repo.update(ticket=scanned)
                await uow.commit()

        return ScanResult(ticket=scanned, event=event, action=action, is_first_scan=is_first_scan)
