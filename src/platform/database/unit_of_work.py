"""
Unit of Work Pattern - one transaction shared by the command repositories

- UoW owns the session lifecycle and commit/rollback
- Repositories receive the shared session from the UoW
- Use cases coordinate event and ticket writes through one UoW
"""

from __future__ import annotations

import abc
from contextlib import AbstractAsyncContextManager, AsyncExitStack
from typing import TYPE_CHECKING, Any, Callable

from sqlalchemy.ext.asyncio import AsyncSession


if TYPE_CHECKING:
    from src.service.shared_kernel.app.interface.i_event_command_repo import IEventCommandRepo
    from src.service.shared_kernel.app.interface.i_ticket_command_repo import ITicketCommandRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Usage:
        async with uow_factory() as uow:
            event = await uow.event_command_repo.get_by_id(event_id=1, for_update=True)
            await uow.ticket_command_repo.create(ticket=ticket)
            await uow.commit()

    Leaving the block without commit() rolls back.
    """

    event_command_repo: IEventCommandRepo
    ticket_command_repo: ITicketCommandRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.rollback()

    async def commit(self) -> None:
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(
        self, *, session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]]
    ) -> None:
        self.session_factory = session_factory
        self._exit_stack: AsyncExitStack | None = None
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> AbstractUnitOfWork:
        from src.service.shared_kernel.driven_adapter.repo.event_command_repo_impl import (
            EventCommandRepoImpl,
        )
        from src.service.shared_kernel.driven_adapter.repo.ticket_command_repo_impl import (
            TicketCommandRepoImpl,
        )

        self._exit_stack = AsyncExitStack()
        self.session = await self._exit_stack.enter_async_context(self.session_factory())

        # Repositories share the UoW session
        self.event_command_repo = EventCommandRepoImpl(session=self.session)
        self.ticket_command_repo = TicketCommandRepoImpl(session=self.session)

        return await super().__aenter__()

    async def __aexit__(self, *args: Any) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            if self._exit_stack is not None:
                await self._exit_stack.aclose()
                self._exit_stack = None

    async def _commit(self) -> None:
        assert self.session is not None
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()
