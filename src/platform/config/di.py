"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings, settings
from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.platform.state.keyed_lock import KeyedLock
from src.service.ledger.driven_adapter.payment.demo_payment_gateway_impl import (
    DemoPaymentGatewayImpl,
)
from src.service.shared_kernel.driven_adapter.clock.system_clock import SystemClock
from src.service.shared_kernel.driven_adapter.memory.in_memory_event_repo import (
    InMemoryEventQueryRepo,
)
from src.service.shared_kernel.driven_adapter.memory.in_memory_store import InMemoryStore
from src.service.shared_kernel.driven_adapter.memory.in_memory_ticket_repo import (
    InMemoryTicketQueryRepo,
)
from src.service.shared_kernel.driven_adapter.memory.in_memory_unit_of_work import (
    InMemoryUnitOfWork,
)
from src.service.shared_kernel.driven_adapter.repo.event_query_repo_impl import EventQueryRepoImpl
from src.service.shared_kernel.driven_adapter.repo.ticket_query_repo_impl import (
    TicketQueryRepoImpl,
)
from src.service.shared_kernel.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)
    storage_backend = providers.Object(settings.STORAGE_BACKEND)

    # Database (uses AsyncEngineManager; reads go to the replica when configured)
    database = providers.Singleton(Database, read_only=False)
    read_database = providers.Singleton(Database, read_only=True)
    in_memory_store = providers.Singleton(InMemoryStore)

    # Infrastructure services
    clock = providers.Singleton(SystemClock)
    keyed_lock = providers.Singleton(KeyedLock)
    jwt_auth = providers.Singleton(JwtAuth)
    payment_gateway = providers.Singleton(DemoPaymentGatewayImpl, clock=clock)

    # Unit of Work: a new instance per transaction (inject with .provider)
    unit_of_work = providers.Selector(
        storage_backend,
        postgres=providers.Factory(
            SqlAlchemyUnitOfWork, session_factory=database.provided.session
        ),
        memory=providers.Factory(InMemoryUnitOfWork, store=in_memory_store),
    )

    # Read side repositories (stateless - open a session per call)
    event_query_repo = providers.Selector(
        storage_backend,
        postgres=providers.Singleton(EventQueryRepoImpl, session_factory=database.provided.session),
        memory=providers.Singleton(InMemoryEventQueryRepo, store=in_memory_store),
    )
    ticket_query_repo = providers.Selector(
        storage_backend,
        postgres=providers.Singleton(
            TicketQueryRepoImpl, session_factory=database.provided.session
        ),
        memory=providers.Singleton(InMemoryTicketQueryRepo, store=in_memory_store),
    )

    # Reporting reads tolerate replica lag
    report_ticket_query_repo = providers.Selector(
        storage_backend,
        postgres=providers.Singleton(
            TicketQueryRepoImpl, session_factory=read_database.provided.session
        ),
        memory=providers.Singleton(InMemoryTicketQueryRepo, store=in_memory_store),
    )


container = Container()
