"""
Test Configuration and Fixtures

This module provides:
- Environment setup before application modules read settings
- In-memory storage, a frozen clock and a scriptable payment gateway
- Use case fixtures wired to those doubles (unit tests)
- A TestClient whose container points at the same doubles (API tests)
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# The DI container picks the storage backend when it is imported
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    os.environ['STORAGE_BACKEND'] = 'memory'
    os.environ['SECRET_KEY'] = 'test_secret_key'

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)


_early_setup_test_environment()

from collections.abc import Callable, Generator  # noqa: E402
from datetime import timedelta  # noqa: E402
from typing import Dict  # noqa: E402

from dependency_injector import providers  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

from src.platform.config.di import container  # noqa: E402
from src.platform.database.unit_of_work import UnitOfWorkFactory  # noqa: E402
from src.platform.state.keyed_lock import KeyedLock  # noqa: E402
from src.service.checkin.app.command.scan_ticket_use_case import ScanTicketUseCase  # noqa: E402
from src.service.ledger.app.command.cancel_ticket_use_case import (  # noqa: E402
    CancelTicketUseCase,
)
from src.service.ledger.app.command.issue_ticket_use_case import (  # noqa: E402
    IssueTicketUseCase,
)
from src.service.ledger.app.command.refund_ticket_use_case import (  # noqa: E402
    RefundTicketUseCase,
)
from src.service.shared_kernel.domain.entity.principal_entity import Principal  # noqa: E402
from src.service.shared_kernel.domain.enum.user_role import UserRole  # noqa: E402
from src.service.shared_kernel.driven_adapter.memory.in_memory_event_repo import (  # noqa: E402
    InMemoryEventQueryRepo,
)
from src.service.shared_kernel.driven_adapter.memory.in_memory_store import (  # noqa: E402
    InMemoryStore,
)
from src.service.shared_kernel.driven_adapter.memory.in_memory_ticket_repo import (  # noqa: E402
    InMemoryTicketQueryRepo,
)
from src.service.shared_kernel.driven_adapter.memory.in_memory_unit_of_work import (  # noqa: E402
    InMemoryUnitOfWork,
)
from src.service.shared_kernel.driving_adapter.http_controller.auth.jwt_auth import (  # noqa: E402
    JwtAuth,
)
from test.shared.fakes import FrozenClock, ScriptedPaymentGateway  # noqa: E402
from test.shared.seed import (  # noqa: E402
    ADMIN_ID,
    ATTENDEE_ID,
    HOST_ID,
    NOW,
    STAFF_ID,
)


# =============================================================================
# Storage and infrastructure doubles
# =============================================================================
@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow_factory(store: InMemoryStore) -> UnitOfWorkFactory:
    return lambda: InMemoryUnitOfWork(store=store)


@pytest.fixture
def keyed_lock() -> KeyedLock:
    return KeyedLock()


@pytest.fixture
def gateway(clock: FrozenClock) -> ScriptedPaymentGateway:
    return ScriptedPaymentGateway(clock=clock)


@pytest.fixture
def event_query_repo(store: InMemoryStore) -> InMemoryEventQueryRepo:
    return InMemoryEventQueryRepo(store=store)


@pytest.fixture
def ticket_query_repo(store: InMemoryStore) -> InMemoryTicketQueryRepo:
    return InMemoryTicketQueryRepo(store=store)


# =============================================================================
# Use cases shared across services
# =============================================================================
@pytest.fixture
def refund_use_case(
    uow_factory: UnitOfWorkFactory, gateway: ScriptedPaymentGateway, clock: FrozenClock
) -> RefundTicketUseCase:
    return RefundTicketUseCase(
        uow_factory=uow_factory, payment_gateway=gateway, clock=clock, timeout_seconds=0.2
    )


@pytest.fixture
def issue_use_case(
    uow_factory: UnitOfWorkFactory,
    event_query_repo: InMemoryEventQueryRepo,
    ticket_query_repo: InMemoryTicketQueryRepo,
    gateway: ScriptedPaymentGateway,
    clock: FrozenClock,
    keyed_lock: KeyedLock,
    refund_use_case: RefundTicketUseCase,
) -> IssueTicketUseCase:
    return IssueTicketUseCase(
        uow_factory=uow_factory,
        event_query_repo=event_query_repo,
        ticket_query_repo=ticket_query_repo,
        payment_gateway=gateway,
        clock=clock,
        keyed_lock=keyed_lock,
        refund_use_case=refund_use_case,
        payment_timeout_seconds=0.2,
        max_attempts=3,
    )


@pytest.fixture
def cancel_use_case(
    uow_factory: UnitOfWorkFactory,
    ticket_query_repo: InMemoryTicketQueryRepo,
    clock: FrozenClock,
    keyed_lock: KeyedLock,
    refund_use_case: RefundTicketUseCase,
) -> CancelTicketUseCase:
    return CancelTicketUseCase(
        uow_factory=uow_factory,
        ticket_query_repo=ticket_query_repo,
        clock=clock,
        keyed_lock=keyed_lock,
        refund_use_case=refund_use_case,
        window=timedelta(hours=24),
    )


@pytest.fixture
def scan_use_case(
    uow_factory: UnitOfWorkFactory, clock: FrozenClock, keyed_lock: KeyedLock
) -> ScanTicketUseCase:
    return ScanTicketUseCase(uow_factory=uow_factory, clock=clock, keyed_lock=keyed_lock)


# =============================================================================
# Principals and tokens
# =============================================================================
@pytest.fixture
def attendee() -> Principal:
    return Principal(id=ATTENDEE_ID, role=UserRole.ATTENDEE)


@pytest.fixture
def host() -> Principal:
    return Principal(id=HOST_ID, role=UserRole.HOST)


@pytest.fixture
def staff() -> Principal:
    return Principal(id=STAFF_ID, role=UserRole.STAFF)


@pytest.fixture
def admin() -> Principal:
    return Principal(id=ADMIN_ID, role=UserRole.ADMIN)


@pytest.fixture
def auth_headers() -> Callable[..., Dict[str, str]]:
    jwt_auth = JwtAuth()

    def _headers(*, user_id: int, role: UserRole) -> Dict[str, str]:
        token = jwt_auth.create_jwt_token(user_id=user_id, role=role)
        return {'Authorization': f'Bearer {token}'}

    return _headers


# =============================================================================
# HTTP client
# =============================================================================
@pytest.fixture
def client(
    store: InMemoryStore, clock: FrozenClock, gateway: ScriptedPaymentGateway
) -> Generator[TestClient, None, None]:
    """TestClient over the test app, sharing the unit-test doubles with the container."""
    from test.test_main import app

    with (
        container.in_memory_store.override(providers.Object(store)),
        container.clock.override(providers.Object(clock)),
        container.payment_gateway.override(providers.Object(gateway)),
    ):
        # Query repositories are singletons holding the store
        container.reset_singletons()
        with TestClient(app) as test_client:
            yield test_client
    container.reset_singletons()
