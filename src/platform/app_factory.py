"""
Shared FastAPI App Factory

Provides common app setup for production and test environments.
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from src.platform.config.core_setting import settings
from src.platform.exception.exception_handlers import register_exception_handlers
from src.platform.observability.tracing import TracingConfig
from src.service.catalog.driving_adapter.http_controller.event_controller import (
    router as event_router,
)
from src.service.checkin.driving_adapter.http_controller.checkin_controller import (
    router as checkin_router,
)
from src.service.ledger.driving_adapter.http_controller.payment_controller import (
    router as payment_router,
)
from src.service.ledger.driving_adapter.http_controller.ticket_controller import (
    router as ticket_router,
)
from src.service.reporting.driving_adapter.http_controller.report_controller import (
    router as report_router,
)


def create_app(
    *,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[Any]],
    title_suffix: str = '',
    description: str = 'Event ticket ledger and door check-in',
    service_name: str = 'eventpass-api',
) -> FastAPI:
    """
    Create a configured FastAPI application.

    Args:
        lifespan: Async context manager for app lifespan (startup/shutdown)
        title_suffix: Optional suffix for app title (e.g., " (Test)")
        description: App description
        service_name: Service name for tracing
    """
    app = FastAPI(
        title=f'{settings.PROJECT_NAME}{title_suffix}',
        description=description,
        version=settings.VERSION,
        lifespan=lifespan,
    )

    # Auto-instrument FastAPI (must be done before mounting routes)
    TracingConfig(service_name=service_name).instrument_fastapi(app=app)

    app.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    register_exception_handlers(app)

    app.include_router(ticket_router, prefix='/api/tickets', tags=['tickets'])
    app.include_router(checkin_router, prefix='/api', tags=['check-in'])
    app.include_router(event_router, prefix='/api/events', tags=['events'])
    app.include_router(report_router, prefix='/api/reports', tags=['reports'])
    app.include_router(payment_router, prefix='/api/payments', tags=['payments'])

    _register_common_endpoints(app)

    return app


def _register_common_endpoints(app: FastAPI) -> None:
    """Register health and metrics endpoints."""

    @app.get('/health')
    async def health_check() -> dict[str, Any]:
        """Health check endpoint for container orchestration."""
        return {'success': True, 'status': 'healthy', 'service': settings.PROJECT_NAME}

    @app.get('/metrics')
    async def get_metrics() -> PlainTextResponse:
        """Prometheus metrics endpoint."""
        return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
