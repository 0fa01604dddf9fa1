"""
Production FastAPI Application

Ticket ledger, check-in, reporting and catalog routes plus the refund retry worker.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import create_db_and_tables, dispose_engines, get_engine
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.service.ledger.driving_adapter.background.refund_retry_worker import (
    build_refund_retry_worker,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [EventPass] Starting up...')

    tracing = TracingConfig(service_name='eventpass-api')
    tracing.setup()
    Logger.base.info('📊 [EventPass] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [EventPass] Dependency injection wired')

    uses_postgres = settings.STORAGE_BACKEND == 'postgres'
    if uses_postgres:
        tracing.instrument_sqlalchemy(engine=get_engine())
        if settings.AUTO_CREATE_TABLES:
            await create_db_and_tables()
            Logger.base.info('🗄️  [EventPass] Database tables ensured')
        Logger.base.info('🗄️  [EventPass] Database engine ready + instrumented')
    else:
        Logger.base.warning('🧠 [EventPass] In-memory store active; data is not persisted')

    async with anyio.create_task_group() as tg:
        tg.start_soon(build_refund_retry_worker().start_polling)
        Logger.base.info('✅ [EventPass] Ready to serve requests')

        yield

        Logger.base.info('🛑 [EventPass] Shutting down...')
        tg.cancel_scope.cancel()

    if uses_postgres:
        await dispose_engines()
        Logger.base.info('🗄️  [EventPass] Database engines disposed')

    tracing.shutdown()
    Logger.base.info('📊 [EventPass] Tracing shutdown complete')

    container.unwire()
    Logger.base.info('👋 [EventPass] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
