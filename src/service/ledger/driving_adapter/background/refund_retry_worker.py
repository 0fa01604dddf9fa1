"""
Refund retry worker

Runs inside the app lifespan task group. Every REFUND_RETRY_INTERVAL_SECONDS it re-requests
refunds for cancelled, paid tickets whose refund has not gone through yet. A failing batch is
logged and the loop keeps going; cancellation of the task group stops it.
"""

import anyio

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.ledger.app.command.retry_pending_refunds_use_case import (
    RetryPendingRefundsUseCase,
)


class RefundRetryWorker:
    def __init__(
        self,
        *,
        use_case: RetryPendingRefundsUseCase,
        interval_seconds: float = settings.REFUND_RETRY_INTERVAL_SECONDS,
    ) -> None:
        self.use_case = use_case
        self.interval_seconds = interval_seconds

    async def run_once(self) -> int:
        try:
            return await self.use_case.execute()
        except Exception as e:
            Logger.base.warning(f'⚠️ [REFUND] Retry batch failed: {e}')
            return 0

    async def start_polling(self) -> None:
        Logger.base.info(f'🔄 [REFUND] Retry worker polling every {self.interval_seconds}s')
        while True:
            await anyio.sleep(self.interval_seconds)
            await self.run_once()


def build_refund_retry_worker() -> RefundRetryWorker:
    """Resolve the use case from the wired container."""
    return RefundRetryWorker(use_case=RetryPendingRefundsUseCase.depends())
