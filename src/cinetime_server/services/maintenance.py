"""Scheduled maintenance tasks."""

import asyncio
import logging
from typing import Optional

from ..core.config import settings
from .reconciler import OrphanReconciler

logger = logging.getLogger(__name__)


class MaintenanceScheduler:
    """Periodically runs orphan reconciliation in the background."""

    def __init__(self, reconciler: OrphanReconciler, interval_seconds: Optional[float] = None):
        """
        Initialize scheduler.

        Args:
            reconciler: Reconciler to run
            interval_seconds: Seconds between passes, 0 disables the scheduler
        """
        self.reconciler = reconciler
        self.interval_seconds = (
            settings.reconcile_interval_seconds
            if interval_seconds is None
            else interval_seconds
        )
        self._task: Optional[asyncio.Task] = None

    @property
    def enabled(self) -> bool:
        """Check if scheduled reconciliation is configured."""
        return self.interval_seconds > 0

    async def start(self) -> None:
        """Start the background reconciliation loop."""
        if not self.enabled:
            logger.info("Scheduled orphan reconciliation disabled")
            return
        self._task = asyncio.create_task(self._reconcile_loop())
        logger.info(
            f"Scheduled orphan reconciliation every {self.interval_seconds}s"
        )

    async def stop(self) -> None:
        """Stop the background loop."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Maintenance scheduler stopped")

    async def _reconcile_loop(self) -> None:
        """Run reconciliation on a fixed interval."""
        while True:
            try:
                await asyncio.sleep(self.interval_seconds)
                result = await self.reconciler.reconcile_all()
                if result.failed_groups:
                    logger.warning(
                        f"Reconciliation left {len(result.failed_groups)} groups for the next pass"
                    )
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Scheduled reconciliation error: {e}")
