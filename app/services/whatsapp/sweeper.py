"""
Session Expiry Sweeper

Owned, cancellable background task that evicts idle conversations on a
fixed interval, independent of request traffic. Started from the
application lifespan and stopped on shutdown.

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import logging
from typing import Optional

from app.services.whatsapp.store import BaseSessionStore

logger = logging.getLogger(__name__)


class SessionSweeper:
    """
    Periodic expiry sweep over a session store.

    A failing sweep is logged and the loop carries on with the next tick.

    Example:
        >>> sweeper = SessionSweeper(store, interval_seconds=600)
        >>> sweeper.start()
        >>> ...
        >>> await sweeper.stop()
    """

    def __init__(self, store: BaseSessionStore, interval_seconds: float = 600):
        self.store = store
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="session-sweeper")
        logger.info(f"Session sweeper started (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Session sweeper stopped")

    async def sweep_once(self) -> int:
        """Run one sweep; returns the number of evicted sessions (0 on failure)."""
        try:
            removed = await self.store.sweep()
        except Exception as e:
            logger.exception(f"Session sweep failed: {e}")
            return 0

        if removed:
            logger.info(f"🧹 Evicted {removed} expired session(s)")
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.sweep_once()
