"""Fixed-period driver for engine cycles.

Each tick starts one engine cycle in the default executor. A tick that
fires while a cycle is still running is skipped, never queued.

Example:
    >>> scheduler = PollScheduler(engine, interval=1.0)
    >>> await scheduler.start()
    >>> ...
    >>> await scheduler.stop()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from core.sync_engine import AchievementSyncEngine

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0  # seconds


class PollScheduler:
    """Asyncio ticker running engine cycles without overlap.

    Attributes:
        interval: Seconds between ticks.
        ticks: Number of ticks fired.
        skipped_ticks: Ticks skipped because a cycle was running.
    """

    def __init__(
        self,
        engine: AchievementSyncEngine,
        interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._engine = engine
        self.interval = interval
        self.ticks = 0
        self.skipped_ticks = 0
        self._ticker: Optional[asyncio.Task] = None
        self._in_flight: Optional[asyncio.Future] = None
        self._shutdown = False

    @property
    def running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    async def start(self) -> asyncio.Task:
        """Start ticking. Returns the ticker task."""
        if self.running:
            logger.warning(
                "Poll scheduler already running",
                extra={"component": "scheduler"},
            )
            return self._ticker

        self._shutdown = False
        self._ticker = asyncio.create_task(self._tick_loop())

        logger.info(
            f"Poll scheduler started with {self.interval}s interval",
            extra={"component": "scheduler"},
        )
        return self._ticker

    async def _tick_loop(self) -> None:
        while not self._shutdown:
            self.tick()
            await asyncio.sleep(self.interval)

    def tick(self) -> bool:
        """Start a cycle unless one is in flight.

        Returns:
            True if a cycle was started, False if the tick was skipped.
        """
        self.ticks += 1
        if self._in_flight is not None and not self._in_flight.done():
            self.skipped_ticks += 1
            logger.debug(
                "Previous cycle still running, tick skipped",
                extra={"component": "scheduler"},
            )
            return False

        loop = asyncio.get_running_loop()
        self._in_flight = loop.run_in_executor(None, self._engine.run_cycle)
        self._in_flight.add_done_callback(self._log_cycle_error)
        return True

    @staticmethod
    def _log_cycle_error(future: asyncio.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(
                f"Error in sync cycle: {error}",
                extra={"component": "scheduler"},
            )

    async def stop(self) -> None:
        """Stop ticking and wait for the in-flight cycle to finish."""
        self._shutdown = True

        if self._ticker and not self._ticker.done():
            self._ticker.cancel()
            try:
                await self._ticker
            except asyncio.CancelledError:
                pass

        if self._in_flight is not None and not self._in_flight.done():
            await asyncio.wait([self._in_flight])

        logger.info(
            "Poll scheduler stopped",
            extra={"component": "scheduler"},
        )
