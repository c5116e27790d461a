"""Owned background sweeps.

Rate limiter and cache maintenance run on an interval inside the event loop.
Each sweep is a ``PeriodicTask`` that the application lifespan starts and
stops, so no timers leak between test cases or after shutdown.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

SweepCallable = Callable[[], Union[Any, Awaitable[Any]]]


class PeriodicTask:
    """Runs a callable every ``interval`` seconds until stopped.

    Usage:
        sweeper = PeriodicTask("cache-cleanup", cache.cleanup, interval=600)
        await sweeper.start()
        ...
        await sweeper.stop()

    The first run happens one interval after ``start()``. Exceptions raised
    by the callable are logged and do not end the loop.
    """

    def __init__(self, name: str, func: SweepCallable, interval: float):
        """Initialize the task.

        Args:
            name: Label used in log messages
            func: Sync or async callable invoked on every tick
            interval: Seconds between runs
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self._func = func
        self._interval = interval
        self._task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> Any:
        """Invoke the callable immediately, awaiting it if needed."""
        result = self._func()
        if inspect.isawaitable(result):
            result = await result
        return result

    async def start(self) -> None:
        """Start the background loop (no-op if already running)."""
        if self._task is not None:
            logger.debug(f"Periodic task '{self.name}' already running")
            return

        self._stop_event.clear()
        self._task = asyncio.create_task(self._run())
        logger.info(f"Started periodic task '{self.name}' (interval: {self._interval}s)")

    async def stop(self) -> None:
        """Stop the background loop and wait for it to finish."""
        if self._task is None:
            return

        self._stop_event.set()

        try:
            await asyncio.wait_for(self._task, timeout=5.0)
        except asyncio.TimeoutError:
            logger.warning(f"Periodic task '{self.name}' did not stop gracefully, cancelling")
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        finally:
            self._task = None
            logger.info(f"Stopped periodic task '{self.name}'")

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                # Interval elapsed
                pass
            else:
                break

            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Error during periodic task '{self.name}': {e}")
