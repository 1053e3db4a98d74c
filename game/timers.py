"""Cancellable phase deadlines on the asyncio loop."""

import asyncio
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

DeadlineCallback = Callable[..., Awaitable[Any]]


class AsyncioTimers:
    """Runs a callback once after a delay. The returned task is the cancel handle."""

    def schedule(self, delay_ms: int, callback: DeadlineCallback, *args: Any) -> asyncio.Task:
        return asyncio.create_task(self._run(delay_ms, callback, args))

    async def _run(self, delay_ms: int, callback: DeadlineCallback, args: tuple) -> None:
        try:
            await asyncio.sleep(delay_ms / 1000)
            await callback(*args)
        except asyncio.CancelledError:
            logger.debug("Deadline %s%r cancelled", getattr(callback, "__name__", callback), args)
            raise
        except Exception:
            logger.exception("Deadline callback failed for %r", args)
