"""Cancellable background steps on the running event loop."""
from __future__ import annotations

import asyncio
from typing import Coroutine, Optional


class ScheduledTask:
    """Handle for one coroutine scheduled on the current event loop.

    The handle doubles as the cancellation token: ``cancel()`` is synchronous,
    so once it returns the coroutine will not run past its current
    suspension point.
    """

    def __init__(self, coro: Coroutine, name: Optional[str] = None) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise
        self._task: asyncio.Task = loop.create_task(coro, name=name)
        self._cancelled = False

    @property
    def running(self) -> bool:
        return not self._task.done()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> bool:
        """Request cancellation; returns False if the task already finished."""
        if self._task.done():
            return False
        self._cancelled = True
        self._task.cancel()
        return True

    async def wait(self) -> None:
        """Wait until the task has finished, whether it completed or was cancelled."""
        await asyncio.wait([self._task])
