"""Deferred wakeups addressed by opaque handles."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

import uuid_utils
from pydantic import BaseModel

logger = logging.getLogger(__name__)

WakeupCallback = Callable[[str], Awaitable[None]]


class Scheduler(Protocol):
    """Arms and cancels single-shot wakeups."""

    async def set(self, delay_seconds: int, description: str) -> str: ...

    async def unset(self, handle: str) -> None: ...

    async def is_pending(self, handle: str) -> bool: ...

    async def close(self) -> None: ...


def _new_handle() -> str:
    return str(uuid_utils.uuid4())


class AsyncioScheduler:
    """Runs wakeups on the event loop of the calling coroutine.

    Cancellation is best-effort: a wakeup whose callback already started
    keeps running.
    """

    def __init__(self, callback: WakeupCallback | None = None) -> None:
        self._callback = callback
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    def bind(self, callback: WakeupCallback) -> None:
        self._callback = callback

    async def set(self, delay_seconds: int, description: str) -> str:
        handle = _new_handle()
        loop = asyncio.get_running_loop()
        self._timers[handle] = loop.call_later(delay_seconds, self._fire, handle)
        logger.debug("Armed wakeup %s in %ss: %s", handle, delay_seconds, description)
        return handle

    async def unset(self, handle: str) -> None:
        timer = self._timers.pop(handle, None)
        if timer is not None:
            timer.cancel()
            logger.debug("Cancelled wakeup %s", handle)

    async def is_pending(self, handle: str) -> bool:
        return handle in self._timers

    def _fire(self, handle: str) -> None:
        self._timers.pop(handle, None)
        if self._callback is None:
            logger.warning("Wakeup %s fired with no handler bound", handle)
            return
        task = asyncio.get_running_loop().create_task(self._callback(handle))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Wakeup handler failed", exc_info=task.exception())

    async def close(self) -> None:
        """Cancel every pending wakeup and running handler."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


class ArmedWakeup(BaseModel):
    handle: str
    delay_seconds: int
    description: str


class ManualScheduler:
    """Records wakeups instead of timing them; ``fire`` delivers one on demand."""

    def __init__(self, callback: WakeupCallback | None = None) -> None:
        self._callback = callback
        self.pending: dict[str, ArmedWakeup] = {}
        self.history: list[ArmedWakeup] = []
        self.cancelled: list[str] = []

    def bind(self, callback: WakeupCallback) -> None:
        self._callback = callback

    async def set(self, delay_seconds: int, description: str) -> str:
        wakeup = ArmedWakeup(
            handle=_new_handle(), delay_seconds=delay_seconds, description=description
        )
        self.pending[wakeup.handle] = wakeup
        self.history.append(wakeup)
        return wakeup.handle

    async def unset(self, handle: str) -> None:
        if self.pending.pop(handle, None) is not None:
            self.cancelled.append(handle)

    async def is_pending(self, handle: str) -> bool:
        return handle in self.pending

    async def fire(self, handle: str) -> None:
        """Deliver a wakeup, even one that was already cancelled."""
        self.pending.pop(handle, None)
        if self._callback is None:
            raise RuntimeError("No wakeup handler bound")
        await self._callback(handle)

    async def close(self) -> None:
        self.pending.clear()
