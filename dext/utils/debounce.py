"""
Trailing-edge debounce for event-loop handlers.

A burst of calls arriving less than `wait` seconds apart collapses into a
single call, made `wait` seconds after the last one, with the last call's
arguments. Coroutine handlers are scheduled as tasks on the running loop.
"""

import asyncio
import inspect
from typing import Any, Callable, Optional

from loguru import logger


class Debouncer:
    """
    Wrap a handler so rapid repeated invocations fire it only once.

    Must be called from inside a running event loop.

    Example:
        on_query = Debouncer(handle_query, wait=0.1)
        on_query(request)   # superseded
        on_query(request2)  # handle_query(request2) runs 0.1s later
    """

    def __init__(self, handler: Callable[..., Any], wait: float):
        self.handler = handler
        self.wait = wait
        self._timer: Optional[asyncio.TimerHandle] = None
        self._pending: tuple[tuple, dict] = ((), {})
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """True while a call is waiting for the window to close."""
        return self._timer is not None

    def __call__(self, *args, **kwargs) -> None:
        loop = asyncio.get_running_loop()
        if self._timer is not None:
            self._timer.cancel()
        self._pending = (args, kwargs)
        self._timer = loop.call_later(self.wait, self._fire, args, kwargs)

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def flush(self) -> None:
        """Fire the pending call now instead of waiting for the window."""
        if self._timer is not None:
            args, kwargs = self._pending
            self._timer.cancel()
            self._fire(args, kwargs)

    async def drain(self) -> None:
        """Wait for handler tasks that have already been started."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _fire(self, args: tuple, kwargs: dict) -> None:
        self._timer = None
        try:
            result = self.handler(*args, **kwargs)
        except Exception:
            logger.exception(f"Debounced handler {self._handler_name} failed")
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error(
                f"Debounced handler {self._handler_name} failed"
            )

    @property
    def _handler_name(self) -> str:
        return getattr(self.handler, "__qualname__", repr(self.handler))


def debounce(wait: float) -> Callable[[Callable[..., Any]], Debouncer]:
    """Decorator form of Debouncer."""
    def wrap(handler: Callable[..., Any]) -> Debouncer:
        return Debouncer(handler, wait)
    return wrap
