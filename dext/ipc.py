"""
Message channel between a front end and the engine.

Each inbound message kind has exactly one handler. Handlers receive a
Request and answer through request.reply(kind, payload), which goes back
to the sender that made the request.
"""

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol, Union

from loguru import logger

from dext.errors import UnknownMessageError


class Sender(Protocol):
    def send(self, kind: str, payload: Any) -> None: ...


class QueueSender:
    """Sender that puts (kind, payload) replies on an asyncio.Queue."""

    def __init__(self, queue: Optional[asyncio.Queue] = None):
        self.queue = queue if queue is not None else asyncio.Queue()

    def send(self, kind: str, payload: Any) -> None:
        self.queue.put_nowait((kind, payload))


@dataclass
class Request:
    """One inbound message plus the way back to its sender."""
    kind: str
    payload: Any
    sender: Sender

    def reply(self, kind: str, payload: Any) -> None:
        self.sender.send(kind, payload)


Handler = Callable[[Request], Union[None, Awaitable[None]]]


class MessageChannel:
    """Dispatch inbound messages to their registered handler."""

    def __init__(self):
        self._handlers: dict[str, Handler] = {}

    def on(self, kind: str, handler: Handler) -> None:
        """Register the handler for a message kind, replacing any previous one."""
        if kind in self._handlers:
            logger.debug(f"Replacing handler for '{kind}'")
        self._handlers[kind] = handler

    def off(self, kind: str) -> None:
        self._handlers.pop(kind, None)

    @property
    def kinds(self) -> list[str]:
        return list(self._handlers)

    async def dispatch(self, kind: str, payload: Any, sender: Sender) -> None:
        """
        Deliver one message.

        Raises:
            UnknownMessageError: if no handler is registered for `kind`
        """
        handler = self._handlers.get(kind)
        if handler is None:
            raise UnknownMessageError(f"No handler for message kind '{kind}'")

        result = handler(Request(kind=kind, payload=payload, sender=sender))
        if inspect.isawaitable(result):
            await result
