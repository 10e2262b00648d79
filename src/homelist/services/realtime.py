"""Real-time event bridge.

Subscribes to one channel of the task service's server-sent-events stream,
decodes each frame into a typed event and hands it to a handler. Task
events go to the reconciler, shopping events to the shopping list state.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field

import httpx
from pydantic import ValidationError

from homelist.models.events import RealtimeEvent, ShoppingEvent, TaskEvent, parse_event
from homelist.utils.logger import get_logger

from .api.client import APIClient
from .reconciliation import TaskListReconciler
from .shopping_state import ShoppingListState

EventHandler = Callable[[RealtimeEvent], Awaitable[None]]

logger = get_logger("realtime")


@dataclass
class SSEFrame:
    event: str = "message"
    data: list[str] = field(default_factory=list)


async def iter_sse(lines: AsyncIterable[str]) -> AsyncIterator[tuple[str, str]]:
    """Group SSE lines into ``(event, data)`` pairs.

    Comment lines (``:``) are skipped; multi-line data is joined with
    newlines; a blank line ends a frame.
    """
    frame = SSEFrame()
    async for line in lines:
        line = line.rstrip("\r")
        if not line:
            if frame.data:
                yield frame.event, "\n".join(frame.data)
            frame = SSEFrame()
            continue
        if line.startswith(":"):
            continue
        key, _, value = line.partition(":")
        value = value.removeprefix(" ")
        if key == "event":
            frame.event = value
        elif key == "data":
            frame.data.append(value)
    if frame.data:
        yield frame.event, "\n".join(frame.data)


def decode_frame(name: str, data: str) -> RealtimeEvent | None:
    """Decode one frame; malformed or unknown frames are dropped with a warning."""
    try:
        payload = json.loads(data)
    except json.JSONDecodeError:
        logger.warning("dropping %s frame with invalid JSON", name)
        return None
    try:
        event = parse_event(name, payload)
    except ValidationError as e:
        logger.warning("dropping malformed %s event: %s", name, e)
        return None
    if event is None:
        logger.debug("ignoring unknown event %s", name)
    return event


class EventBridge:
    """Long-lived subscription to one channel."""

    def __init__(
        self,
        client: APIClient,
        channel: str,
        *,
        reconnect_delay: float = 2.0,
    ):
        self.client = client
        self.channel = channel
        self.reconnect_delay = reconnect_delay
        self.connected = False

    @property
    def path(self) -> str:
        return f"/v1/channels/{self.channel}/events"

    async def _listen_once(self, handler: EventHandler) -> int:
        received = 0
        async with self.client.stream(self.path) as response:
            self.connected = True
            logger.info("subscribed to %s", self.channel)
            async for name, data in iter_sse(response.aiter_lines()):
                event = decode_frame(name, data)
                if event is None:
                    continue
                received += 1
                await handler(event)
        return received

    async def listen(
        self, handler: EventHandler, *, max_reconnects: int | None = None
    ) -> None:
        """Deliver events to ``handler`` until cancelled.

        Dropped connections are re-established after ``reconnect_delay``;
        events published while disconnected are lost.

        Args:
            handler: Awaited for every decoded event, in arrival order
            max_reconnects: Give up after this many reconnects (None: never)
        """
        attempts = 0
        while True:
            try:
                await self._listen_once(handler)
            except (httpx.RequestError, httpx.HTTPStatusError) as e:
                logger.warning("channel %s disconnected: %s", self.channel, e)
            finally:
                self.connected = False

            if max_reconnects is not None and attempts >= max_reconnects:
                return
            attempts += 1
            await asyncio.sleep(self.reconnect_delay)


class EventRouter:
    """Routes task events to the reconciler and shopping events to the shopping list."""

    def __init__(
        self,
        reconciler: TaskListReconciler | None = None,
        shopping: ShoppingListState | None = None,
        on_change: Callable[[RealtimeEvent], None] | None = None,
    ):
        self.reconciler = reconciler
        self.shopping = shopping
        self.on_change = on_change

    async def __call__(self, event: RealtimeEvent) -> None:
        changed = False
        if isinstance(event, TaskEvent):
            if self.reconciler is not None:
                await self.reconciler.dispatch(event)
                changed = True
        elif isinstance(event, ShoppingEvent):
            if self.shopping is not None:
                changed = self.shopping.handle_event(event)
        if changed and self.on_change is not None:
            self.on_change(event)
