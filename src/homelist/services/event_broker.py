"""In-process fan-out of channel events to server-sent-event subscribers.

Every subscriber owns an unbounded asyncio.Queue; publishing pushes the
event into the queues of every subscriber of the channel without awaiting.
"""

from __future__ import annotations

import asyncio
import json
from collections import defaultdict
from collections.abc import AsyncIterator

from homelist.models.events import RealtimeEvent
from homelist.utils.logger import get_logger

KEEPALIVE_SECONDS = 15.0


def format_sse(event: RealtimeEvent) -> str:
    """Render an event as one SSE frame."""
    return f"event: {event.name}\ndata: {json.dumps(event.to_payload())}\n\n"


class EventBroker:
    """Channel -> subscriber queues."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[asyncio.Queue[RealtimeEvent]]] = defaultdict(list)
        self.logger = get_logger("events")

    def subscribe(self, channel: str) -> asyncio.Queue[RealtimeEvent]:
        queue: asyncio.Queue[RealtimeEvent] = asyncio.Queue()
        self._subscribers[channel].append(queue)
        self.logger.debug(
            "subscriber joined %s (%d total)", channel, len(self._subscribers[channel])
        )
        return queue

    def unsubscribe(self, channel: str, queue: asyncio.Queue[RealtimeEvent]) -> None:
        queues = self._subscribers.get(channel, [])
        if queue in queues:
            queues.remove(queue)
        if not queues:
            self._subscribers.pop(channel, None)

    def subscriber_count(self, channel: str) -> int:
        return len(self._subscribers.get(channel, []))

    def publish(self, channel: str, event: RealtimeEvent) -> int:
        """Deliver an event to every current subscriber of a channel.

        Returns:
            Number of subscribers reached
        """
        queues = list(self._subscribers.get(channel, []))
        for queue in queues:
            queue.put_nowait(event)
        self.logger.info("published %s on %s to %d subscriber(s)", event.name, channel, len(queues))
        return len(queues)

    async def stream(
        self, channel: str, *, keepalive: float = KEEPALIVE_SECONDS
    ) -> AsyncIterator[str]:
        """Yield SSE frames for a channel until the consumer stops iterating.

        A comment frame is sent whenever no event arrives for ``keepalive``
        seconds so dead connections are noticed.
        """
        queue = self.subscribe(channel)
        try:
            while True:
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=keepalive)
                except TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                yield format_sse(event)
        finally:
            self.unsubscribe(channel, queue)
