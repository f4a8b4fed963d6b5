"""In-process, per-room event stream.

Each subscription owns an ``asyncio.Queue``; ``publish`` fans an event out
to every live subscription of the event's room. A subscription is both an
async context manager and an async iterator, and leaving the context
always unregisters it, so a disconnected client never keeps receiving
events.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import AsyncIterator

import structlog

from movie_match.events.types import RoomEvent

logger = structlog.get_logger()

_CLOSED = object()


class RoomSubscription:
    """A cancellable stream of events for one room."""

    def __init__(self, bus: RoomEventBus, room_id: str) -> None:
        self._bus = bus
        self.room_id = room_id
        self._queue: asyncio.Queue = asyncio.Queue()
        self.closed = False

    def _deliver(self, event: RoomEvent) -> None:
        if not self.closed:
            self._queue.put_nowait(event)

    def close(self) -> None:
        """Unregister from the bus and end iteration. Safe to call twice."""
        if self.closed:
            return
        self.closed = True
        self._bus._unregister(self)
        self._queue.put_nowait(_CLOSED)

    async def get(self) -> RoomEvent | None:
        """Wait for the next event, or ``None`` once the subscription is closed."""
        if self.closed and self._queue.empty():
            return None
        item = await self._queue.get()
        if item is _CLOSED:
            return None
        return item

    def __aiter__(self) -> AsyncIterator[RoomEvent]:
        return self

    async def __anext__(self) -> RoomEvent:
        event = await self.get()
        if event is None:
            raise StopAsyncIteration
        return event

    async def __aenter__(self) -> RoomSubscription:
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class RoomEventBus:
    """Fan-out of typed room events to live subscriptions.

    Single-process only: subscribers in another worker process will not
    see events published here.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, set[RoomSubscription]] = defaultdict(set)

    def subscribe(self, room_id: str) -> RoomSubscription:
        subscription = RoomSubscription(self, room_id)
        self._subscriptions[room_id].add(subscription)
        logger.debug("room_subscribed", room_id=room_id, subscribers=self.subscriber_count(room_id))
        return subscription

    def publish(self, event: RoomEvent) -> int:
        """Deliver ``event`` to every subscription of its room.

        Returns:
            Number of subscriptions the event was delivered to.
        """
        subscriptions = list(self._subscriptions.get(event.room_id, ()))
        for subscription in subscriptions:
            subscription._deliver(event)
        logger.debug(
            "room_event_published",
            room_id=event.room_id,
            event_type=event.type,
            delivered=len(subscriptions),
        )
        return len(subscriptions)

    def subscriber_count(self, room_id: str) -> int:
        return len(self._subscriptions.get(room_id, ()))

    def _unregister(self, subscription: RoomSubscription) -> None:
        subscriptions = self._subscriptions.get(subscription.room_id)
        if subscriptions is None:
            return
        subscriptions.discard(subscription)
        if not subscriptions:
            del self._subscriptions[subscription.room_id]
