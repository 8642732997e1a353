"""In-process live feed of reservation changes.

A view subscribes to one day; every commit or cancellation on that day
pushes a notification to each subscriber, which then re-reads the store and
recomputes availability. Subscriptions are scoped: leaving the
`async with feed.subscribe(day)` block always unsubscribes, and a view that
moves to another day opens a new subscription for it.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date

logger = logging.getLogger(__name__)


class Subscription:
    """Async iterator over change notifications for a single day."""

    def __init__(self, day: date):
        self.day = day
        self._queue: asyncio.Queue[date] = asyncio.Queue()

    def notify(self) -> None:
        # Coalesce bursts: one pending notification is enough to trigger a re-read
        if self._queue.empty():
            self._queue.put_nowait(self.day)

    @property
    def pending(self) -> bool:
        return not self._queue.empty()

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> date:
        return await self._queue.get()


class ReservationFeed:
    def __init__(self) -> None:
        self._subscribers: dict[date, set[Subscription]] = defaultdict(set)

    def subscriber_count(self, day: date) -> int:
        return len(self._subscribers.get(day, ()))

    def publish(self, day: date) -> None:
        """Notify every subscriber of day that its reservations changed."""
        for subscription in list(self._subscribers.get(day, ())):
            subscription.notify()

    @asynccontextmanager
    async def subscribe(self, day: date) -> AsyncIterator[Subscription]:
        subscription = Subscription(day)
        self._subscribers[day].add(subscription)
        logger.debug("Subscribed to reservations on %s", day)
        try:
            yield subscription
        finally:
            subscribers = self._subscribers.get(day)
            if subscribers is not None:
                subscribers.discard(subscription)
                if not subscribers:
                    del self._subscribers[day]
            logger.debug("Unsubscribed from reservations on %s", day)


feed = ReservationFeed()
