"""
Live-update channel: per-group broadcast of change notifications.

Each connected client holds a Subscription with its own queue; publishing
fans an event out to every subscriber of that group. Subscriptions are
released when the connection ends, and a group's entry disappears with its
last subscriber.
"""
import asyncio
import logging
from collections import defaultdict
from typing import Any, Dict, Optional, Set

logger = logging.getLogger(__name__)


class Subscription:
    """One listener's view of a group's events."""

    def __init__(self, bus: "GroupEventBus", group_id: int, max_queue: int):
        self.bus = bus
        self.group_id = group_id
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue)

    async def get(self, timeout: Optional[float] = None) -> Optional[Dict[str, Any]]:
        """Next event, or None when nothing arrives within timeout seconds."""
        try:
            return await asyncio.wait_for(self.queue.get(), timeout)
        except asyncio.TimeoutError:
            return None

    def close(self):
        self.bus.unsubscribe(self)

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()


class GroupEventBus:
    """Broadcast channel keyed by group id."""

    def __init__(self, max_queue: int = 100):
        self.max_queue = max_queue
        self._subscribers: Dict[int, Set[Subscription]] = defaultdict(set)

    def subscribe(self, group_id: int) -> Subscription:
        subscription = Subscription(self, group_id, self.max_queue)
        self._subscribers[group_id].add(subscription)
        logger.debug("Subscribed to group %s (%d listeners)", group_id, len(self._subscribers[group_id]))
        return subscription

    def unsubscribe(self, subscription: Subscription):
        listeners = self._subscribers.get(subscription.group_id)
        if not listeners:
            return
        listeners.discard(subscription)
        if not listeners:
            del self._subscribers[subscription.group_id]

    def subscriber_count(self, group_id: int) -> int:
        return len(self._subscribers.get(group_id, ()))

    def publish(self, group_id: int, event_type: str, **payload: Any) -> int:
        """Queue an event for every subscriber of the group; returns how many got it."""
        event = {"type": event_type, "group_id": group_id, **payload}
        delivered = 0
        for subscription in list(self._subscribers.get(group_id, ())):
            try:
                subscription.queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("Dropping %s event for a slow subscriber of group %s", event_type, group_id)
        return delivered


event_bus = GroupEventBus()
