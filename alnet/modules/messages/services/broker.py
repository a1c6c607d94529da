"""
In-process fan-out of new messages to live conversation streams.

Publishers run in worker threads (sync route handlers); every subscriber
belongs to an event loop and owns a bounded queue. Items are handed over
with loop.call_soon_threadsafe. A subscriber whose queue overflows is
closed: its stream ends and the client reconnects with Last-Event-ID,
replaying what it missed from the database.
"""
import asyncio
import logging
import threading
from typing import Any, Dict, Optional, Set

from alnet.core.config import settings

logger = logging.getLogger(__name__)

# Queued after an overflow to wake the consumer up
CLOSED = object()


class Subscription:
    def __init__(self, key: str, loop: asyncio.AbstractEventLoop, maxsize: int):
        self.key = key
        self.loop = loop
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def offer(self, item: Any) -> None:
        """Runs on the subscriber's loop"""
        if self.closed:
            return
        try:
            self.queue.put_nowait(item)
        except asyncio.QueueFull:
            logger.warning(f"Subscriber on {self.key} fell behind, closing its stream")
            self.close()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        # Make room for the sentinel; dropped items are replayed on reconnect
        while not self.queue.empty():
            self.queue.get_nowait()
        self.queue.put_nowait(CLOSED)

    async def get(self, timeout: Optional[float] = None) -> Any:
        """Next item, CLOSED after an overflow, or None on timeout"""
        try:
            return await asyncio.wait_for(self.queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None


class MessageBroker:
    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._lock = threading.Lock()
        self._subscribers: Dict[str, Set[Subscription]] = {}

    def subscribe(self, key: str, loop: Optional[asyncio.AbstractEventLoop] = None) -> Subscription:
        subscription = Subscription(key, loop or asyncio.get_running_loop(), self.queue_size)
        with self._lock:
            self._subscribers.setdefault(key, set()).add(subscription)
        logger.debug(f"Subscribed to {key}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscribers.get(subscription.key)
            if subscribers is None:
                return
            subscribers.discard(subscription)
            if not subscribers:
                del self._subscribers[subscription.key]
        logger.debug(f"Unsubscribed from {subscription.key}")

    def subscriber_count(self, key: Optional[str] = None) -> int:
        with self._lock:
            if key is not None:
                return len(self._subscribers.get(key, ()))
            return sum(len(subs) for subs in self._subscribers.values())

    def publish(self, key: str, item: Any) -> int:
        """Hand an item to every subscriber of key; safe to call from any thread"""
        with self._lock:
            subscribers = list(self._subscribers.get(key, ()))

        delivered = 0
        for subscription in subscribers:
            try:
                subscription.loop.call_soon_threadsafe(subscription.offer, item)
                delivered += 1
            except RuntimeError:
                # The subscriber's loop is gone
                self.unsubscribe(subscription)
        return delivered


message_broker = MessageBroker(queue_size=settings.STREAM_QUEUE_SIZE)
