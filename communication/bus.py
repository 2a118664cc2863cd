import asyncio
import time
from internal.errors import BusError
from internal.logging import get_logger

class Subscriber:
    __slots__ = ("name", "queue", "topics", "created_at", "received", "dropped")

    def __init__(self, name, queue, topics=None):
        self.name = name
        self.queue = queue
        self.topics = topics or set()
        self.created_at = time.time()
        self.received = 0
        self.dropped = 0

    def wants(self, topic):
        return not self.topics or topic in self.topics

    def offer(self, item, replace_oldest=False):
        """Queue ``item``; returns False when it (or an evicted item) was lost."""
        try:
            self.queue.put_nowait(item)
            self.received += 1
            return True
        except asyncio.QueueFull:
            self.dropped += 1
            if not replace_oldest:
                return False
        self.queue.get_nowait()
        self.queue.put_nowait(item)
        self.received += 1
        return False

class EventBus:
    """Copy-on-write pub/sub between the frame loop, viewers and the event log.

    Publish never blocks and takes no lock. On topics listed in ``conflate`` a
    full subscriber queue gives up its oldest item for the new one, so a slow
    viewer skips frames but always ends on the latest. Elsewhere the new item
    is the one lost.
    """

    def __init__(self, queue_size=50, max_subscribers=64, conflate=()):
        self._lock = asyncio.Lock()
        self._subscribers = {}
        self._snapshot = ()
        self._queue_size = queue_size
        self._max_subscribers = max_subscribers
        self._conflate = frozenset(conflate)
        self._log = get_logger(component="bus")
        self.total_published = 0
        self.total_delivered = 0
        self.total_dropped = 0

    async def subscribe(self, name, max_queue_size=None, topics=None):
        async with self._lock:
            existing = self._subscribers.get(name)
            if existing is not None:
                return existing
            if len(self._subscribers) >= self._max_subscribers:
                raise BusError("subscriber limit reached", subscriber_name=name,
                               context={"limit": self._max_subscribers})
            queue = asyncio.Queue(maxsize=max_queue_size or self._queue_size)
            subscriber = Subscriber(name, queue, set(topics or ()))
            self._subscribers[name] = subscriber
            self._snapshot = tuple(self._subscribers.values())
        self._log.info("subscribed", name=name, topics=sorted(subscriber.topics))
        return subscriber

    async def unsubscribe(self, name):
        async with self._lock:
            if self._subscribers.pop(name, None) is None:
                return False
            self._snapshot = tuple(self._subscribers.values())
        self._log.info("unsubscribed", name=name)
        return True

    async def publish(self, item, topic=""):
        """Fan ``item`` out to every subscriber of ``topic``. Returns how many took it."""
        replace = topic in self._conflate
        delivered = 0
        for subscriber in self._snapshot:
            if not subscriber.wants(topic):
                continue
            if subscriber.offer(item, replace_oldest=replace):
                delivered += 1
            else:
                self.total_dropped += 1
                if replace:
                    delivered += 1
        self.total_published += 1
        self.total_delivered += delivered
        return delivered

    def get_stats(self):
        return {
            "subscriber_count": len(self._snapshot),
            "total_published": self.total_published,
            "total_delivered": self.total_delivered,
            "total_dropped": self.total_dropped,
            "conflated_topics": sorted(self._conflate),
        }

    async def get_subscriber_info(self):
        return [{"name": subscriber.name,
                 "topics": sorted(subscriber.topics),
                 "queued": subscriber.queue.qsize(),
                 "received": subscriber.received,
                 "dropped": subscriber.dropped,
                 "age_s": round(time.time() - subscriber.created_at, 1)}
                for subscriber in self._snapshot]
