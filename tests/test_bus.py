"""Unit tests for EventBus."""

import asyncio
import pytest
from communication.bus import EventBus
from internal.errors import BusError


class TestEventBus:
    """Tests for EventBus class."""

    async def test_bus_creation(self):
        """EventBus initializes with default queue size."""
        bus = EventBus(queue_size=10)
        assert bus._queue_size == 10
        assert len(bus._subscribers) == 0

    async def test_subscribe(self):
        """Subscriber is added to bus."""
        bus = EventBus(queue_size=10)
        sub = await bus.subscribe("viewer")
        assert "viewer" in bus._subscribers
        assert sub.name == "viewer"

    async def test_subscribe_twice_returns_same(self):
        """Re-subscribing under the same name reuses the subscriber."""
        bus = EventBus(queue_size=10)
        first = await bus.subscribe("viewer")
        second = await bus.subscribe("viewer")
        assert first is second

    async def test_subscribe_custom_queue_size(self):
        """Subscriber can have custom queue size."""
        bus = EventBus(queue_size=10)
        sub = await bus.subscribe("viewer", max_queue_size=50)
        assert sub.queue.maxsize == 50

    async def test_subscriber_limit(self):
        """Subscribing past the cap raises BusError."""
        bus = EventBus(queue_size=10, max_subscribers=1)
        await bus.subscribe("viewer-1")
        with pytest.raises(BusError) as excinfo:
            await bus.subscribe("viewer-2")
        assert excinfo.value.context["subscriber_name"] == "viewer-2"

    async def test_unsubscribe(self):
        """Subscriber is removed from bus."""
        bus = EventBus(queue_size=10)
        await bus.subscribe("viewer")
        assert await bus.unsubscribe("viewer") is True
        assert "viewer" not in bus._subscribers

    async def test_unsubscribe_nonexistent(self):
        """Unsubscribing nonexistent client doesn't raise."""
        bus = EventBus(queue_size=10)
        assert await bus.unsubscribe("nonexistent") is False

    async def test_publish_to_subscriber(self):
        """Message is delivered to subscriber."""
        bus = EventBus(queue_size=10)
        sub = await bus.subscribe("viewer")

        await bus.publish({"kind": "reflection", "rays": 1})

        msg = await asyncio.wait_for(sub.queue.get(), timeout=1.0)
        assert msg["kind"] == "reflection"
        assert msg["rays"] == 1

    async def test_topic_filter(self):
        """Subscribers with topics only receive matching items."""
        bus = EventBus(queue_size=10)
        frames = await bus.subscribe("frames", topics=["frame"])
        events = await bus.subscribe("events", topics=["event"])
        everything = await bus.subscribe("all")

        await bus.publish({"kind": "wall_hit"}, topic="event")

        assert frames.queue.empty()
        assert events.queue.qsize() == 1
        assert everything.queue.qsize() == 1

    async def test_publish_returns_delivery_count(self):
        """Publish returns number of successful deliveries."""
        bus = EventBus(queue_size=10)
        await bus.subscribe("viewer-1")
        await bus.subscribe("viewer-2")

        count = await bus.publish({"kind": "launched"})
        assert count == 2

    async def test_queue_overflow_drops_message(self):
        """Full queue drops new messages."""
        bus = EventBus(queue_size=2)
        sub = await bus.subscribe("slow-viewer", max_queue_size=2)

        await bus.publish({"tick": 1})
        await bus.publish({"tick": 2})
        await bus.publish({"tick": 3})

        assert sub.dropped == 1
        assert bus.get_stats()["total_dropped"] == 1

    async def test_conflated_topic_keeps_latest(self):
        """A slow viewer of a conflated topic ends on the newest frame."""
        bus = EventBus(queue_size=2, conflate=("frame",))
        sub = await bus.subscribe("slow-viewer", topics=["frame"])

        for tick in range(1, 5):
            assert await bus.publish({"tick": tick}, topic="frame") == 1

        queued = [sub.queue.get_nowait()["tick"] for _ in range(sub.queue.qsize())]
        assert queued == [3, 4]
        assert sub.dropped == 2
        assert bus.get_stats()["total_dropped"] == 2

    async def test_conflation_is_per_topic(self):
        bus = EventBus(queue_size=1, conflate=("frame",))
        sub = await bus.subscribe("viewer")
        await bus.publish({"kind": "launched"}, topic="event")
        assert await bus.publish({"kind": "wall_hit"}, topic="event") == 0
        assert sub.queue.get_nowait()["kind"] == "launched"

    async def test_get_stats(self):
        """Bus returns statistics."""
        bus = EventBus(queue_size=10)
        await bus.subscribe("viewer")
        await bus.publish({"kind": "launched"})

        stats = bus.get_stats()
        assert stats["subscriber_count"] == 1
        assert stats["total_published"] == 1
        assert stats["total_delivered"] == 1

    async def test_get_subscriber_info(self):
        """Bus returns subscriber details."""
        bus = EventBus(queue_size=10)
        sub = await bus.subscribe("viewer", topics=["frame"])
        await bus.publish({"tick": 1}, topic="frame")
        await sub.queue.get()

        info = await bus.get_subscriber_info()
        assert len(info) == 1
        assert info[0]["name"] == "viewer"
        assert info[0]["topics"] == ["frame"]
        assert info[0]["received"] == 1
        assert info[0]["queued"] == 0
