"""
Tests for the per-group live-update channel.
"""
import asyncio
from splitledger.services.event_service import GroupEventBus


def test_publish_reaches_only_the_group_subscribers():
    async def scenario():
        bus = GroupEventBus()
        first = bus.subscribe(1)
        second = bus.subscribe(1)
        other = bus.subscribe(2)

        assert bus.publish(1, "expense:created", expense_id=7) == 2

        assert await first.get(timeout=1) == {"type": "expense:created", "group_id": 1, "expense_id": 7}
        assert await second.get(timeout=1) == {"type": "expense:created", "group_id": 1, "expense_id": 7}
        assert await other.get(timeout=0.01) is None

    asyncio.run(scenario())


def test_unsubscribe_on_context_exit():
    async def scenario():
        bus = GroupEventBus()
        async with bus.subscribe(3):
            assert bus.subscriber_count(3) == 1
        assert bus.subscriber_count(3) == 0
        assert bus.publish(3, "payment:created", payment_id=1) == 0

    asyncio.run(scenario())


def test_full_queue_drops_events_for_that_subscriber():
    async def scenario():
        bus = GroupEventBus(max_queue=1)
        slow = bus.subscribe(4)
        assert bus.publish(4, "expense:created") == 1
        assert bus.publish(4, "expense:deleted") == 0
        assert (await slow.get(timeout=1))["type"] == "expense:created"
        slow.close()
        slow.close()

    asyncio.run(scenario())
