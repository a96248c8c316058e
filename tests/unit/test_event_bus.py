"""Unit tests for the EventBus dispatcher."""

import asyncio

import pytest

from podbuddy.errors import EventBusFull
from podbuddy.models.events import TranscriptEvent
from podbuddy.transcription.publisher import EventBus, OverflowPolicy


def event(text: str) -> TranscriptEvent:
    return TranscriptEvent(text=text, started_at=0.0)


@pytest.mark.unit
class TestEventBus:
    """Test cases for ordering, isolation and overflow."""

    @pytest.mark.asyncio
    async def test_delivers_in_order_to_subscribers_in_subscription_order(self, bus):
        calls = []
        bus.subscribe(lambda e: calls.append(("first", e.text)))
        bus.subscribe(lambda e: calls.append(("second", e.text)))
        bus.start()

        for text in ("a", "b", "c"):
            bus.trigger(event(text))
        await bus.join()

        assert calls == [
            ("first", "a"), ("second", "a"),
            ("first", "b"), ("second", "b"),
            ("first", "c"), ("second", "c"),
        ]
        await bus.close()

    @pytest.mark.asyncio
    async def test_does_not_replay_earlier_events(self, bus):
        early, late = [], []
        bus.subscribe(lambda e: early.append(e.text))
        bus.start()

        bus.trigger(event("before"))
        await bus.join()
        bus.subscribe(lambda e: late.append(e.text))
        bus.trigger(event("after"))
        await bus.join()

        assert early == ["before", "after"]
        assert late == ["after"]
        await bus.close()

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_stop_delivery(self, bus):
        received = []

        def explode(e):
            raise RuntimeError("subscriber bug")

        bus.subscribe(explode)
        bus.subscribe(lambda e: received.append(e.text))
        bus.start()

        bus.trigger(event("one"))
        bus.trigger(event("two"))
        await bus.join()

        assert received == ["one", "two"]
        await bus.close()

    @pytest.mark.asyncio
    async def test_trigger_does_not_wait_for_slow_subscribers(self, bus):
        bus.subscribe(lambda e: None)

        # Nothing dispatches until the loop starts; trigger still returns.
        for i in range(10):
            bus.trigger(event(str(i)))

        assert bus.pending == 10

    @pytest.mark.asyncio
    async def test_unsubscribe(self, bus):
        received = []
        callback = received.append
        bus.subscribe(callback)
        bus.start()

        bus.trigger(event("kept"))
        await bus.join()
        bus.unsubscribe(callback)
        bus.trigger(event("ignored"))
        await bus.join()

        assert [e.text for e in received] == ["kept"]
        await bus.close()

    @pytest.mark.asyncio
    async def test_drop_oldest_when_full(self):
        bus = EventBus(topic="transcript_drop", max_size=2, overflow=OverflowPolicy.DROP_OLDEST)
        received = []
        bus.subscribe(lambda e: received.append(e.text))

        for text in ("a", "b", "c"):
            await bus.publish(event(text))
        bus.start()
        await bus.join()

        assert received == ["b", "c"]
        assert bus.dropped == 1
        await bus.close()

    @pytest.mark.asyncio
    async def test_block_policy_rejects_sync_trigger_when_full(self):
        bus = EventBus(topic="transcript_full", max_size=1, overflow=OverflowPolicy.BLOCK)
        bus.trigger(event("a"))

        with pytest.raises(EventBusFull):
            bus.trigger(event("b"))

    @pytest.mark.asyncio
    async def test_block_policy_publish_waits_and_keeps_order(self):
        bus = EventBus(topic="transcript_block", max_size=1, overflow=OverflowPolicy.BLOCK)
        received = []
        bus.subscribe(lambda e: received.append(e.text))

        publishers = [asyncio.create_task(bus.publish(event(str(i)))) for i in range(5)]
        await asyncio.sleep(0.01)
        assert not all(p.done() for p in publishers)

        bus.start()
        await asyncio.gather(*publishers)
        await bus.join()

        assert received == ["0", "1", "2", "3", "4"]
        await bus.close()

    @pytest.mark.asyncio
    async def test_close_is_safe_without_start(self, bus):
        await bus.close()
