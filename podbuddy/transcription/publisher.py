"""Ordered, decoupled publish/subscribe for transcript events.

Producers enqueue events on a bounded FIFO and return immediately (or, under
the BLOCK policy, suspend only their own coroutine). A single dispatch task
pops events one at a time and fans each one out through a private pypubsub
publisher, so every subscriber sees every event in the order it was
enqueued, and a slow or failing subscriber never reaches back into the
producer.
"""

import asyncio
import contextlib
import logging
from enum import Enum
from typing import Callable, List, Optional

from pubsub.core import Publisher

from ..errors import EventBusFull
from ..models.events import TranscriptEvent

logger = logging.getLogger(__name__)

Subscriber = Callable[[TranscriptEvent], None]


class OverflowPolicy(str, Enum):
    """What happens when an event arrives at a full bus."""
    BLOCK = "block"
    DROP_OLDEST = "drop_oldest"


def _event_spec(event):
    """Message data specification of a bus topic: one `event` argument."""


class _Subscription:
    """Keeps a strong reference to a callback and contains its failures."""

    def __init__(self, callback: Subscriber, topic: str):
        self.callback = callback
        self.topic = topic

    def __call__(self, event):
        try:
            self.callback(event)
        except Exception:
            logger.exception(f"Subscriber {self.callback!r} failed on {self.topic} event")


class EventBus:
    """Serial dispatcher fanning one ordered event stream out to many subscribers."""

    def __init__(self,
                 topic: str = "transcript",
                 max_size: int = 1000,
                 overflow: OverflowPolicy = OverflowPolicy.BLOCK):
        """Initialize the bus.

        Args:
            topic: pypubsub topic name used for fan-out
            max_size: Queue capacity; 0 means unbounded
            overflow: Policy applied when the queue is full
        """
        self.topic = topic
        self.max_size = max_size
        self.overflow = OverflowPolicy(overflow)
        self.dropped = 0

        self._publisher = Publisher()
        self._publisher.getTopicMgr().getOrCreateTopic(topic, _event_spec)
        self._subscriptions: List[_Subscription] = []
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_size)
        self._put_lock = asyncio.Lock()
        self._dispatch_task: Optional[asyncio.Task] = None

        logger.info(f"EventBus initialized with topic: {topic} (max_size={max_size}, overflow={self.overflow.value})")

    def subscribe(self, callback: Subscriber) -> None:
        """Register a callback; it receives events enqueued from now on."""
        subscription = _Subscription(callback, self.topic)
        self._subscriptions.append(subscription)
        self._publisher.subscribe(subscription, self.topic)
        logger.debug(f"Subscribed {callback!r} to {self.topic}")

    def unsubscribe(self, callback: Subscriber) -> None:
        for subscription in list(self._subscriptions):
            if subscription.callback is callback:
                self._publisher.unsubscribe(subscription, self.topic)
                self._subscriptions.remove(subscription)

    def trigger(self, event: TranscriptEvent) -> None:
        """Enqueue an event without waiting.

        Raises:
            EventBusFull: the queue is full and the policy is BLOCK
        """
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            if self.overflow is OverflowPolicy.BLOCK:
                raise EventBusFull(f"{self.topic} bus is full ({self.max_size} events)")
            self._drop_oldest()
            self._queue.put_nowait(event)

    async def publish(self, event: TranscriptEvent) -> None:
        """Enqueue an event, waiting for space under the BLOCK policy.

        Waiting publishers are admitted in arrival order.
        """
        if self.overflow is OverflowPolicy.DROP_OLDEST:
            self.trigger(event)
            return
        async with self._put_lock:
            await self._queue.put(event)

    def _drop_oldest(self) -> None:
        dropped = self._queue.get_nowait()
        self._queue.task_done()
        self.dropped += 1
        logger.warning(f"{self.topic} bus full; dropped oldest event: {dropped.text[:50]!r} "
                       f"({self.dropped} dropped so far)")

    def start(self) -> asyncio.Task:
        """Start the dispatch loop on the running event loop."""
        if self._dispatch_task is None or self._dispatch_task.done():
            self._dispatch_task = asyncio.create_task(self._dispatch_loop(), name=f"event-bus:{self.topic}")
        return self._dispatch_task

    async def _dispatch_loop(self) -> None:
        logger.debug(f"Dispatch loop for {self.topic} starting")
        while True:
            event = await self._queue.get()
            try:
                self._publisher.sendMessage(self.topic, event=event)
            except Exception:
                logger.exception(f"Failed to dispatch {self.topic} event")
            finally:
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every event enqueued so far has been dispatched."""
        await self._queue.join()

    async def close(self) -> None:
        """Stop the dispatch loop. Undispatched events are discarded."""
        if self._dispatch_task is None:
            return
        self._dispatch_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._dispatch_task
        self._dispatch_task = None
        logger.debug(f"Dispatch loop for {self.topic} stopped")

    @property
    def pending(self) -> int:
        return self._queue.qsize()
