"""
Event channel - Push purchaser-info updates from the SDK to the host shell.

Push only: no acknowledgement, no flow control. Consumers should treat each
event as the latest snapshot.
"""

import asyncio
from typing import Any, Protocol

from structlog import get_logger

from purchases_bridge.models.api import ChannelEvent
from purchases_bridge.models.sdk import PurchaserInfo
from purchases_bridge.observability.metrics import metrics
from purchases_bridge.services.mappers import map_purchaser_info

logger = get_logger(__name__)

PURCHASER_INFO_UPDATED = "Purchases-PurchaserInfoUpdated"


class EventSink(Protocol):
    """Receiver of outbound channel events. Must accept calls from any thread."""

    def send_event(self, name: str, arguments: dict[str, Any] | None) -> None: ...


class EventHub:
    """
    Fan-out event sink for WebSocket subscribers.

    Each subscriber owns an unbounded queue. Events published from a foreign
    thread are handed to the bound event loop.
    """

    def __init__(self) -> None:
        self._subscribers: set[asyncio.Queue[ChannelEvent]] = set()
        self._loop: asyncio.AbstractEventLoop | None = None

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        """Attach the loop that owns the subscriber queues."""
        self._loop = loop

    def subscribe(self) -> "asyncio.Queue[ChannelEvent]":
        queue: asyncio.Queue[ChannelEvent] = asyncio.Queue()
        self._subscribers.add(queue)
        logger.info("event_subscriber_added", subscribers=len(self._subscribers))
        return queue

    def unsubscribe(self, queue: "asyncio.Queue[ChannelEvent]") -> None:
        self._subscribers.discard(queue)
        logger.info("event_subscriber_removed", subscribers=len(self._subscribers))

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def send_event(self, name: str, arguments: dict[str, Any] | None) -> None:
        event = ChannelEvent(event=name, arguments=arguments)
        if self._loop is None or self._loop.is_closed():
            self._publish(event)
            return
        self._loop.call_soon_threadsafe(self._publish, event)

    def _publish(self, event: ChannelEvent) -> None:
        for queue in list(self._subscribers):
            queue.put_nowait(event)
        logger.debug("event_published", event_name=event.event, subscribers=len(self._subscribers))


class PurchaserInfoForwarder:
    """
    Update listener installed on the SDK at setup.

    After detach() every push is dropped.
    """

    def __init__(self, sink: EventSink) -> None:
        self._sink = sink
        self._attached = True

    @property
    def attached(self) -> bool:
        return self._attached

    def detach(self) -> None:
        self._attached = False

    def __call__(self, purchaser_info: PurchaserInfo) -> None:
        if not self._attached:
            logger.info("purchaser_info_update_dropped", event_name=PURCHASER_INFO_UPDATED)
            metrics.record_event(PURCHASER_INFO_UPDATED, sent=False)
            return

        self._sink.send_event(PURCHASER_INFO_UPDATED, map_purchaser_info(purchaser_info))
        metrics.record_event(PURCHASER_INFO_UPDATED, sent=True)
        logger.info("purchaser_info_update_sent", event_name=PURCHASER_INFO_UPDATED)
