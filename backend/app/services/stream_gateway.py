"""
Server-Sent-Events gateway: one instance per connected admin client.

The gateway owns three resources: two bus subscriptions and a heartbeat
task. They are acquired in ``open()`` and released together by ``close()``,
which runs exactly once no matter how many times, or from where, it is
called (client disconnect, server shutdown, tests).

Bus handlers never block. Frames go into the transport's bounded queue;
when a slow client lets it fill up, new frames are dropped for that client
only.
"""

import asyncio
import logging
import threading
from collections import OrderedDict
from typing import AsyncIterator, Callable, List, Optional, Protocol, Set

from backend.app.models.events import ConnectionEvent, HeartbeatEvent, StatsEvent, StatsSnapshot
from backend.app.services.event_bus import TOPIC_PACKAGES, WILDCARD, EventBus, Unsubscribe

logger = logging.getLogger("swiftcourier.realtime")

# Event types forwarded from the wildcard subscription
WILDCARD_FORWARDED_TYPES = frozenset({"package_updated", "status_changed"})

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

_CLOSE = object()


def format_sse(event) -> str:
    """Encode one event as an SSE ``data:`` frame."""
    return f"data: {event.model_dump_json(by_alias=True)}\n\n"


def _on_loop(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


class Transport(Protocol):
    def send(self, frame: str) -> None: ...

    def close(self) -> None: ...


class QueueTransport:
    """
    Bounded frame queue drained by the HTTP response.

    Must be created inside the event loop that serves the response. ``send``
    and ``close`` may be called from any thread.
    """

    def __init__(self, maxsize: int = 256):
        self._loop = asyncio.get_running_loop()
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def _call(self, fn, *args) -> None:
        if _on_loop(self._loop):
            fn(*args)
        elif not self._loop.is_closed():
            self._loop.call_soon_threadsafe(fn, *args)

    def _put(self, frame: str) -> None:
        if self._closed:
            return
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning("SSE client too slow, dropped frame (%d dropped so far)", self.dropped)

    def _put_sentinel(self) -> None:
        while True:
            try:
                self._queue.put_nowait(_CLOSE)
                return
            except asyncio.QueueFull:
                self._queue.get_nowait()

    def send(self, frame: str) -> None:
        if self._closed:
            return
        self._call(self._put, frame)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._call(self._put_sentinel)

    async def frames(self) -> AsyncIterator[str]:
        """Yield queued frames until the transport is closed."""
        while True:
            item = await self._queue.get()
            if item is _CLOSE:
                return
            yield item


class StreamGateway:
    """Forwards bus events to one push connection."""

    def __init__(
        self,
        bus: EventBus,
        transport: Transport,
        stats_provider: Callable[[], StatsSnapshot],
        user_id: str,
        heartbeat_interval: float = 30.0,
        dedupe: bool = True,
        dedupe_window: int = 512,
        on_close: Optional[Callable[["StreamGateway"], None]] = None,
    ):
        self._bus = bus
        self._transport = transport
        self._stats_provider = stats_provider
        self.user_id = user_id
        self._heartbeat_interval = heartbeat_interval
        self._dedupe = dedupe
        self._dedupe_window = dedupe_window
        self._on_close = on_close

        self._lock = threading.Lock()
        self._opened = False
        self._closed = False
        self._seen: "OrderedDict[str, None]" = OrderedDict()
        self._unsubscribers: List[Unsubscribe] = []
        self._heartbeat_task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def heartbeat_running(self) -> bool:
        return self._heartbeat_task is not None and not self._heartbeat_task.done()

    def open(self) -> None:
        """
        Send the connection and stats frames, subscribe, start the heartbeat.

        Must be called from inside the serving event loop.
        """
        if self._opened:
            raise RuntimeError("StreamGateway.open() called twice")
        self._opened = True
        self._loop = asyncio.get_running_loop()

        self._send(ConnectionEvent(user_id=self.user_id))
        self._send(StatsEvent(data=self._stats_provider()))

        self._unsubscribers = [
            self._bus.subscribe(TOPIC_PACKAGES, self._on_package_event),
            self._bus.subscribe(WILDCARD, self._on_wildcard_event),
        ]
        if self._heartbeat_interval > 0:
            self._heartbeat_task = self._loop.create_task(self._heartbeat())
        logger.info("Realtime stream opened for %s", self.user_id)

    def _on_package_event(self, event) -> None:
        self._forward(event)

    def _on_wildcard_event(self, event) -> None:
        if getattr(event, "type", None) in WILDCARD_FORWARDED_TYPES:
            self._forward(event)

    def _forward(self, event) -> None:
        event_id = getattr(event, "id", None)
        with self._lock:
            if self._closed:
                return
            if self._dedupe and event_id:
                if event_id in self._seen:
                    return
                self._seen[event_id] = None
                if len(self._seen) > self._dedupe_window:
                    self._seen.popitem(last=False)
        self._send(event)

    def _send(self, event) -> None:
        if self._closed:
            return
        self._transport.send(format_sse(event))

    async def _heartbeat(self) -> None:
        while not self._closed:
            await asyncio.sleep(self._heartbeat_interval)
            if self._closed:
                return
            self._send(HeartbeatEvent())

    def close(self) -> None:
        """Release subscriptions, heartbeat and transport. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True

        task = self._heartbeat_task
        if task is not None and not task.done():
            if self._loop is None or _on_loop(self._loop):
                task.cancel()
            elif not self._loop.is_closed():
                self._loop.call_soon_threadsafe(task.cancel)

        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

        self._transport.close()
        logger.info("Realtime stream closed for %s", self.user_id)

        if self._on_close is not None:
            self._on_close(self)


class GatewayRegistry:
    """Live gateways, so shutdown can close every open stream."""

    def __init__(self):
        self._lock = threading.Lock()
        self._gateways: Set[StreamGateway] = set()

    def register(self, gateway: StreamGateway) -> None:
        with self._lock:
            self._gateways.add(gateway)

    def discard(self, gateway: StreamGateway) -> None:
        with self._lock:
            self._gateways.discard(gateway)

    def close_all(self) -> int:
        with self._lock:
            gateways = list(self._gateways)
        for gateway in gateways:
            gateway.close()
        return len(gateways)

    def __len__(self) -> int:
        with self._lock:
            return len(self._gateways)


async def sse_stream(
    gateway: StreamGateway,
    transport: QueueTransport,
    registry: Optional[GatewayRegistry] = None,
) -> AsyncIterator[str]:
    """
    Response body for one client.

    The gateway is registered and opened on first iteration, so a response
    that is never started holds no subscriptions. Leaving the iterator
    closes the gateway.
    """
    try:
        if registry is not None:
            registry.register(gateway)
        gateway.open()
        async for frame in transport.frames():
            yield frame
    finally:
        gateway.close()
