"""
Stream gateway tests.

The gateway is driven directly through a recording transport: an SSE
response never ends on its own, so it cannot be read to completion over
an in-process HTTP client.
"""

import asyncio
import json

import pytest

from backend.app.models.events import HeartbeatEvent, StatsSnapshot, parse_event
from backend.app.services.entity_store import EntityStore
from backend.app.services.event_bus import TOPIC_LOCATIONS, TOPIC_PACKAGES, WILDCARD, EventBus
from backend.app.services.stats import compute_package_stats
from backend.app.services.status_engine import StatusEngine
from backend.app.services.stream_gateway import (
    GatewayRegistry,
    QueueTransport,
    StreamGateway,
    format_sse,
    sse_stream,
)


class RecordingTransport:
    def __init__(self):
        self.frames = []
        self.closed = False

    def send(self, frame):
        self.frames.append(frame)

    def close(self):
        self.closed = True

    def events(self):
        return [json.loads(frame[len("data: "):]) for frame in self.frames]

    def types(self):
        return [event["type"] for event in self.events()]


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def store():
    return EntityStore()


@pytest.fixture
def engine(store, bus):
    return StatusEngine(store, bus)


@pytest.fixture
def transport():
    return RecordingTransport()


def _gateway(bus, transport, store=None, **kwargs):
    kwargs.setdefault("heartbeat_interval", 0)
    stats = (lambda: compute_package_stats(store, bus)) if store is not None else StatsSnapshot
    return StreamGateway(bus, transport, stats_provider=stats, user_id="admin_user_456", **kwargs)


def test_format_sse_frame():
    frame = format_sse(HeartbeatEvent())

    assert frame.startswith("data: {")
    assert frame.endswith("}\n\n")
    assert parse_event(frame[len("data: "):].strip()).type == "heartbeat"


@pytest.mark.asyncio
async def test_open_sends_connection_then_stats(bus, store, engine, transport):
    engine.create_package({"trackingNumber": "SC1234567890"})
    gateway = _gateway(bus, transport, store)

    gateway.open()

    events = transport.events()
    assert [e["type"] for e in events] == ["connection", "stats"]
    assert events[0]["userId"] == "admin_user_456"
    assert events[0]["status"] == "connected"
    assert events[1]["data"]["total"] == 1
    assert events[1]["data"]["byStatus"]["pending"] == 1
    gateway.close()


@pytest.mark.asyncio
async def test_open_twice_is_an_error(bus, transport):
    gateway = _gateway(bus, transport)
    gateway.open()

    with pytest.raises(RuntimeError):
        gateway.open()
    gateway.close()


@pytest.mark.asyncio
async def test_package_events_are_forwarded_once(bus, store, engine, transport):
    engine.create_package({"trackingNumber": "SC1234567890"})
    gateway = _gateway(bus, transport, store)
    gateway.open()

    engine.update_status("SC1234567890", "in_transit", "weather")

    assert transport.types() == ["connection", "stats", "status_changed"]
    event = transport.events()[-1]
    assert event["trackingNumber"] == "SC1234567890"
    assert event["newStatus"] == "in_transit"
    gateway.close()


@pytest.mark.asyncio
async def test_wildcard_forwards_only_package_updates(bus, transport):
    gateway = _gateway(bus, transport)
    gateway.open()

    bus.publish(TOPIC_LOCATIONS, parse_event({"type": "location_deleted", "locationId": "loc_1"}))
    bus.publish("other", parse_event({
        "type": "package_deleted", "trackingNumber": "SC1", "packageId": "pkg_1",
    }))

    assert transport.types() == ["connection", "stats"]
    gateway.close()


@pytest.mark.asyncio
async def test_duplicate_publication_is_deduplicated(bus, store, engine, transport):
    package = engine.create_package({"trackingNumber": "SC1234567890"})
    gateway = _gateway(bus, transport, store)
    gateway.open()
    captured = []
    dispose = bus.subscribe(TOPIC_PACKAGES, captured.append)

    engine.update_package(package.id, {"notes": "Leave at door"})
    bus.publish(WILDCARD, captured[0])

    assert transport.types().count("package_updated") == 1
    dispose()
    gateway.close()


@pytest.mark.asyncio
async def test_duplicates_pass_when_dedupe_disabled(bus, store, engine, transport):
    package = engine.create_package({"trackingNumber": "SC1234567890"})
    gateway = _gateway(bus, transport, store, dedupe=False)
    gateway.open()
    captured = []
    bus.subscribe(TOPIC_PACKAGES, captured.append)

    engine.update_package(package.id, {"notes": "Leave at door"})
    bus.publish(WILDCARD, captured[0])

    # Topic and wildcard deliveries of one publication, plus the republication
    assert transport.types().count("package_updated") == 3
    gateway.close()


@pytest.mark.asyncio
async def test_heartbeat_is_sent_periodically(bus, transport):
    gateway = _gateway(bus, transport, heartbeat_interval=0.01)
    gateway.open()

    await asyncio.sleep(0.05)

    assert "heartbeat" in transport.types()
    assert gateway.heartbeat_running
    gateway.close()


@pytest.mark.asyncio
async def test_nothing_is_sent_after_close(bus, store, engine, transport):
    engine.create_package({"trackingNumber": "SC1234567890"})
    gateway = _gateway(bus, transport, store, heartbeat_interval=0.01)
    gateway.open()

    gateway.close()
    frames_at_close = len(transport.frames)
    engine.update_status("SC1234567890", "delivered")
    await asyncio.sleep(0.05)

    assert len(transport.frames) == frames_at_close
    assert not gateway.heartbeat_running
    assert transport.closed
    assert bus.subscriber_count() == 0


@pytest.mark.asyncio
async def test_close_is_idempotent(bus, transport):
    closed = []
    gateway = _gateway(bus, transport, on_close=closed.append)
    gateway.open()

    gateway.close()
    gateway.close()

    assert gateway.closed
    assert closed == [gateway]


@pytest.mark.asyncio
async def test_registry_closes_all_gateways(bus):
    registry = GatewayRegistry()
    gateways = []
    for _ in range(3):
        gateway = _gateway(bus, RecordingTransport(), on_close=registry.discard)
        registry.register(gateway)
        gateway.open()
        gateways.append(gateway)

    assert len(registry) == 3
    assert registry.close_all() == 3
    assert len(registry) == 0
    assert all(g.closed for g in gateways)
    assert bus.subscriber_count() == 0


@pytest.mark.asyncio
async def test_queue_transport_drops_when_full():
    transport = QueueTransport(maxsize=2)

    for n in range(5):
        transport.send(f"data: {n}\n\n")

    assert transport.dropped == 3
    transport.close()
    # Closing a full queue evicts the oldest frame to make room for the end marker
    assert [frame async for frame in transport.frames()] == ["data: 1\n\n"]


@pytest.mark.asyncio
async def test_sse_stream_yields_frames_and_closes_gateway(bus, store, engine):
    engine.create_package({"trackingNumber": "SC1234567890"})
    transport = QueueTransport(maxsize=16)
    registry = GatewayRegistry()
    gateway = _gateway(bus, transport, store, on_close=registry.discard)
    stream = sse_stream(gateway, transport, registry=registry)

    assert bus.subscriber_count() == 0
    first = await stream.__anext__()
    assert len(registry) == 1
    second = await stream.__anext__()
    engine.update_status("SC1234567890", "picked_up")
    third = await stream.__anext__()

    assert '"type":"connection"' in first
    assert '"type":"stats"' in second
    assert '"type":"status_changed"' in third

    await stream.aclose()
    assert gateway.closed
    assert transport.closed
    assert len(registry) == 0
    assert bus.subscriber_count() == 0


@pytest.mark.asyncio
async def test_unstarted_stream_holds_no_subscriptions(bus):
    registry = GatewayRegistry()
    transport = QueueTransport(maxsize=4)
    gateway = _gateway(bus, transport, heartbeat_interval=0.01, on_close=registry.discard)
    stream = sse_stream(gateway, transport, registry=registry)

    # Client gone before the body was ever iterated
    await stream.aclose()
    bus.publish(TOPIC_PACKAGES, HeartbeatEvent())

    assert bus.subscriber_count() == 0
    assert len(registry) == 0
    assert not gateway.heartbeat_running
    assert transport.dropped == 0


@pytest.mark.asyncio
async def test_queue_transport_accepts_frames_from_other_threads():
    transport = QueueTransport(maxsize=8)
    loop = asyncio.get_running_loop()

    await loop.run_in_executor(None, transport.send, "data: threaded\n\n")
    await loop.run_in_executor(None, transport.close)

    assert [frame async for frame in transport.frames()] == ["data: threaded\n\n"]
