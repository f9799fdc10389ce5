"""
Admin realtime stream (Server-Sent Events).

Each connection gets its own gateway, opened once the response body starts
streaming. The first two frames are the connection acknowledgement and a
stats snapshot; after that every package event is pushed as it happens,
with a heartbeat in between. Disconnecting
releases the gateway's subscriptions and heartbeat.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from backend.app.core.config import settings
from backend.app.core.guards import require_stream_admin
from backend.app.db.state import ShippingState, get_state
from backend.app.services.stream_gateway import SSE_HEADERS, QueueTransport, StreamGateway, sse_stream

router = APIRouter(prefix="/admin", tags=["Admin - Realtime"])


@router.get("/realtime")
async def realtime_stream(
    current_user: dict = Depends(require_stream_admin),
    state: ShippingState = Depends(get_state)
):
    transport = QueueTransport(maxsize=settings.sse_queue_size)
    gateway = StreamGateway(
        state.bus,
        transport,
        stats_provider=state.stats,
        user_id=current_user["user_id"],
        heartbeat_interval=settings.sse_heartbeat_seconds,
        dedupe=settings.dedupe_events,
        on_close=state.gateways.discard,
    )
    return StreamingResponse(
        sse_stream(gateway, transport, registry=state.gateways),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
