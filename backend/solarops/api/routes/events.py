"""Server-sent event relay of the broadcast channel."""

import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from solarops.core.auth import AuthUser, require_auth
from solarops.core.config import get_settings
from solarops.db.redis import get_redis

router = APIRouter()

_HEARTBEAT_INTERVAL = 15  # seconds


@router.get("/stream")
async def stream_events(
    request: Request,
    user: AuthUser = Depends(require_auth),
    redis=Depends(get_redis),
):
    """Relay every broadcast envelope as an SSE ``data:`` line.

    Sends a heartbeat event every 15 seconds of silence to keep proxies from
    closing the connection. The stream ends when the client disconnects.
    """
    channel = get_settings().broadcast_channel

    async def event_generator():
        pubsub = redis.pubsub()
        await pubsub.subscribe(channel)
        last_heartbeat = time.monotonic()

        try:
            while True:
                if await request.is_disconnected():
                    return

                now = time.monotonic()
                if now - last_heartbeat >= _HEARTBEAT_INTERVAL:
                    yield "event: heartbeat\ndata: {}\n\n"
                    last_heartbeat = now

                # Blocks up to one second so disconnects and heartbeats are checked regularly
                message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)

                if message and message["type"] == "message":
                    yield f"data: {message['data']}\n\n"
                    last_heartbeat = time.monotonic()
        finally:
            await pubsub.unsubscribe(channel)
            await pubsub.aclose()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
