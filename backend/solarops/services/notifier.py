"""Best-effort broadcast of project change events over Redis Pub/Sub."""

import json
from datetime import UTC, datetime
from typing import Any

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from solarops.core.config import get_settings
from solarops.core.exceptions import NotificationError

logger = structlog.get_logger(__name__)


class BroadcastEvent:
    """Event name constants for the shared broadcast channel."""

    PROJECT_UPDATED = "PROJECT_UPDATED"
    PROJECT_DELETED = "PROJECT_DELETED"
    CLIENT_CREATED = "CLIENT_CREATED"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"


class BroadcastNotifier:
    """Publishes typed events so connected clients refresh without polling.

    Delivery is at-most-once per call. A failed publish is logged and
    swallowed; it never undoes the write that triggered it.
    """

    def __init__(self, redis: Redis | None, channel: str | None = None):
        self.redis = redis
        self.channel = channel or get_settings().broadcast_channel

    async def publish(self, event: str, payload: dict[str, Any], now: datetime | None = None) -> bool:
        """Publish ``event`` with ``payload``.

        Returns:
            True if the message reached Redis, False otherwise
        """
        now = now or datetime.now(UTC)
        envelope = {"event": event, "payload": payload, "timestamp": now.isoformat()}
        try:
            await self._send(envelope)
        except NotificationError as exc:
            logger.warning(
                "broadcast_failed",
                broadcast_event=event,
                channel=self.channel,
                error=str(exc.__cause__ or exc),
            )
            return False
        except Exception as exc:
            # The triggering write is already committed; no publish error reaches the caller
            logger.error(
                "broadcast_failed",
                broadcast_event=event,
                channel=self.channel,
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
            )
            return False
        logger.debug("broadcast_published", broadcast_event=event, channel=self.channel)
        return True

    async def _send(self, envelope: dict[str, Any]) -> None:
        if self.redis is None:
            raise NotificationError("Broadcast channel not configured")
        try:
            await self.redis.publish(self.channel, json.dumps(envelope, default=str))
        except (RedisError, OSError) as exc:
            raise NotificationError(f"Publish to {self.channel} failed") from exc

    async def project_updated(self, project_id: str, phase: str) -> bool:
        return await self.publish(BroadcastEvent.PROJECT_UPDATED, {"project_id": project_id, "phase": phase})
