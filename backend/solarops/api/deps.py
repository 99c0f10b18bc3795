"""Shared FastAPI dependencies for the route modules."""

import structlog
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from solarops.db.base import get_session
from solarops.db.redis import get_redis
from solarops.services.notifier import BroadcastNotifier
from solarops.services.project_service import ProjectService
from solarops.services.project_store import ProjectStore
from solarops.services.transition_engine import TransitionEngine

logger = structlog.get_logger(__name__)


def get_notifier() -> BroadcastNotifier:
    """Notifier bound to the shared Redis client.

    Without Redis the notifier still works; every publish is logged and dropped.
    Override this dependency in tests via app.dependency_overrides.
    """
    try:
        redis = get_redis()
    except RuntimeError:
        logger.warning("broadcast_unavailable", reason="redis_not_initialized")
        redis = None
    return BroadcastNotifier(redis)


def get_transition_engine(
    session: AsyncSession = Depends(get_session),
    notifier: BroadcastNotifier = Depends(get_notifier),
) -> TransitionEngine:
    return TransitionEngine(ProjectStore(session), notifier)


def get_project_service(
    session: AsyncSession = Depends(get_session),
    notifier: BroadcastNotifier = Depends(get_notifier),
) -> ProjectService:
    return ProjectService(session, notifier)
