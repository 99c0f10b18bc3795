"""Persistence and broadcast connections: async engine lifecycle, sessions, the shared Redis client and their readiness probes."""

from solarops.db.base import Base, build_engine, close_db, database_ready, get_session, init_db
from solarops.db.redis import close_redis, get_redis, init_redis, redis_ready

__all__ = [
    "Base",
    "build_engine",
    "close_db",
    "close_redis",
    "database_ready",
    "get_redis",
    "get_session",
    "init_db",
    "init_redis",
    "redis_ready",
]
