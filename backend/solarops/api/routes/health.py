from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from solarops.core.logging import SERVICE_NAME
from solarops.db import database_ready, redis_ready

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Liveness probe. Returns 503 during graceful shutdown."""
    if getattr(request.app.state, "shutting_down", False):
        return JSONResponse(
            status_code=503,
            content={"status": "shutting_down", "service": SERVICE_NAME},
        )
    return {"status": "healthy", "service": SERVICE_NAME}


@router.get("/ready")
async def readiness_check():
    """Readiness check: the database and the broadcast Redis must both answer.

    Broadcast failures never fail writes, but a node without Redis cannot
    serve the event stream, so it is reported as degraded.
    """
    checks = {"database": await database_ready(), "redis": await redis_ready()}

    all_healthy = all(checks.values())
    return JSONResponse(
        status_code=200 if all_healthy else 503,
        content={"status": "ready" if all_healthy else "degraded", "checks": checks},
    )
