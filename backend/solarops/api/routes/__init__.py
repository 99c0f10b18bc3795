from fastapi import APIRouter

from solarops.api.routes import clients, documents, events, health, phases, projects

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(clients.router, prefix="/clients", tags=["clients"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(phases.router, prefix="/projects", tags=["phases"])
api_router.include_router(documents.router, tags=["documents"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
