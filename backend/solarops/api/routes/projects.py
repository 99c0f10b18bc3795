"""Project read model and deletion routes."""

import uuid

from fastapi import APIRouter, Depends, Query, Response

from solarops.api.deps import get_project_service
from solarops.core.auth import AuthUser, require_auth, require_permission
from solarops.domain.stages import Stage
from solarops.schemas.projects import ProjectDetail, ProjectStats, ProjectSummary, TimelineResponse
from solarops.services.project_service import ProjectService

router = APIRouter()


@router.get("", response_model=list[ProjectSummary])
async def list_projects(
    stage: Stage | None = Query(default=None),
    user: AuthUser = Depends(require_auth),
    service: ProjectService = Depends(get_project_service),
):
    return await service.list_projects(stage)


@router.get("/stats", response_model=ProjectStats)
async def project_stats(
    user: AuthUser = Depends(require_auth),
    service: ProjectService = Depends(get_project_service),
):
    return await service.get_stats()


@router.get("/{project_id}", response_model=ProjectDetail)
async def get_project(
    project_id: uuid.UUID,
    user: AuthUser = Depends(require_auth),
    service: ProjectService = Depends(get_project_service),
):
    """Full project view: client, phases, documents and the documentation checklist."""
    return await service.get_project_detail(project_id)


@router.get("/{project_id}/timeline", response_model=TimelineResponse)
async def get_timeline(
    project_id: uuid.UUID,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    user: AuthUser = Depends(require_auth),
    service: ProjectService = Depends(get_project_service),
):
    """Chronological history of phase updates, stage changes and documents."""
    return await service.get_timeline(project_id, limit=limit, offset=offset)


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: uuid.UUID,
    user: AuthUser = Depends(require_permission("delete_project")),
    service: ProjectService = Depends(get_project_service),
):
    await service.delete_project(project_id, actor_role=user.role.value)
    return Response(status_code=204)
