"""Client intake API routes."""

from fastapi import APIRouter, Depends

from solarops.api.deps import get_project_service
from solarops.core.auth import AuthUser, require_auth
from solarops.schemas.projects import CreateClientRequest, CreateClientResponse
from solarops.services.project_service import ProjectService

router = APIRouter()


@router.post("", response_model=CreateClientResponse, status_code=201)
async def create_client(
    request: CreateClientRequest,
    user: AuthUser = Depends(require_auth),
    service: ProjectService = Depends(get_project_service),
):
    """Create a client together with its project and empty phase records.

    Any authenticated role may register a client.
    """
    return await service.create_client(request, created_by=user.user_id, actor_role=user.role.value)
