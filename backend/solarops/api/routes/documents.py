"""Project document routes.

Files are stored by the upload collaborator; these routes only register and
remove the resulting URLs.
"""

import uuid

from fastapi import APIRouter, Depends, Response

from solarops.api.deps import get_project_service
from solarops.core.auth import AuthUser, require_auth, require_permission
from solarops.schemas.projects import CreateDocumentRequest, DocumentView
from solarops.services.project_service import ProjectService

router = APIRouter()


@router.get("/projects/{project_id}/documents", response_model=list[DocumentView])
async def list_documents(
    project_id: uuid.UUID,
    user: AuthUser = Depends(require_auth),
    service: ProjectService = Depends(get_project_service),
):
    return await service.list_documents(project_id)


@router.post("/projects/{project_id}/documents", response_model=DocumentView, status_code=201)
async def add_document(
    project_id: uuid.UUID,
    request: CreateDocumentRequest,
    user: AuthUser = Depends(require_permission("documents")),
    service: ProjectService = Depends(get_project_service),
):
    return await service.add_document(
        project_id,
        request.type,
        request.url,
        request.title,
        uploaded_by=user.user_id,
        actor_role=user.role.value,
    )


@router.delete("/documents/{document_id}", status_code=204)
async def remove_document(
    document_id: uuid.UUID,
    user: AuthUser = Depends(require_permission("documents")),
    service: ProjectService = Depends(get_project_service),
):
    await service.remove_document(document_id, actor_role=user.role.value)
    return Response(status_code=204)
