"""Pydantic schemas for the project read model, clients and documents."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from solarops.domain.documents import DocumentType


class CreateClientRequest(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    cpf_cnpj: str | None = None


class CreateClientResponse(BaseModel):
    id: str
    project_id: str
    current_stage: str


class PhaseView(BaseModel):
    status: str
    pendencies: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    updated_at: datetime | None = None


class DocumentView(BaseModel):
    id: str
    project_id: str
    type: str
    title: str
    url: str
    uploaded_by: str | None = None
    created_at: datetime


class CreateDocumentRequest(BaseModel):
    """Register a document whose file was already stored."""

    type: DocumentType = DocumentType.OTHER
    url: str = Field(..., min_length=1)
    title: str | None = None


class ProjectSummary(BaseModel):
    id: str
    client_id: str
    client_name: str | None = None
    title: str
    current_stage: str
    status: str
    kit_purchased: bool
    phase_statuses: dict[str, str] = Field(default_factory=dict)
    pendencies: dict[str, str] = Field(default_factory=dict)
    updated_at: datetime


class ProjectDetail(ProjectSummary):
    """Full project view.

    documents and missing_documents default to empty arrays, never null.
    """

    client: dict[str, Any] = Field(default_factory=dict)
    phases: dict[str, PhaseView] = Field(default_factory=dict)
    documents: list[DocumentView] = Field(default_factory=list)
    missing_documents: list[str] = Field(default_factory=list)
    documentation_complete: bool = False


class ProjectStats(BaseModel):
    active_projects: int = 0
    pending_inspections: int = 0
    pending_installations: int = 0
    pending_homologations: int = 0
    completed_projects: int = 0


class TimelineEntry(BaseModel):
    id: str
    timestamp: datetime
    event_type: str
    phase: str | None = None
    from_status: str | None = None
    to_status: str | None = None
    from_stage: str | None = None
    to_stage: str | None = None
    actor: str
    reason: str | None = None
    detail: dict[str, Any] = Field(default_factory=dict)


class TimelineResponse(BaseModel):
    project_id: str
    items: list[TimelineEntry] = Field(default_factory=list, description="Timeline items, empty array when none exist")
    total: int = 0
