"""ProjectService: client intake, the project read model, documents and deletion.

Phase writes go through TransitionEngine; this service only creates projects
in their initial state, attaches documents and reads back what was written.
"""

import uuid
from collections import Counter

import structlog
from sqlalchemy import case, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from solarops.core.exceptions import NotFoundError, PersistenceError
from solarops.db.models.client import Client
from solarops.db.models.document import Document
from solarops.db.models.phase_record import PhaseRecord
from solarops.db.models.project import Project
from solarops.db.models.stage_event import StageEvent
from solarops.domain.documents import (
    DOCUMENT_TYPE_LABELS,
    DocumentType,
    is_documentation_complete,
    missing_document_types,
)
from solarops.domain.stages import ProjectStatus, Stage
from solarops.domain.statuses import LIFECYCLE_ORDER, Phase, canonical_status, initial_status
from solarops.schemas.projects import (
    CreateClientRequest,
    CreateClientResponse,
    DocumentView,
    PhaseView,
    ProjectDetail,
    ProjectStats,
    ProjectSummary,
    TimelineEntry,
    TimelineResponse,
)
from solarops.services.notifier import BroadcastEvent, BroadcastNotifier
from solarops.services.project_store import ProjectStore

logger = structlog.get_logger(__name__)

PROJECT_TITLE_PREFIX = "Solar Project - "

# Events written in one flush can share a timestamp; stage_changed always follows the write that caused it
_TIMELINE_RANK = case(
    (StageEvent.event_type == "project_created", 0),
    (StageEvent.event_type == "stage_changed", 2),
    else_=1,
)


def _document_view(doc: Document) -> DocumentView:
    return DocumentView(
        id=str(doc.id),
        project_id=str(doc.project_id),
        type=doc.type,
        title=doc.title,
        url=doc.url,
        uploaded_by=doc.uploaded_by,
        created_at=doc.created_at,
    )


class ProjectService:
    """Project lifecycle operations outside the phase write path."""

    def __init__(self, session: AsyncSession, notifier: BroadcastNotifier):
        self.session = session
        self.store = ProjectStore(session)
        self.notifier = notifier

    async def create_client(
        self, request: CreateClientRequest, created_by: str | None, actor_role: str
    ) -> CreateClientResponse:
        """Create a client, its project and the four phase records in one commit.

        Every phase starts at its not-started status and the project at stage
        ``pending``, so the first derived stage needs no engine call.
        """
        client = Client(**request.model_dump(), created_by=created_by)
        self.session.add(client)
        await self._flush()

        project = Project(
            client_id=client.id,
            title=f"{PROJECT_TITLE_PREFIX}{client.name}",
            current_stage=Stage.PENDING.value,
            status=ProjectStatus.PENDING.value,
            kit_purchased=False,
        )
        self.session.add(project)
        await self._flush()

        for phase in LIFECYCLE_ORDER:
            self.session.add(
                PhaseRecord(project_id=project.id, phase=phase.value, status=initial_status(phase), attributes={})
            )
        self.store.add_event(
            StageEvent(
                project_id=project.id,
                event_type="project_created",
                to_stage=Stage.PENDING.value,
                actor=actor_role,
                detail={"client_id": str(client.id)},
            )
        )
        await self.store.commit()

        logger.info("client_created", client_id=str(client.id), project_id=str(project.id), actor=actor_role)
        await self.notifier.publish(
            BroadcastEvent.CLIENT_CREATED,
            {"id": str(client.id), "name": client.name, "project_id": str(project.id)},
        )

        return CreateClientResponse(id=str(client.id), project_id=str(project.id), current_stage=project.current_stage)

    async def list_projects(self, stage: Stage | str | None = None) -> list[ProjectSummary]:
        """List projects, most recently updated first, optionally filtered by stage."""
        query = select(Project, Client).join(Client, Client.id == Project.client_id)
        if stage:
            query = query.where(Project.current_stage == Stage(stage).value)
        query = query.order_by(Project.updated_at.desc())

        try:
            rows = (await self.session.execute(query)).all()
            project_ids = [project.id for project, _ in rows]
            records = []
            if project_ids:
                result = await self.session.execute(
                    select(PhaseRecord).where(PhaseRecord.project_id.in_(project_ids))
                )
                records = list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to list projects") from exc

        by_project: dict[uuid.UUID, list[PhaseRecord]] = {}
        for record in records:
            by_project.setdefault(record.project_id, []).append(record)

        return [
            self._summary(project, client, by_project.get(project.id, []))
            for project, client in rows
        ]

    async def get_project_detail(self, project_id: uuid.UUID) -> ProjectDetail:
        project = await self.store.get_project(project_id)
        try:
            client = await self.session.get(Client, project.client_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load client for project {project_id}") from exc
        records = await self.store.list_phases(project_id)
        documents = await self.store.list_documents(project_id)

        summary = self._summary(project, client, list(records.values()))
        doc_types = [doc.type for doc in documents]

        return ProjectDetail(
            **summary.model_dump(),
            client=self._client_dict(client),
            phases={
                phase.value: PhaseView(
                    status=canonical_status(phase, record.status),
                    pendencies=record.pendencies,
                    attributes=dict(record.attributes or {}),
                    updated_at=record.updated_at,
                )
                for phase, record in records.items()
            },
            documents=[_document_view(doc) for doc in documents],
            missing_documents=[doc_type.value for doc_type in missing_document_types(doc_types)],
            documentation_complete=is_documentation_complete(doc_types),
        )

    async def get_stats(self) -> ProjectStats:
        """Dashboard counters over stage and project status."""
        try:
            rows = (await self.session.execute(select(Project.current_stage, Project.status))).all()
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to compute project stats") from exc

        stages = Counter(stage for stage, _ in rows)
        statuses = Counter(status for _, status in rows)
        return ProjectStats(
            active_projects=statuses[ProjectStatus.PENDING.value] + statuses[ProjectStatus.IN_PROGRESS.value],
            pending_inspections=stages[Stage.INSPECTION.value],
            pending_installations=stages[Stage.INSTALLATION.value],
            pending_homologations=stages[Stage.HOMOLOGATION.value],
            completed_projects=statuses[ProjectStatus.COMPLETED.value],
        )

    async def get_timeline(self, project_id: uuid.UUID, limit: int = 100, offset: int = 0) -> TimelineResponse:
        """Timeline events oldest first. ``total`` counts all events, not just this page."""
        await self.store.get_project(project_id)
        try:
            total = await self.session.scalar(
                select(func.count()).select_from(StageEvent).where(StageEvent.project_id == project_id)
            )
            result = await self.session.execute(
                select(StageEvent)
                .where(StageEvent.project_id == project_id)
                .order_by(StageEvent.created_at.asc(), _TIMELINE_RANK, StageEvent.id.asc())
                .offset(offset)
                .limit(limit)
            )
            events = list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load timeline for project {project_id}") from exc

        items = [
            TimelineEntry(
                id=str(event.id),
                timestamp=event.created_at,
                event_type=event.event_type,
                phase=event.phase,
                from_status=event.from_status,
                to_status=event.to_status,
                from_stage=event.from_stage,
                to_stage=event.to_stage,
                actor=event.actor,
                reason=event.reason,
                detail=dict(event.detail or {}),
            )
            for event in events
        ]
        return TimelineResponse(project_id=str(project_id), items=items, total=total or 0)

    async def delete_project(self, project_id: uuid.UUID, actor_role: str) -> None:
        """Delete a project with its phase records, documents and events.

        The client record is kept.
        """
        project = await self.store.get_project(project_id)
        try:
            for model in (StageEvent, Document, PhaseRecord):
                await self.session.execute(delete(model).where(model.project_id == project_id))
            await self.session.delete(project)
            await self.session.flush()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise PersistenceError(f"Failed to delete project {project_id}") from exc
        await self.store.commit()

        logger.info("project_deleted", project_id=str(project_id), actor=actor_role)
        await self.notifier.publish(BroadcastEvent.PROJECT_DELETED, {"id": str(project_id)})

    async def list_documents(self, project_id: uuid.UUID) -> list[DocumentView]:
        await self.store.get_project(project_id)
        return [_document_view(doc) for doc in await self.store.list_documents(project_id)]

    async def add_document(
        self,
        project_id: uuid.UUID,
        doc_type: DocumentType | str,
        url: str,
        title: str | None,
        uploaded_by: str | None,
        actor_role: str,
    ) -> DocumentView:
        """Register an already-stored file against the project."""
        doc_type = DocumentType(doc_type)
        await self.store.get_project(project_id)

        document = Document(
            project_id=project_id,
            type=doc_type.value,
            title=title or DOCUMENT_TYPE_LABELS[doc_type],
            url=url,
            uploaded_by=uploaded_by,
        )
        self.session.add(document)
        self.store.add_event(
            StageEvent(
                project_id=project_id,
                event_type="document_added",
                actor=actor_role,
                detail={"type": doc_type.value, "url": url},
            )
        )
        await self.store.commit()

        logger.info("document_added", project_id=str(project_id), type=doc_type.value, actor=actor_role)
        await self.notifier.publish(
            BroadcastEvent.DOCUMENT_UPLOADED, {"project_id": str(project_id), "type": doc_type.value}
        )
        return _document_view(document)

    async def remove_document(self, document_id: uuid.UUID, actor_role: str) -> None:
        try:
            document = await self.session.get(Document, document_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load document {document_id}") from exc
        if document is None:
            raise NotFoundError("Document", document_id)

        project_id = document.project_id
        await self.session.delete(document)
        self.store.add_event(
            StageEvent(
                project_id=project_id,
                event_type="document_removed",
                actor=actor_role,
                detail={"type": document.type, "url": document.url},
            )
        )
        await self.store.commit()

        logger.info("document_removed", project_id=str(project_id), document_id=str(document_id), actor=actor_role)
        await self.notifier.project_updated(str(project_id), "documents")

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise PersistenceError("Failed to write client intake") from exc

    @staticmethod
    def _summary(project: Project, client: Client | None, records: list[PhaseRecord]) -> ProjectSummary:
        phase_statuses: dict[str, str] = {}
        pendencies: dict[str, str] = {}
        for record in records:
            phase = Phase(record.phase)
            phase_statuses[phase.value] = canonical_status(phase, record.status)
            if record.pendencies:
                pendencies[phase.value] = record.pendencies

        return ProjectSummary(
            id=str(project.id),
            client_id=str(project.client_id),
            client_name=client.name if client else None,
            title=project.title,
            current_stage=project.current_stage,
            status=project.status,
            kit_purchased=bool(project.kit_purchased),
            phase_statuses=phase_statuses,
            pendencies=pendencies,
            updated_at=project.updated_at,
        )

    @staticmethod
    def _client_dict(client: Client | None) -> dict:
        if client is None:
            return {}
        return {
            "id": str(client.id),
            "name": client.name,
            "phone": client.phone,
            "email": client.email,
            "address": client.address,
            "city": client.city,
            "state": client.state,
            "cpf_cnpj": client.cpf_cnpj,
        }
