"""ProjectStore: get/put boundary between the lifecycle engine and SQLAlchemy.

All store failures surface as PersistenceError; nothing is retried here.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from solarops.core.exceptions import NotFoundError, PersistenceError
from solarops.db.models.document import Document
from solarops.db.models.phase_record import PhaseRecord
from solarops.db.models.project import Project
from solarops.db.models.stage_event import StageEvent
from solarops.domain.stages import StageChange
from solarops.domain.statuses import LIFECYCLE_ORDER, Phase


class ProjectStore:
    """Persistence collaborator scoped to one request's session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_project(self, project_id: uuid.UUID) -> Project:
        try:
            result = await self.session.execute(select(Project).where(Project.id == project_id))
            project = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load project {project_id}") from exc
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    async def get_phase(self, project_id: uuid.UUID, phase: Phase) -> PhaseRecord:
        try:
            result = await self.session.execute(
                select(PhaseRecord).where(
                    PhaseRecord.project_id == project_id,
                    PhaseRecord.phase == phase.value,
                )
            )
            record = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load {phase} record for project {project_id}") from exc
        if record is None:
            raise NotFoundError(f"{phase.value.capitalize()} record for project", project_id)
        return record

    async def list_phases(self, project_id: uuid.UUID) -> dict[Phase, PhaseRecord]:
        """Return the project's phase records keyed by phase, flushing pending writes first."""
        try:
            await self.session.flush()
            result = await self.session.execute(select(PhaseRecord).where(PhaseRecord.project_id == project_id))
            records = result.scalars().all()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load phase records for project {project_id}") from exc
        by_phase = {Phase(r.phase): r for r in records if r.phase in {p.value for p in LIFECYCLE_ORDER}}
        return by_phase

    async def list_documents(self, project_id: uuid.UUID) -> list[Document]:
        try:
            result = await self.session.execute(
                select(Document).where(Document.project_id == project_id).order_by(Document.created_at)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load documents for project {project_id}") from exc

    def put_phase(
        self,
        record: PhaseRecord,
        *,
        status: str,
        attributes: dict[str, Any],
        pendencies: str | None,
    ) -> None:
        record.status = status
        record.attributes = attributes
        record.pendencies = pendencies
        record.updated_at = datetime.now(UTC)
        # JSON columns need an explicit dirty mark when the dict is reused
        flag_modified(record, "attributes")

    def put_project_stage(self, project: Project, change: StageChange) -> None:
        project.current_stage = change.to_stage.value
        project.status = change.to_status.value
        project.updated_at = datetime.now(UTC)

    def add_event(self, event: StageEvent) -> None:
        self.session.add(event)

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise PersistenceError("Failed to commit project changes") from exc

    async def rollback(self) -> None:
        await self.session.rollback()
