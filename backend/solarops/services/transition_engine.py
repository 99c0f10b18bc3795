"""TransitionEngine: the only write path for phase records and the derived stage.

Every phase update runs the same sequence:

    normalize status -> validate (advance only) -> persist phase
    -> derive stage -> persist stage -> commit -> broadcast

A rejected advancement writes nothing and broadcasts nothing. A broadcast
failure never undoes a committed write.
"""

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog

from solarops.db.models.phase_record import PhaseRecord
from solarops.db.models.project import Project
from solarops.db.models.stage_event import StageEvent
from solarops.domain.attributes import KIT_EQUIPMENT_FIELDS, merge_phase_attributes
from solarops.domain.preconditions import check_preconditions
from solarops.domain.stages import (
    ProjectStatus,
    Stage,
    StageChange,
    derive_project_status,
    derive_stage,
)
from solarops.domain.statuses import (
    Phase,
    advance_status,
    canonical_status,
    is_legacy_alias,
)
from solarops.services.notifier import BroadcastNotifier
from solarops.services.project_store import ProjectStore

logger = structlog.get_logger(__name__)

KIT_PHASE_LABEL = "kit"


@dataclass
class PhaseUpdateResult:
    """Outcome of a phase update attempt."""

    accepted: bool
    project_id: uuid.UUID
    phase: Phase
    status: str
    current_stage: Stage | None = None
    project_status: ProjectStatus | None = None
    stage_changed: bool = False
    missing_fields: list[str] = field(default_factory=list)
    notified: bool = False


class TransitionEngine:
    """Orchestrates phase updates against the persistence and broadcast collaborators."""

    def __init__(self, store: ProjectStore, notifier: BroadcastNotifier):
        """Initialize with dependency-injected collaborators.

        Args:
            store: Persistence collaborator bound to the request's session
            notifier: Broadcast collaborator for change events
        """
        self.store = store
        self.notifier = notifier

    async def apply_phase_update(
        self,
        project_id: uuid.UUID,
        phase: Phase | str,
        submitted_attributes: Mapping[str, Any] | None,
        requested_status: str,
        actor_role: str,
        pendencies: str | None = None,
        correlation_id: uuid.UUID | None = None,
    ) -> PhaseUpdateResult:
        """Apply one role-scoped update to a phase.

        Args:
            project_id: UUID of the project
            phase: Phase being updated
            submitted_attributes: Phase attributes sent with this update
            requested_status: Target status (canonical token or legacy alias)
            actor_role: Caller's role, already authorized upstream
            pendencies: New pendencies text; None keeps the stored text
            correlation_id: Optional correlation ID for event tracking

        Returns:
            PhaseUpdateResult; ``accepted`` is False with ``missing_fields``
            when advancement was requested but preconditions are unsatisfied

        Raises:
            UnknownStatusError: requested_status outside the phase vocabulary
            NotFoundError: project or phase record absent
            PersistenceError: the store rejected the write
        """
        phase = Phase(phase)
        correlation_id = correlation_id or uuid.uuid4()
        submitted = dict(submitted_attributes or {})

        if is_legacy_alias(phase, requested_status):
            logger.warning("legacy_status_alias", phase=phase.value, status=requested_status)
        status = canonical_status(phase, requested_status)

        project = await self.store.get_project(project_id)
        record = await self.store.get_phase(project_id, phase)

        existing = dict(record.attributes or {})
        effective_pendencies = pendencies if pendencies is not None else record.pendencies

        if status == advance_status(phase):
            document_types: list[str] = []
            if phase == Phase.HOMOLOGATION:
                document_types = [doc.type for doc in await self.store.list_documents(project_id)]

            check = check_preconditions(
                phase,
                submitted,
                existing,
                pendencies=effective_pendencies,
                document_types=document_types,
            )
            if not check.satisfied:
                logger.info(
                    "phase_advance_rejected",
                    project_id=str(project_id),
                    phase=phase.value,
                    missing_fields=check.missing_fields,
                    actor=actor_role,
                )
                return PhaseUpdateResult(
                    accepted=False,
                    project_id=project_id,
                    phase=phase,
                    status=status,
                    current_stage=Stage(project.current_stage),
                    project_status=ProjectStatus(project.status),
                    missing_fields=check.missing_fields,
                )

        previous_status = canonical_status(phase, record.status)
        self.store.put_phase(
            record,
            status=status,
            attributes=merge_phase_attributes(phase, existing, submitted),
            pendencies=effective_pendencies,
        )
        self.store.add_event(
            StageEvent(
                project_id=project_id,
                correlation_id=correlation_id,
                event_type="phase_updated",
                phase=phase.value,
                from_status=previous_status,
                to_status=status,
                actor=actor_role,
                detail={"fields": sorted(submitted.keys())},
                reason=effective_pendencies if status != advance_status(phase) else None,
            )
        )

        change = await self._sync_stage(project, actor_role, correlation_id)
        await self.store.commit()

        logger.info(
            "phase_updated",
            project_id=str(project_id),
            phase=phase.value,
            from_status=previous_status,
            to_status=status,
            current_stage=change.to_stage.value,
            project_status=change.to_status.value,
            actor=actor_role,
        )

        notified = await self.notifier.project_updated(str(project_id), phase.value)

        return PhaseUpdateResult(
            accepted=True,
            project_id=project_id,
            phase=phase,
            status=status,
            current_stage=change.to_stage,
            project_status=change.to_status,
            stage_changed=change.stage_changed,
            notified=notified,
        )

    async def record_kit_purchase(
        self,
        project_id: uuid.UUID,
        kit_purchased: bool,
        equipment: Mapping[str, Any] | None,
        actor_role: str,
        correlation_id: uuid.UUID | None = None,
    ) -> PhaseUpdateResult:
        """Record kit procurement on the project and the technical record.

        Kit data is informational: it gates nothing and leaves the technical
        status untouched.
        """
        correlation_id = correlation_id or uuid.uuid4()
        equipment = {k: v for k, v in (equipment or {}).items() if k in KIT_EQUIPMENT_FIELDS}

        project = await self.store.get_project(project_id)
        record = await self.store.get_phase(project_id, Phase.TECHNICAL)

        project.kit_purchased = bool(kit_purchased)
        self.store.put_phase(
            record,
            status=canonical_status(Phase.TECHNICAL, record.status),
            attributes=merge_phase_attributes(Phase.TECHNICAL, record.attributes, equipment),
            pendencies=record.pendencies,
        )
        self.store.add_event(
            StageEvent(
                project_id=project_id,
                correlation_id=correlation_id,
                event_type="kit_updated",
                phase=KIT_PHASE_LABEL,
                actor=actor_role,
                detail={"kit_purchased": bool(kit_purchased), "fields": sorted(equipment.keys())},
            )
        )

        change = await self._sync_stage(project, actor_role, correlation_id)
        await self.store.commit()

        logger.info("kit_updated", project_id=str(project_id), kit_purchased=bool(kit_purchased), actor=actor_role)

        notified = await self.notifier.project_updated(str(project_id), KIT_PHASE_LABEL)

        return PhaseUpdateResult(
            accepted=True,
            project_id=project_id,
            phase=Phase.TECHNICAL,
            status=record.status,
            current_stage=change.to_stage,
            project_status=change.to_status,
            stage_changed=change.stage_changed,
            notified=notified,
        )

    async def _sync_stage(
        self, project: Project, actor_role: str, correlation_id: uuid.UUID
    ) -> StageChange:
        """Recompute stage and project status from all phase records and write both."""
        records: dict[Phase, PhaseRecord] = await self.store.list_phases(project.id)
        statuses = {phase: record.status for phase, record in records.items()}

        change = StageChange(
            from_stage=Stage(project.current_stage) if project.current_stage else None,
            to_stage=derive_stage(statuses),
            from_status=ProjectStatus(project.status) if project.status else None,
            to_status=derive_project_status(statuses),
        )
        self.store.put_project_stage(project, change)

        if change.stage_changed or change.status_changed:
            self.store.add_event(
                StageEvent(
                    project_id=project.id,
                    correlation_id=correlation_id,
                    event_type="stage_changed",
                    from_stage=change.from_stage.value if change.from_stage else None,
                    to_stage=change.to_stage.value,
                    actor=actor_role,
                    detail={
                        "from_status": change.from_status.value if change.from_status else None,
                        "to_status": change.to_status.value,
                    },
                )
            )
            logger.info(
                "stage_changed",
                project_id=str(project.id),
                from_stage=change.from_stage.value if change.from_stage else None,
                to_stage=change.to_stage.value,
                project_status=change.to_status.value,
            )
        return change
