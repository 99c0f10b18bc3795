"""Overall stage and project status derivation.

Pure domain logic with no external dependencies. The stage is never stored
independently of the phase statuses: it is recomputed from them after every
phase write.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

from solarops.domain.statuses import LIFECYCLE_ORDER, Phase, StatusClass, is_advanced, status_class


class Stage(StrEnum):
    """Overall position of a project. Declared in lifecycle order."""

    PENDING = "pending"
    INSPECTION = "inspection"
    INSTALLATION = "installation"
    HOMOLOGATION = "homologation"
    COMPLETED = "completed"


class ProjectStatus(StrEnum):
    """Project-scoped completion flag, orthogonal to stage."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# Stage reported while the given phase is the earliest incomplete one
PHASE_STAGE: dict[Phase, Stage] = {
    Phase.COMMERCIAL: Stage.PENDING,
    Phase.TECHNICAL: Stage.INSPECTION,
    Phase.INSTALLATION: Stage.INSTALLATION,
    Phase.HOMOLOGATION: Stage.HOMOLOGATION,
}

STAGE_ORDER: tuple[Stage, ...] = tuple(Stage)


@dataclass(frozen=True)
class StageChange:
    """Stage and project status before and after a phase write."""

    from_stage: Stage | None
    to_stage: Stage
    from_status: ProjectStatus | None
    to_status: ProjectStatus

    @property
    def stage_changed(self) -> bool:
        return self.from_stage != self.to_stage

    @property
    def status_changed(self) -> bool:
        return self.from_status != self.to_status


def derive_stage(statuses: Mapping[Phase, str | None]) -> Stage:
    """Return the stage of the first non-advanced phase, or COMPLETED.

    Phases missing from ``statuses`` count as not started.
    """
    for phase in LIFECYCLE_ORDER:
        if not is_advanced(phase, statuses.get(phase)):
            return PHASE_STAGE[phase]
    return Stage.COMPLETED


def derive_project_status(statuses: Mapping[Phase, str | None]) -> ProjectStatus:
    """Completed once homologation is approved, in progress once any phase started."""
    if is_advanced(Phase.HOMOLOGATION, statuses.get(Phase.HOMOLOGATION)):
        return ProjectStatus.COMPLETED
    for phase in LIFECYCLE_ORDER:
        if status_class(phase, statuses.get(phase)) != StatusClass.NOT_STARTED:
            return ProjectStatus.IN_PROGRESS
    return ProjectStatus.PENDING


def stage_index(stage: Stage | str) -> int:
    return STAGE_ORDER.index(Stage(stage))
