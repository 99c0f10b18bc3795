"""Per-phase status vocabularies and status classification.

Pure domain logic with no external dependencies.

Every phase owns a closed set of canonical tokens split into three classes:
not-started, pending (saved but incomplete or blocked) and advanced. Historical
spellings are accepted only as aliases and are never written back.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from solarops.core.exceptions import UnknownStatusError


class Phase(StrEnum):
    """Operational phases of a project, declared in lifecycle order."""

    COMMERCIAL = "commercial"
    TECHNICAL = "technical"
    INSTALLATION = "installation"
    HOMOLOGATION = "homologation"


LIFECYCLE_ORDER: tuple[Phase, ...] = (
    Phase.COMMERCIAL,
    Phase.TECHNICAL,
    Phase.INSTALLATION,
    Phase.HOMOLOGATION,
)


class StatusClass(StrEnum):
    NOT_STARTED = "not_started"
    PENDING = "pending"
    ADVANCED = "advanced"


class CommercialStatus(StrEnum):
    NOT_STARTED = "not_started"
    PENDING = "pending"
    APPROVED = "approved"


class TechnicalStatus(StrEnum):
    NOT_STARTED = "not_started"
    PENDING = "pending"
    REJECTED = "rejected"
    APPROVED = "approved"


class InstallationStatus(StrEnum):
    NOT_STARTED = "not_started"
    PENDING = "pending"
    APPROVED = "approved"


class HomologationStatus(StrEnum):
    NOT_STARTED = "not_started"
    TECHNICAL_ANALYSIS = "technical_analysis"
    REJECTED = "rejected"
    WAITING_INSPECTION = "waiting_inspection"
    PERFORMING_INSPECTION = "performing_inspection"
    CONNECTION_POINT_APPROVED = "connection_point_approved"


@dataclass(frozen=True)
class PhaseVocabulary:
    """Closed status vocabulary for one phase."""

    phase: Phase
    statuses: tuple[str, ...]
    not_started: str
    pending: str
    advance: str
    aliases: Mapping[str, str] = field(default_factory=dict)

    def classify(self, status: str) -> StatusClass:
        if status == self.not_started:
            return StatusClass.NOT_STARTED
        if status == self.advance:
            return StatusClass.ADVANCED
        return StatusClass.PENDING


VOCABULARIES: dict[Phase, PhaseVocabulary] = {
    Phase.COMMERCIAL: PhaseVocabulary(
        phase=Phase.COMMERCIAL,
        statuses=tuple(CommercialStatus),
        not_started=CommercialStatus.NOT_STARTED,
        pending=CommercialStatus.PENDING,
        advance=CommercialStatus.APPROVED,
        aliases={
            "proposta_enviada": CommercialStatus.APPROVED,
            "in_progress": CommercialStatus.PENDING,
        },
    ),
    Phase.TECHNICAL: PhaseVocabulary(
        phase=Phase.TECHNICAL,
        statuses=tuple(TechnicalStatus),
        not_started=TechnicalStatus.NOT_STARTED,
        pending=TechnicalStatus.PENDING,
        advance=TechnicalStatus.APPROVED,
        aliases={
            "vistoria_concluida": TechnicalStatus.APPROVED,
            "in_progress": TechnicalStatus.PENDING,
        },
    ),
    Phase.INSTALLATION: PhaseVocabulary(
        phase=Phase.INSTALLATION,
        statuses=tuple(InstallationStatus),
        not_started=InstallationStatus.NOT_STARTED,
        pending=InstallationStatus.PENDING,
        advance=InstallationStatus.APPROVED,
    ),
    Phase.HOMOLOGATION: PhaseVocabulary(
        phase=Phase.HOMOLOGATION,
        statuses=tuple(HomologationStatus),
        not_started=HomologationStatus.NOT_STARTED,
        pending=HomologationStatus.TECHNICAL_ANALYSIS,
        advance=HomologationStatus.CONNECTION_POINT_APPROVED,
    ),
}


def vocabulary(phase: Phase | str) -> PhaseVocabulary:
    """Return the vocabulary for a phase.

    Raises:
        UnknownStatusError: phase is not one of the four lifecycle phases
    """
    try:
        return VOCABULARIES[Phase(phase)]
    except ValueError:
        raise UnknownStatusError("phase", phase) from None


def is_legacy_alias(phase: Phase | str, raw: str | None) -> bool:
    return bool(raw) and raw in vocabulary(phase).aliases


def canonical_status(phase: Phase | str, raw: str | None) -> str:
    """Normalize a stored or submitted status token to its canonical spelling.

    Missing values read as not-started. Legacy aliases map to the token of
    the same class.

    Raises:
        UnknownStatusError: token is neither canonical nor a known alias
    """
    vocab = vocabulary(phase)
    if raw is None or raw == "":
        return vocab.not_started
    if raw in vocab.statuses:
        return str(raw)
    if raw in vocab.aliases:
        return str(vocab.aliases[raw])
    raise UnknownStatusError(vocab.phase.value, raw)


def status_class(phase: Phase | str, raw: str | None) -> StatusClass:
    vocab = vocabulary(phase)
    return vocab.classify(canonical_status(phase, raw))


def is_advanced(phase: Phase | str, raw: str | None) -> bool:
    return status_class(phase, raw) == StatusClass.ADVANCED


def advance_status(phase: Phase | str) -> str:
    return vocabulary(phase).advance


def initial_status(phase: Phase | str) -> str:
    return vocabulary(phase).not_started
