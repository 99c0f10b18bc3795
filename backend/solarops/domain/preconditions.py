"""Precondition validators for phase advancement.

Pure functions -- no side effects, no DB access, deterministic.

An unsatisfied check is a normal return value carrying the ordered list of
missing fields; the transition engine decides how to surface it.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from solarops.domain.attributes import (
    COMMERCIAL_REQUIRED_FIELDS,
    INSTALLATION_PHOTO_SLOTS,
    TECHNICAL_REQUIRED_FIELDS,
    is_present,
)
from solarops.domain.documents import missing_document_types
from solarops.domain.statuses import Phase


@dataclass(frozen=True)
class PreconditionResult:
    """Outcome of a precondition check."""

    satisfied: bool
    missing_fields: list[str] = field(default_factory=list)

    @classmethod
    def ok(cls) -> "PreconditionResult":
        return cls(satisfied=True)

    @classmethod
    def unsatisfied(cls, missing_fields: list[str]) -> "PreconditionResult":
        return cls(satisfied=False, missing_fields=list(missing_fields))


def _effective(existing: Mapping[str, Any] | None, submitted: Mapping[str, Any] | None) -> dict[str, Any]:
    return {**(existing or {}), **(submitted or {})}


def _truthy_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "on"}
    return bool(value)


def check_commercial(attributes: Mapping[str, Any]) -> PreconditionResult:
    """Commercial advances once the proposal value and payment method are known."""
    missing = [name for name in COMMERCIAL_REQUIRED_FIELDS if not is_present(attributes.get(name))]
    return PreconditionResult.unsatisfied(missing) if missing else PreconditionResult.ok()


def check_technical(attributes: Mapping[str, Any]) -> PreconditionResult:
    """Technical inspection needs every survey field.

    A structural reinforcement flag additionally requires observations
    explaining it.
    """
    missing = [name for name in TECHNICAL_REQUIRED_FIELDS if not is_present(attributes.get(name))]
    if _truthy_flag(attributes.get("reinforcement_needed")) and not is_present(attributes.get("observations")):
        missing.append("observations")
    return PreconditionResult.unsatisfied(missing) if missing else PreconditionResult.ok()


def check_installation(
    submitted: Mapping[str, Any],
    existing: Mapping[str, Any],
    pendencies: str | None,
) -> PreconditionResult:
    """Every photo slot must be uploaded now or already on file.

    Missing photos are waived when pendencies text explains the gap.
    """
    missing = [
        slot
        for slot in INSTALLATION_PHOTO_SLOTS
        if not is_present(submitted.get(slot)) and not is_present(existing.get(slot))
    ]
    if not missing or is_present(pendencies):
        return PreconditionResult.ok()
    return PreconditionResult.unsatisfied(missing + ["pendencies"])


def check_homologation(document_types: Iterable[str]) -> PreconditionResult:
    """Connection-point approval requires a documentation-complete project."""
    missing = [f"documents.{doc_type.value}" for doc_type in missing_document_types(document_types)]
    return PreconditionResult.unsatisfied(missing) if missing else PreconditionResult.ok()


def check_preconditions(
    phase: Phase | str,
    submitted: Mapping[str, Any] | None,
    existing: Mapping[str, Any] | None,
    *,
    pendencies: str | None = None,
    document_types: Iterable[str] = (),
) -> PreconditionResult:
    """Decide whether a phase's data is sufficient to reach its advance status.

    Args:
        phase: Phase being advanced
        submitted: Attributes sent with this update
        existing: Attributes already persisted for the phase
        pendencies: Effective pendencies text after this update
        document_types: Types of the documents attached to the project

    Returns:
        PreconditionResult with satisfied flag and ordered missing fields
    """
    phase = Phase(phase)
    submitted = submitted or {}
    existing = existing or {}

    if phase == Phase.COMMERCIAL:
        return check_commercial(_effective(existing, submitted))
    if phase == Phase.TECHNICAL:
        return check_technical(_effective(existing, submitted))
    if phase == Phase.INSTALLATION:
        return check_installation(submitted, existing, pendencies)
    if phase == Phase.HOMOLOGATION:
        return check_homologation(document_types)

    # Should never reach here due to enum constraint
    raise ValueError(f"Unknown phase: {phase}")
