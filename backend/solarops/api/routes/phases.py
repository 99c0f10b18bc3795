"""Role-scoped phase update routes.

Each route authorizes the caller for its phase, then hands the submitted
fields to the TransitionEngine. Only fields present in the request body are
forwarded, so an omitted field never clears a stored one.
"""

import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from solarops.api.deps import get_transition_engine
from solarops.core.auth import AuthUser, require_permission
from solarops.core.exceptions import PhaseValidationError
from solarops.domain.statuses import Phase
from solarops.middleware.correlation import request_correlation_uuid
from solarops.schemas.phases import (
    CommercialUpdateRequest,
    HomologationUpdateRequest,
    InstallationUpdateRequest,
    KitUpdateRequest,
    PhaseUpdateResponse,
    TechnicalUpdateRequest,
)
from solarops.services.transition_engine import PhaseUpdateResult, TransitionEngine

router = APIRouter()

_CONTROL_FIELDS = {"status", "pendencies", "rejection_reason"}


def _submitted_attributes(request: BaseModel) -> dict:
    body = request.model_dump(mode="json", exclude_unset=True)
    return {key: value for key, value in body.items() if key not in _CONTROL_FIELDS}


def _to_response(result: PhaseUpdateResult) -> PhaseUpdateResponse:
    if not result.accepted:
        raise PhaseValidationError(result.phase.value, result.missing_fields)
    return PhaseUpdateResponse(
        project_id=str(result.project_id),
        phase=result.phase.value,
        status=result.status,
        current_stage=result.current_stage.value,
        project_status=result.project_status.value,
        stage_changed=result.stage_changed,
    )


async def _apply(
    engine: TransitionEngine,
    project_id: uuid.UUID,
    phase: Phase,
    request: BaseModel,
    user: AuthUser,
    pendencies: str | None,
) -> PhaseUpdateResponse:
    result = await engine.apply_phase_update(
        project_id,
        phase,
        _submitted_attributes(request),
        request.status,
        actor_role=user.role.value,
        pendencies=pendencies,
        correlation_id=request_correlation_uuid(),
    )
    return _to_response(result)


@router.put("/{project_id}/commercial", response_model=PhaseUpdateResponse)
async def update_commercial(
    project_id: uuid.UUID,
    request: CommercialUpdateRequest,
    user: AuthUser = Depends(require_permission(Phase.COMMERCIAL.value)),
    engine: TransitionEngine = Depends(get_transition_engine),
):
    """Update the commercial proposal.

    Raises:
        PhaseValidationError(422): approval without proposal value or payment method
    """
    return await _apply(engine, project_id, Phase.COMMERCIAL, request, user, request.pendencies)


@router.put("/{project_id}/technical", response_model=PhaseUpdateResponse)
async def update_technical(
    project_id: uuid.UUID,
    request: TechnicalUpdateRequest,
    user: AuthUser = Depends(require_permission(Phase.TECHNICAL.value)),
    engine: TransitionEngine = Depends(get_transition_engine),
):
    """Update the technical inspection. New inspection media is appended."""
    return await _apply(engine, project_id, Phase.TECHNICAL, request, user, request.pendencies)


@router.put("/{project_id}/installation", response_model=PhaseUpdateResponse)
async def update_installation(
    project_id: uuid.UUID,
    request: InstallationUpdateRequest,
    user: AuthUser = Depends(require_permission(Phase.INSTALLATION.value)),
    engine: TransitionEngine = Depends(get_transition_engine),
):
    return await _apply(engine, project_id, Phase.INSTALLATION, request, user, request.pendencies)


@router.put("/{project_id}/homologation", response_model=PhaseUpdateResponse)
async def update_homologation(
    project_id: uuid.UUID,
    request: HomologationUpdateRequest,
    user: AuthUser = Depends(require_permission(Phase.HOMOLOGATION.value)),
    engine: TransitionEngine = Depends(get_transition_engine),
):
    """Update the utility homologation status.

    The rejection reason is kept as the phase's pendencies text.
    """
    return await _apply(engine, project_id, Phase.HOMOLOGATION, request, user, request.rejection_reason)


@router.put("/{project_id}/kit", response_model=PhaseUpdateResponse)
async def update_kit(
    project_id: uuid.UUID,
    request: KitUpdateRequest,
    user: AuthUser = Depends(require_permission("kit")),
    engine: TransitionEngine = Depends(get_transition_engine),
):
    """Record kit purchase and equipment. Gates nothing."""
    equipment = request.model_dump(mode="json", exclude_unset=True, exclude={"kit_purchased"})
    result = await engine.record_kit_purchase(
        project_id,
        request.kit_purchased,
        equipment,
        actor_role=user.role.value,
        correlation_id=request_correlation_uuid(),
    )
    return _to_response(result)
