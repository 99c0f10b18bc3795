"""End-to-end lifecycle: new client through homologation approval."""

import pytest

from solarops.domain.attributes import INSTALLATION_PHOTO_SLOTS
from solarops.domain.statuses import Phase

pytestmark = pytest.mark.integration

TECHNICAL_SURVEY = {
    "entrance_pattern": "https://files/entrance.jpg",
    "grounding": "https://files/grounding.jpg",
    "roof_structure": "https://files/roof.jpg",
    "roof_overview": "https://files/overview.jpg",
    "breaker_box": "https://files/breaker.jpg",
    "structure_type": "metal",
}


async def test_full_project_lifecycle(project_service, transition_engine, project_id, read_committed):
    """A project walks from intake to completion, with each gate rejecting first."""
    project, _ = await read_committed(project_id)
    assert project.current_stage == "pending"

    # Commercial approval
    result = await transition_engine.apply_phase_update(
        project_id,
        Phase.COMMERCIAL,
        {"proposal_value": "32000", "payment_method": "financing"},
        "approved",
        actor_role="COMMERCIAL",
    )
    assert result.current_stage == "inspection"

    # Technical without module quantity is rejected
    result = await transition_engine.apply_phase_update(
        project_id, Phase.TECHNICAL, TECHNICAL_SURVEY, "approved", actor_role="TECHNICAL"
    )
    assert not result.accepted
    assert result.missing_fields == ["module_quantity"]
    project, records = await read_committed(project_id)
    assert project.current_stage == "inspection"
    assert records["technical"].status == "not_started"

    result = await transition_engine.apply_phase_update(
        project_id, Phase.TECHNICAL, {**TECHNICAL_SURVEY, "module_quantity": 20}, "approved", actor_role="TECHNICAL"
    )
    assert result.accepted
    assert result.current_stage == "installation"

    # Installation with nine of ten photos
    photos = {slot: f"https://files/{slot}.jpg" for slot in INSTALLATION_PHOTO_SLOTS[:9]}
    result = await transition_engine.apply_phase_update(
        project_id, Phase.INSTALLATION, photos, "approved", actor_role="TECHNICAL"
    )
    assert not result.accepted
    assert result.missing_fields == ["photo_connection_point", "pendencies"]

    result = await transition_engine.apply_phase_update(
        project_id,
        Phase.INSTALLATION,
        photos,
        "approved",
        actor_role="TECHNICAL",
        pendencies="Connection point photo pending utility meter swap",
    )
    assert result.accepted
    assert result.current_stage == "homologation"

    # Homologation with two of three mandatory documents
    await project_service.add_document(project_id, "rg_cnh", "https://files/rg.pdf", None, "u-1", "ADMIN")
    await project_service.add_document(project_id, "art", "https://files/art.pdf", None, "u-1", "ADMIN")

    result = await transition_engine.apply_phase_update(
        project_id, Phase.HOMOLOGATION, {}, "connection_point_approved", actor_role="ADMIN"
    )
    assert not result.accepted
    assert result.missing_fields == ["documents.bill_generator"]

    await project_service.add_document(project_id, "bill_generator", "https://files/bill.pdf", None, "u-1", "ADMIN")
    result = await transition_engine.apply_phase_update(
        project_id, Phase.HOMOLOGATION, {}, "connection_point_approved", actor_role="ADMIN"
    )
    assert result.accepted

    project, records = await read_committed(project_id)
    assert project.current_stage == "completed"
    assert project.status == "completed"
    assert records["installation"].pendencies == "Connection point photo pending utility meter swap"

    detail = await project_service.get_project_detail(project_id)
    assert detail.documentation_complete is True
    assert detail.missing_documents == []
