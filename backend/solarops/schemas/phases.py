"""Pydantic schemas for phase update requests and responses."""

from pydantic import BaseModel, Field

from solarops.domain.attributes import PaymentMethod, StructureType


class CommercialUpdateRequest(BaseModel):
    """Commercial proposal update. ``approved`` requires value and payment method."""

    status: str = Field(..., min_length=1)
    proposal_value: str | None = None
    payment_method: PaymentMethod | None = None
    notes: str | None = None
    contract_url: str | None = None
    pendencies: str | None = None


class TechnicalUpdateRequest(BaseModel):
    """Technical inspection update.

    ``inspection_media`` carries URLs of files uploaded with this request;
    they are appended to the media already on file.
    """

    status: str = Field(..., min_length=1)
    entrance_pattern: str | None = None
    grounding: str | None = None
    roof_structure: str | None = None
    roof_overview: str | None = None
    breaker_box: str | None = None
    structure_type: StructureType | None = None
    module_quantity: int | None = Field(default=None, ge=0)
    reinforcement_needed: bool | None = None
    observations: str | None = None
    inspection_media: list[str] = Field(default_factory=list)
    pendencies: str | None = None


class InstallationUpdateRequest(BaseModel):
    """Installation photo evidence. Missing photos need pendencies to advance."""

    status: str = Field(..., min_length=1)
    photo_modules: str | None = None
    photo_inverter: str | None = None
    photo_inverter_label: str | None = None
    photo_roof_sealing: str | None = None
    photo_grounding: str | None = None
    photo_ac_voltage: str | None = None
    photo_dc_voltage: str | None = None
    photo_generation_plate: str | None = None
    photo_ac_stringbox: str | None = None
    photo_connection_point: str | None = None
    pendencies: str | None = None


class HomologationUpdateRequest(BaseModel):
    status: str = Field(..., min_length=1)
    rejection_reason: str | None = None


class KitUpdateRequest(BaseModel):
    kit_purchased: bool
    inverter_model: str | None = None
    inverter_power: str | None = None
    module_model: str | None = None
    module_power: str | None = None


class PhaseUpdateResponse(BaseModel):
    project_id: str
    phase: str
    status: str
    current_stage: str
    project_status: str
    stage_changed: bool = False
