"""Phase attribute catalogues and merge rules.

Pure domain logic. Media evidence is additive: inspection media is a union
by URL and installation photo slots are only ever filled, never emptied.
"""

from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Any

from solarops.domain.statuses import Phase


class PaymentMethod(StrEnum):
    CASH = "cash"
    FINANCING = "financing"
    CARD = "card"


class StructureType(StrEnum):
    """Roof/mounting structure recorded during the technical inspection."""

    CERAMIC = "ceramic"
    FIBER_CEMENT = "fiber_cement"
    METAL = "metal"
    SLAB = "slab"
    GROUND = "ground"
    OTHER = "other"


COMMERCIAL_REQUIRED_FIELDS: tuple[str, ...] = ("proposal_value", "payment_method")
COMMERCIAL_FIELDS: tuple[str, ...] = COMMERCIAL_REQUIRED_FIELDS + ("notes", "contract_url")

TECHNICAL_REQUIRED_FIELDS: tuple[str, ...] = (
    "entrance_pattern",
    "grounding",
    "roof_structure",
    "roof_overview",
    "breaker_box",
    "structure_type",
    "module_quantity",
)

# Kit procurement data lives on the technical record
KIT_EQUIPMENT_FIELDS: tuple[str, ...] = (
    "inverter_model",
    "inverter_power",
    "module_model",
    "module_power",
)

TECHNICAL_FIELDS: tuple[str, ...] = (
    TECHNICAL_REQUIRED_FIELDS
    + ("reinforcement_needed", "observations", "inspection_media")
    + KIT_EQUIPMENT_FIELDS
)

INSTALLATION_PHOTO_SLOTS: tuple[str, ...] = (
    "photo_modules",
    "photo_inverter",
    "photo_inverter_label",
    "photo_roof_sealing",
    "photo_grounding",
    "photo_ac_voltage",
    "photo_dc_voltage",
    "photo_generation_plate",
    "photo_ac_stringbox",
    "photo_connection_point",
)

PHASE_FIELDS: dict[Phase, tuple[str, ...]] = {
    Phase.COMMERCIAL: COMMERCIAL_FIELDS,
    Phase.TECHNICAL: TECHNICAL_FIELDS,
    Phase.INSTALLATION: INSTALLATION_PHOTO_SLOTS,
    Phase.HOMOLOGATION: (),
}

MEDIA_LIST_FIELDS = frozenset({"inspection_media"})
PHOTO_SLOT_FIELDS = frozenset(INSTALLATION_PHOTO_SLOTS)


def is_present(value: Any) -> bool:
    """A value counts as present when it is not None and not blank/empty."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) > 0
    return True


def merge_media(existing: Iterable[str] | None, incoming: Iterable[str] | None) -> list[str]:
    """Union two media URL lists, keeping first-seen order."""
    merged: list[str] = []
    seen: set[str] = set()
    for url in list(existing or []) + list(incoming or []):
        if not is_present(url) or url in seen:
            continue
        seen.add(url)
        merged.append(url)
    return merged


def merge_photo_slots(existing: Mapping[str, Any], incoming: Mapping[str, Any]) -> dict[str, str]:
    """Fill photo slots from an upload; blank uploads keep the photo on file."""
    slots = {k: v for k, v in existing.items() if k in PHOTO_SLOT_FIELDS and is_present(v)}
    for slot, url in incoming.items():
        if slot in PHOTO_SLOT_FIELDS and is_present(url):
            slots[slot] = url
    return slots


def merge_phase_attributes(
    phase: Phase,
    existing: Mapping[str, Any] | None,
    submitted: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Combine persisted and submitted attributes for a phase.

    Plain fields present in the submission replace the persisted value
    verbatim (including explicit None). Media fields merge additively.
    """
    existing = dict(existing or {})
    submitted = dict(submitted or {})
    merged = dict(existing)

    for key, value in submitted.items():
        if key in MEDIA_LIST_FIELDS:
            merged[key] = merge_media(existing.get(key), value)
        elif key in PHOTO_SLOT_FIELDS:
            continue
        else:
            merged[key] = value

    if phase == Phase.INSTALLATION:
        merged.update(merge_photo_slots(existing, submitted))

    return merged
