"""Tests for phase attribute merge rules."""

import pytest

from solarops.domain.attributes import (
    INSTALLATION_PHOTO_SLOTS,
    is_present,
    merge_media,
    merge_phase_attributes,
    merge_photo_slots,
)
from solarops.domain.statuses import Phase

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("value", [None, "", "   ", [], {}])
def test_blank_values_are_not_present(value):
    """None, empty strings and empty collections count as absent."""
    assert not is_present(value)


@pytest.mark.parametrize("value", ["x", 0, False, ["a"]])
def test_non_blank_values_are_present(value):
    """Zero, False and non-empty values count as present."""
    assert is_present(value)


class TestMergeMedia:
    """Test additive inspection media merge."""

    def test_union_keeps_existing_first(self):
        """Existing media keeps its position ahead of new uploads."""
        assert merge_media(["a", "b"], ["b", "c"]) == ["a", "b", "c"]

    def test_resubmitting_same_urls_is_a_no_op(self):
        """Resubmitting known URLs adds nothing."""
        assert merge_media(["a", "b"], ["a", "b"]) == ["a", "b"]

    def test_empty_upload_keeps_existing(self):
        """An empty upload leaves stored media alone."""
        assert merge_media(["a"], []) == ["a"]
        assert merge_media(None, None) == []


class TestMergePhotoSlots:
    """Test per-slot installation photo merge."""

    def test_blank_upload_never_clears_a_slot(self):
        """A blank value never clears a stored photo."""
        merged = merge_photo_slots({"photo_modules": "m.jpg"}, {"photo_modules": ""})
        assert merged == {"photo_modules": "m.jpg"}

    def test_new_upload_replaces_slot(self):
        """A new upload replaces the stored photo for that slot."""
        merged = merge_photo_slots({"photo_modules": "old.jpg"}, {"photo_modules": "new.jpg"})
        assert merged["photo_modules"] == "new.jpg"

    def test_unknown_keys_are_ignored(self):
        """Keys outside the photo slots are ignored."""
        assert merge_photo_slots({}, {"photo_selfie": "x.jpg"}) == {}


class TestMergePhaseAttributes:
    """Test the full attribute merge for a phase write."""

    def test_plain_fields_replace_verbatim(self):
        """Plain fields overwrite the stored value."""
        merged = merge_phase_attributes(
            Phase.COMMERCIAL,
            {"proposal_value": "15000", "notes": "call back"},
            {"proposal_value": "14000", "notes": None},
        )
        assert merged == {"proposal_value": "14000", "notes": None}

    def test_omitted_fields_are_kept(self):
        """Fields not submitted keep their stored value."""
        merged = merge_phase_attributes(Phase.COMMERCIAL, {"payment_method": "cash"}, {"proposal_value": "1"})
        assert merged == {"payment_method": "cash", "proposal_value": "1"}

    def test_inspection_media_is_additive(self):
        """Technical inspection media is unioned, not replaced."""
        merged = merge_phase_attributes(
            Phase.TECHNICAL,
            {"inspection_media": ["a.jpg", "b.jpg"]},
            {"inspection_media": ["c.jpg"]},
        )
        assert merged["inspection_media"] == ["a.jpg", "b.jpg", "c.jpg"]

    def test_installation_slots_merge_per_slot(self):
        """Installation photos merge slot by slot."""
        existing = {slot: f"{slot}.jpg" for slot in INSTALLATION_PHOTO_SLOTS[:5]}
        submitted = {slot: f"{slot}-new.jpg" for slot in INSTALLATION_PHOTO_SLOTS[5:]}
        submitted[INSTALLATION_PHOTO_SLOTS[0]] = ""

        merged = merge_phase_attributes(Phase.INSTALLATION, existing, submitted)

        assert len(merged) == len(INSTALLATION_PHOTO_SLOTS)
        assert merged[INSTALLATION_PHOTO_SLOTS[0]] == f"{INSTALLATION_PHOTO_SLOTS[0]}.jpg"

    def test_merge_does_not_mutate_inputs(self):
        """Merging returns a new mapping and leaves inputs unchanged."""
        existing = {"inspection_media": ["a"]}
        merge_phase_attributes(Phase.TECHNICAL, existing, {"inspection_media": ["b"]})
        assert existing == {"inspection_media": ["a"]}
