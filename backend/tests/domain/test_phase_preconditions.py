"""Tests for phase advancement preconditions.

Pure function behavior: no DB access, deterministic, ordered missing fields.
"""

import pytest

from solarops.domain.attributes import INSTALLATION_PHOTO_SLOTS, TECHNICAL_REQUIRED_FIELDS
from solarops.domain.documents import is_documentation_complete, missing_document_types
from solarops.domain.preconditions import check_preconditions
from solarops.domain.statuses import Phase

pytestmark = pytest.mark.unit

FULL_TECHNICAL = {
    "entrance_pattern": "entrance.jpg",
    "grounding": "grounding.jpg",
    "roof_structure": "roof.jpg",
    "roof_overview": "overview.jpg",
    "breaker_box": "breaker.jpg",
    "structure_type": "ceramic",
    "module_quantity": 12,
}


class TestCommercial:
    """Test commercial approval preconditions."""

    def test_missing_both_fields(self):
        """Empty attributes report both required fields."""
        result = check_preconditions(Phase.COMMERCIAL, {}, {})
        assert not result.satisfied
        assert result.missing_fields == ["proposal_value", "payment_method"]

    def test_satisfied_by_merged_view(self):
        """Stored and submitted values together satisfy the check."""
        result = check_preconditions(
            Phase.COMMERCIAL, {"payment_method": "financing"}, {"proposal_value": "18500"}
        )
        assert result.satisfied
        assert result.missing_fields == []

    def test_blank_value_counts_as_missing(self):
        """A blank submitted value counts as missing."""
        result = check_preconditions(Phase.COMMERCIAL, {"proposal_value": "  ", "payment_method": "cash"}, {})
        assert result.missing_fields == ["proposal_value"]

    def test_explicit_none_overrides_stored_value(self):
        """Submitting None hides the stored value from validation."""
        result = check_preconditions(
            Phase.COMMERCIAL,
            {"proposal_value": None},
            {"proposal_value": "18500", "payment_method": "cash"},
        )
        assert result.missing_fields == ["proposal_value"]


class TestTechnical:
    """Test technical approval preconditions."""

    def test_all_fields_present(self):
        """A complete survey is satisfied."""
        assert check_preconditions(Phase.TECHNICAL, FULL_TECHNICAL, {}).satisfied

    def test_missing_module_quantity(self):
        """Module quantity is required."""
        attrs = {k: v for k, v in FULL_TECHNICAL.items() if k != "module_quantity"}
        result = check_preconditions(Phase.TECHNICAL, attrs, {})
        assert result.missing_fields == ["module_quantity"]

    def test_missing_fields_follow_declared_order(self):
        """Missing fields are listed in declaration order."""
        result = check_preconditions(Phase.TECHNICAL, {}, {})
        assert result.missing_fields == list(TECHNICAL_REQUIRED_FIELDS)

    def test_reinforcement_requires_observations(self):
        """Structure reinforcement needs observations."""
        result = check_preconditions(Phase.TECHNICAL, {**FULL_TECHNICAL, "reinforcement_needed": True}, {})
        assert result.missing_fields == ["observations"]

    def test_reinforcement_with_observations(self):
        """Reinforcement with observations is satisfied."""
        attrs = {**FULL_TECHNICAL, "reinforcement_needed": "true", "observations": "Add two rafters"}
        assert check_preconditions(Phase.TECHNICAL, attrs, {}).satisfied

    def test_module_quantity_zero_is_present(self):
        """Zero modules still counts as a supplied value."""
        assert check_preconditions(Phase.TECHNICAL, {**FULL_TECHNICAL, "module_quantity": 0}, {}).satisfied


class TestInstallation:
    """Test installation approval preconditions."""

    def _photos(self, count):
        return {slot: f"https://files/{slot}.jpg" for slot in INSTALLATION_PHOTO_SLOTS[:count]}

    def test_all_photos_uploaded(self):
        """All ten photo slots filled is satisfied."""
        assert check_preconditions(Phase.INSTALLATION, self._photos(10), {}).satisfied

    def test_photos_already_on_file_count(self):
        """Photos already stored count toward the requirement."""
        assert check_preconditions(Phase.INSTALLATION, {}, self._photos(10)).satisfied

    def test_missing_photo_without_pendencies(self):
        """A missing photo without pendencies blocks approval."""
        result = check_preconditions(Phase.INSTALLATION, self._photos(9), {})
        assert result.missing_fields == ["photo_connection_point", "pendencies"]

    def test_missing_photo_waived_by_pendencies(self):
        """Pendencies text waives missing photos."""
        result = check_preconditions(
            Phase.INSTALLATION, self._photos(9), {}, pendencies="Connection point photo after utility visit"
        )
        assert result.satisfied

    def test_blank_pendencies_do_not_waive(self):
        """Whitespace pendencies do not waive missing photos."""
        result = check_preconditions(Phase.INSTALLATION, self._photos(9), {}, pendencies="   ")
        assert not result.satisfied


class TestHomologation:
    """Test homologation approval preconditions."""

    def test_requires_all_mandatory_documents(self):
        """Each mandatory document type must be on file."""
        result = check_preconditions(Phase.HOMOLOGATION, {}, {}, document_types=["rg_cnh", "art"])
        assert result.missing_fields == ["documents.bill_generator"]

    def test_optional_documents_do_not_count(self):
        """Optional document types do not satisfy the requirement."""
        result = check_preconditions(
            Phase.HOMOLOGATION, {}, {}, document_types=["bill_beneficiary", "other"]
        )
        assert result.missing_fields == ["documents.rg_cnh", "documents.art", "documents.bill_generator"]

    def test_documentation_complete(self):
        """All mandatory documents on file is satisfied."""
        types = ["rg_cnh", "art", "bill_generator", "rg_cnh"]
        assert check_preconditions(Phase.HOMOLOGATION, {}, {}, document_types=types).satisfied
        assert is_documentation_complete(types)
        assert missing_document_types(types) == []
