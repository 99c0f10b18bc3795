"""Document types and the documentation-complete rule."""

from collections.abc import Iterable
from enum import StrEnum


class DocumentType(StrEnum):
    RG_CNH = "rg_cnh"  # identity proof
    ART = "art"  # installation-responsibility certificate
    BILL_GENERATOR = "bill_generator"
    BILL_BENEFICIARY = "bill_beneficiary"
    OTHER = "other"


DOCUMENT_TYPE_LABELS: dict[DocumentType, str] = {
    DocumentType.RG_CNH: "Identity document",
    DocumentType.ART: "Technical responsibility certificate (ART)",
    DocumentType.BILL_GENERATOR: "Generator unit utility bill",
    DocumentType.BILL_BENEFICIARY: "Beneficiary unit utility bill",
    DocumentType.OTHER: "Other",
}

MANDATORY_DOCUMENT_TYPES: tuple[DocumentType, ...] = (
    DocumentType.RG_CNH,
    DocumentType.ART,
    DocumentType.BILL_GENERATOR,
)


def missing_document_types(present: Iterable[str]) -> list[DocumentType]:
    """Return mandatory document types absent from ``present``, in checklist order."""
    have = set(present)
    return [doc_type for doc_type in MANDATORY_DOCUMENT_TYPES if doc_type not in have]


def is_documentation_complete(present: Iterable[str]) -> bool:
    return not missing_document_types(present)
