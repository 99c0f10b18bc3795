"""PhaseRecord model: per-phase status and attributes of a project."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid

from solarops.db.base import Base, JSONType


class PhaseRecord(Base):
    __tablename__ = "phase_records"
    __table_args__ = (UniqueConstraint("project_id", "phase", name="uq_project_phase"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    phase = Column(String(32), nullable=False)  # commercial, technical, installation, homologation

    status = Column(String(50), nullable=False, default="not_started")

    # Phase-specific fields, e.g. {"proposal_value": "15000", "payment_method": "financing"}
    attributes = Column(JSONType, nullable=False, default=dict)

    # Free-text explanation while blocked; rejection reason for homologation
    pendencies = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC)
    )
