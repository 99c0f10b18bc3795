"""Document model: files attached to a project for homologation."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid

from solarops.db.base import Base


class Document(Base):
    __tablename__ = "documents"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(String(32), nullable=False, default="other")  # rg_cnh, art, bill_generator, bill_beneficiary, other
    title = Column(String(255), nullable=False)
    url = Column(Text, nullable=False)  # resolved by the storage collaborator
    uploaded_by = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
