"""Project model: one solar installation per client."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Uuid

from solarops.db.base import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id = Column(Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    title = Column(String(255), nullable=False)

    # Derived from the phase records; written only by the transition engine
    current_stage = Column(String(50), nullable=False, default="pending", index=True)
    status = Column(String(50), nullable=False, default="pending", index=True)

    kit_purchased = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
