"""StageEvent model: append-only project timeline events."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid

from solarops.db.base import Base, JSONType


class StageEvent(Base):
    __tablename__ = "stage_events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    correlation_id = Column(Uuid, nullable=False, default=uuid.uuid4, index=True)

    event_type = Column(String(50), nullable=False)  # project_created, phase_updated, stage_changed, kit_updated, document_added, document_removed
    phase = Column(String(32), nullable=True)
    from_status = Column(String(50), nullable=True)
    to_status = Column(String(50), nullable=True)
    from_stage = Column(String(50), nullable=True)
    to_stage = Column(String(50), nullable=True)
    actor = Column(String(50), nullable=False)  # role of the caller, or "system"
    detail = Column(JSONType, nullable=False, default=dict)
    reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
    # NO updated_at -- events are immutable (append-only)
