"""Re-export all models so Base.metadata sees them."""

from solarops.db.models.client import Client
from solarops.db.models.document import Document
from solarops.db.models.phase_record import PhaseRecord
from solarops.db.models.project import Project
from solarops.db.models.stage_event import StageEvent

__all__ = [
    "Client",
    "Document",
    "PhaseRecord",
    "Project",
    "StageEvent",
]
