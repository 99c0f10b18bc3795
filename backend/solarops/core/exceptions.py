class SolarOpsError(Exception):
    """Base exception for the SolarOps backend."""

    pass


class NotFoundError(SolarOpsError):
    """Raised when a project, phase record or document does not exist."""

    def __init__(self, entity: str, identifier: object):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier} not found")


class PersistenceError(SolarOpsError):
    """Raised when the relational store rejects a read or write."""

    pass


class NotificationError(SolarOpsError):
    """Raised when a broadcast publish fails. Never surfaced to API callers."""

    pass


class UnknownStatusError(SolarOpsError):
    """Raised when a status token is not part of a phase's vocabulary."""

    def __init__(self, phase: str, status: object):
        self.phase = phase
        self.status = status
        super().__init__(f"Unknown {phase} status: {status!r}")


class PhaseValidationError(SolarOpsError):
    """Raised when advancement was requested but preconditions are unsatisfied."""

    def __init__(self, phase: str, missing_fields: list[str]):
        self.phase = phase
        self.missing_fields = missing_fields
        super().__init__(
            f"Cannot advance {phase}: missing {', '.join(missing_fields)}"
        )


class PermissionDenied(SolarOpsError):
    """Raised when the caller's role may not act on a phase."""

    def __init__(self, role: str, action: str):
        self.role = role
        self.action = action
        super().__init__(f"Role {role} may not {action}")
