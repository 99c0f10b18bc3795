"""Session JWT authentication and role checks for FastAPI."""

from dataclasses import dataclass
from enum import StrEnum

import jwt as pyjwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from solarops.core.config import get_settings
from solarops.core.exceptions import PermissionDenied

_bearer_scheme = HTTPBearer(auto_error=False)

TOKEN_COOKIE = "token"


class Role(StrEnum):
    CEO = "CEO"
    ADMIN = "ADMIN"
    COMMERCIAL = "COMMERCIAL"
    TECHNICAL = "TECHNICAL"


# Which roles may write each phase (plus kit, documents and project deletion)
PHASE_ROLES: dict[str, frozenset[Role]] = {
    "commercial": frozenset({Role.CEO, Role.ADMIN, Role.COMMERCIAL}),
    "technical": frozenset({Role.CEO, Role.ADMIN, Role.TECHNICAL}),
    "installation": frozenset({Role.CEO, Role.ADMIN, Role.TECHNICAL}),
    "homologation": frozenset({Role.CEO, Role.ADMIN}),
    "kit": frozenset({Role.CEO, Role.ADMIN}),
    "documents": frozenset({Role.CEO, Role.ADMIN}),
    "delete_project": frozenset({Role.CEO}),
}


@dataclass(frozen=True)
class AuthUser:
    """Authenticated user extracted from a session JWT."""

    user_id: str
    role: Role
    name: str | None = None


def decode_access_token(token: str) -> AuthUser:
    """Verify and decode a session JWT.

    Raises ``HTTPException(401)`` on any validation failure.
    """
    settings = get_settings()
    try:
        payload = pyjwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except pyjwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except pyjwt.InvalidTokenError as exc:
        raise HTTPException(status_code=401, detail=f"Invalid token: {exc}")

    user_id = payload.get("id") or payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Token missing id claim")

    try:
        role = Role(str(payload.get("role", "")).upper())
    except ValueError:
        raise HTTPException(status_code=401, detail="Token carries an unknown role")

    return AuthUser(user_id=str(user_id), role=role, name=payload.get("name"))


async def require_auth(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> AuthUser:
    """FastAPI dependency that extracts and validates the session JWT.

    The bearer header wins over the ``token`` cookie.

    Usage::

        @router.get("/protected")
        async def protected(user: AuthUser = Depends(require_auth)):
            ...
    """
    token = credentials.credentials if credentials is not None else request.cookies.get(TOKEN_COOKIE)
    if not token:
        raise HTTPException(status_code=401, detail="Missing authorization token")

    user = decode_access_token(token)

    # Set user_id on request state for downstream use (error handlers, audit logging)
    request.state.user_id = user.user_id

    return user


def check_permission(user: AuthUser, action: str) -> None:
    """Raise PermissionDenied unless ``user.role`` may perform ``action``."""
    if user.role not in PHASE_ROLES.get(action, frozenset()):
        raise PermissionDenied(user.role.value, action)


def require_permission(action: str):
    """Dependency factory enforcing PHASE_ROLES for ``action``."""

    async def _dependency(user: AuthUser = Depends(require_auth)) -> AuthUser:
        check_permission(user, action)
        return user

    return _dependency
