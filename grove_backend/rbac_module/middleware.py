from collections.abc import Callable

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db_session
from .models import Role
from .schemas import UserProfile
from .security import AuthError, read_session_token
from .services import resolve_profile


def _parse_token(auth_header: str | None) -> str:
    if not auth_header:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing Authorization header")
    parts = auth_header.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth scheme")
    return parts[1].strip()


def get_current_profile(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> UserProfile:
    token = _parse_token(authorization)
    try:
        claims = read_session_token(token)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    profile = resolve_profile(db, claims.auth_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user")
    return profile


def require_roles(*allowed_roles: Role) -> Callable:
    def dependency(profile: UserProfile = Depends(get_current_profile)) -> UserProfile:
        if profile.role not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role privileges")
        return profile

    return dependency


def require_module(module_id: str, *allowed_roles: Role) -> Callable:
    role_dependency = require_roles(*allowed_roles) if allowed_roles else get_current_profile

    def dependency(profile: UserProfile = Depends(role_dependency)) -> UserProfile:
        if not profile.has_module(module_id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Module {module_id} is not unlocked for this school",
            )
        return profile

    return dependency


def require_school(profile: UserProfile) -> str:
    if not profile.school_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is not linked to a school")
    return profile.school_id
