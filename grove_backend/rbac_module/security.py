"""Password hashing and the signed session tokens handed out at login.

A session token only names the account (``sub``) and the role it held when the
token was issued. The profile itself is looked up again on every request.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from ..config import settings
from .models import Role

REQUIRED_CLAIMS = ["sub", "role", "iat", "exp"]


class AuthError(Exception):
    pass


@dataclass(frozen=True)
class SessionClaims:
    auth_id: str
    role: Role
    expires_at: datetime


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    # bcrypt raises ValueError for hashes it cannot parse.
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def issue_session_token(auth_id: str, role: Role, ttl: timedelta | None = None) -> str:
    if ttl is None:
        ttl = timedelta(minutes=settings.jwt_exp_minutes)
    issued_at = datetime.now(timezone.utc)
    claims = {"sub": auth_id, "role": Role(role).value, "iat": issued_at, "exp": issued_at + ttl}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def read_session_token(token: str) -> SessionClaims:
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthError("Token expired") from exc
    except jwt.MissingRequiredClaimError as exc:
        raise AuthError("Invalid token payload") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthError("Invalid token") from exc

    auth_id = claims["sub"]
    if not isinstance(auth_id, str) or not auth_id:
        raise AuthError("Invalid token payload")
    try:
        role = Role(claims["role"])
    except ValueError as exc:
        raise AuthError("Invalid token payload") from exc
    return SessionClaims(
        auth_id=auth_id,
        role=role,
        expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
    )
