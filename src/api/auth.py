from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from .models import UserEntity
from .repositories import UserRepository, get_user_repository, new_id
from .settings import get_settings

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)
_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return _pwd_context.verify(password, password_hash)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# PUBLIC_INTERFACE
def create_access_token(user_id: str) -> Tuple[str, datetime]:
    """
    Issue a signed bearer token for user_id.

    Returns:
        The encoded token and its expiry time (UTC).
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(minutes=settings.token_ttl_minutes)
    payload: Dict[str, Any] = {
        "sub": user_id,
        "jti": new_id(),
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return token, expires_at


def decode_access_token(token: str) -> Dict[str, Any]:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise _unauthorized("Not authorized, token failed") from exc


@dataclass(frozen=True)
class AuthContext:
    """The authenticated user together with the token that proved it."""

    user: UserEntity
    jti: str
    expires_at: datetime


# PUBLIC_INTERFACE
def get_auth_context(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_security),
    users: UserRepository = Depends(get_user_repository),
) -> AuthContext:
    """
    Resolve the Authorization: Bearer header to the current user.

    Raises:
        HTTPException(401) if the token is missing, malformed, expired,
        revoked by a logout, or names a user that no longer exists.
    """
    if creds is None or not creds.credentials:
        raise _unauthorized("Not authorized, no token")

    claims = decode_access_token(creds.credentials)
    user_id = claims.get("sub")
    jti = claims.get("jti")
    exp = claims.get("exp")
    if not user_id or not jti or exp is None:
        raise _unauthorized("Not authorized, token failed")

    if users.is_token_revoked(jti):
        raise _unauthorized("Not authorized, token revoked")

    user = users.get(user_id)
    if user is None:
        raise _unauthorized("Not authorized, user not found")

    return AuthContext(
        user=user,
        jti=jti,
        expires_at=datetime.fromtimestamp(int(exp), tz=timezone.utc),
    )


# PUBLIC_INTERFACE
def get_current_user(ctx: AuthContext = Depends(get_auth_context)) -> UserEntity:
    """Dependency returning only the authenticated UserEntity."""
    return ctx.user
