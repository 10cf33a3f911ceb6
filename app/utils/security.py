"""
Caller identity: decode bearer tokens into an Actor.

Tokens are issued by the auth service; this module only verifies them.
create_access_token exists for seeding scripts and tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from fastapi import Depends, Header, HTTPException, status
from jose import JWTError, jwt

from app.core.settings import settings
from app.models.user import Actor

logger = logging.getLogger(__name__)

TOKEN_TTL_MINUTES = 60 * 24 * 14  # 14 days


def create_access_token(user_id: str, role: str, ttl_minutes: int = TOKEN_TTL_MINUTES) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=ttl_minutes),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Actor:
    """
    Raises:
        HTTPException 401: Token invalid, expired or missing claims
    """
    try:
        data = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected token: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    user_id = data.get("sub")
    role = data.get("role")
    if not user_id or not role:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token is missing user claims")
    return Actor(id=str(user_id), role=str(role))


def get_current_actor(authorization: Optional[str] = Header(None)) -> Actor:
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing Authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth scheme")
    return decode_access_token(token.strip())


def require_roles(*roles: str):
    """
    Dependency factory: the caller must hold one of roles.

    Usage:
        actor: Actor = Depends(require_roles("admin", "staff"))
    """
    def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return actor

    return dependency
