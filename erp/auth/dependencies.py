"""Auth dependencies — JWT validation and role enforcement."""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from erp.auth.models import User
from erp.auth.service import decode_access_token, get_user
from erp.common.exceptions import ForbiddenException, UnauthorizedException
from erp.database import get_db


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise UnauthorizedException("Missing or invalid Authorization header.")
    return auth_header[7:]


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Validate the bearer JWT and return the authenticated User."""
    token = _extract_bearer(request)

    try:
        payload = decode_access_token(token)
    except ExpiredSignatureError:
        raise UnauthorizedException("Token has expired.")
    except JWTError:
        raise UnauthorizedException("Invalid token.")

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedException("Invalid token.")

    user = await get_user(db, user_id)
    if user is None:
        raise UnauthorizedException("User not found.")
    return user


# ── Role-based dependency ───────────────────────────────────────────

def require_role(*allowed_roles: str) -> Callable:
    """Return a FastAPI dependency that enforces role membership by name."""

    async def _check(user: User = Depends(get_current_user)) -> User:
        if user.role.name not in allowed_roles:
            raise ForbiddenException(
                detail=f"Role '{user.role.name}' is not permitted. Required: {list(allowed_roles)}.",
            )
        return user

    return _check
