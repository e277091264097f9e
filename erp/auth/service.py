"""Auth service — password hashing, JWT issue/verify, registration and login."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bcrypt
from jose import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from erp.auth.models import Role, User
from erp.common.constants import DEFAULT_ROLE
from erp.common.exceptions import BadRequestException, UnauthorizedException
from erp.config import settings


# ── Passwords ───────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# ── Tokens ──────────────────────────────────────────────────────────

def create_access_token(user: User) -> tuple[str, int]:
    """Return (encoded_jwt, expires_in_seconds) for *user* (role must be loaded)."""
    expires_in = settings.JWT_EXPIRY_HOURS * 3600
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.name,
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_in


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify *token*; raises ``jose.JWTError`` on failure."""
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


# ── Users ───────────────────────────────────────────────────────────

async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .options(selectinload(User.role), selectinload(User.employee))
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def get_or_create_role(db: AsyncSession, name: str) -> Role:
    result = await db.execute(select(Role).where(Role.name == name))
    role = result.scalars().first()
    if role is None:
        role = Role(name=name)
        db.add(role)
        await db.flush()
    return role


async def register_user(
    db: AsyncSession,
    email: str,
    password: str,
    role_name: Optional[str] = None,
) -> User:
    existing = await db.execute(select(User.id).where(User.email == email))
    if existing.first() is not None:
        raise BadRequestException("User already exists")

    role = await get_or_create_role(db, role_name or DEFAULT_ROLE)
    user = User(email=email, password=hash_password(password), role_id=role.id)
    db.add(user)
    await db.flush()
    return await get_user(db, user.id)


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    result = await db.execute(
        select(User)
        .where(User.email == email)
        .options(selectinload(User.role), selectinload(User.employee))
    )
    user = result.scalars().first()
    if user is None or not verify_password(password, user.password):
        raise UnauthorizedException("Invalid credentials")
    return user
