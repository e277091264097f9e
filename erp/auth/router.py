"""Auth router — register, login, profile, logout."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from erp.auth.dependencies import get_current_user
from erp.auth.models import User
from erp.auth.schemas import (
    EmployeeBrief,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from erp.auth.service import authenticate, create_access_token, register_user
from erp.database import get_db

router = APIRouter(prefix="", tags=["auth"])


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        role=user.role.name,
        created_at=user.created_at,
        employee=EmployeeBrief.model_validate(user.employee) if user.employee else None,
    )


def _token_response(user: User) -> TokenResponse:
    token, expires_in = create_access_token(user)
    return TokenResponse(access_token=token, expires_in=expires_in, user=_user_response(user))


# ── POST /register ──────────────────────────────────────────────────

@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    user = await register_user(db, body.email, body.password, body.role)
    return _token_response(user)


# ── POST /login ─────────────────────────────────────────────────────

@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await authenticate(db, body.email, body.password)
    return _token_response(user)


# ── GET /profile ────────────────────────────────────────────────────

@router.get("/profile", response_model=UserResponse)
async def profile(user: User = Depends(get_current_user)):
    return _user_response(user)


# ── POST /logout ────────────────────────────────────────────────────

@router.post("/logout")
async def logout(user: User = Depends(get_current_user)):
    """Tokens are stateless; the client discards its copy."""
    return {"message": "Logged out successfully"}
