"""Auth Pydantic schemas for request / response validation."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ── Requests ────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    role: Optional[str] = None


# ── Responses ───────────────────────────────────────────────────────

class EmployeeBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    position: Optional[str] = None


class UserResponse(BaseModel):
    id: int
    email: str
    role: str
    created_at: Optional[datetime] = None
    employee: Optional[EmployeeBrief] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
