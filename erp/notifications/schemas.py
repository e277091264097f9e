"""Notification Pydantic schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EmailTemplateUpsert(BaseModel):
    """Create or replace a template by name."""

    name: str = Field(..., min_length=1, max_length=100)
    subject: str = Field(..., min_length=1, max_length=255)
    body: str = Field(..., min_length=1)
    variables: List[str] = Field(default_factory=list)
    is_active: bool = True


class EmailTemplateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    subject: str
    body: str
    variables: List[str] = []
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EmailLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    to: str
    subject: str
    body: str
    status: str
    error: Optional[str] = None
    sent_at: Optional[datetime] = None
