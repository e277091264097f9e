"""Automation Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class AlertOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    title: str
    message: str
    severity: str
    target_id: Optional[int] = None
    target_type: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[int] = None


class TriggerResult(BaseModel):
    processed: int


class TriggerResponse(BaseModel):
    message: str
    data: TriggerResult
