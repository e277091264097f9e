"""CRM Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    company: Optional[str] = Field(None, max_length=200)
    status: str = Field("active", min_length=1, max_length=20)
    notes: Optional[str] = None


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    company: Optional[str] = Field(None, max_length=200)
    status: Optional[str] = Field(None, min_length=1, max_length=20)
    notes: Optional[str] = None


class CustomerStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=20)


class CustomerOut(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: str = ""
    company: str
    status: str
    notes: str = ""
    total_projects: int = 0
    total_invoices: int = 0
    total_revenue: float = 0
    created_at: Optional[datetime] = None


class LeadOut(BaseModel):
    """A customer seen through the sales lens."""

    id: int
    name: str
    email: Optional[str] = None
    phone: str = ""
    company: str
    status: str
    source: str = "website"
    created_at: Optional[datetime] = None


class PipelineOut(BaseModel):
    prospects: int = 0
    qualified: int = 0
    proposal: int = 0
    negotiation: int = 0
    closed: int = 0
