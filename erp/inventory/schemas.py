"""Inventory Pydantic schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from erp.common.constants import DEFAULT_LOW_STOCK_THRESHOLD


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    sku: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., ge=0)
    cost: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    low_stock_threshold: int = Field(DEFAULT_LOW_STOCK_THRESHOLD, ge=0)
    stock: int = Field(0, ge=0, description="Initial quantity in the main warehouse")


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    sku: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)


class ProductOut(BaseModel):
    id: int
    name: str
    sku: str
    price: float
    cost: Optional[float] = None
    stock: int
    category: str = "General"
    status: str
    description: str = ""
    low_stock_threshold: int


class StockUpdate(BaseModel):
    quantity: int = Field(..., ge=0)


class StockAlertOut(BaseModel):
    id: int
    name: str
    sku: str
    current_stock: int
    threshold: int
    status: str = "low"
