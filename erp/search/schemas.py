"""Global search result schema."""

from typing import Optional

from pydantic import BaseModel


class SearchResult(BaseModel):
    type: str
    id: int
    title: str
    subtitle: str
    email: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    stock_quantity: Optional[int] = None
