"""Search router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from erp.auth.dependencies import get_current_user
from erp.database import get_db
from erp.search.schemas import SearchResult
from erp.search.service import SearchService

router = APIRouter(prefix="", tags=["search"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=list[SearchResult])
async def global_search(
    q: str = Query("", description="At least two characters"),
    db: AsyncSession = Depends(get_db),
):
    return await SearchService.search(db, q)
