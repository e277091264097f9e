"""Inventory router — products, categories and stock alerts.

Routes:
    /products               — List, create products
    /products/{id}          — Get, update, delete a product
    /products/{id}/stock    — Set the on-hand quantity
    /categories             — Product categories
    /stock-alerts           — Products at or below their threshold
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from erp.auth.dependencies import get_current_user
from erp.common.constants import PRODUCT_CATEGORIES
from erp.database import get_db
from erp.inventory.models import Product
from erp.inventory.schemas import (
    ProductCreate,
    ProductOut,
    ProductUpdate,
    StockAlertOut,
    StockUpdate,
)
from erp.inventory.service import ProductService

router = APIRouter(prefix="", tags=["inventory"], dependencies=[Depends(get_current_user)])


def _product_out(product: Product) -> ProductOut:
    total = product.total_stock
    return ProductOut(
        id=product.id,
        name=product.name,
        sku=product.sku,
        price=product.price,
        cost=product.cost,
        stock=total,
        category=product.category or "General",
        status="in-stock" if total > 0 else "out-of-stock",
        description=product.description or "",
        low_stock_threshold=product.low_stock_threshold,
    )


# ── Products ────────────────────────────────────────────────────────

@router.get("/products", response_model=list[ProductOut])
async def list_products(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Name or SKU"),
    db: AsyncSession = Depends(get_db),
):
    products = await ProductService.list_products(db, category=category, search=search)
    return [_product_out(p) for p in products]


@router.get("/products/{product_id}", response_model=ProductOut)
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    return _product_out(await ProductService.get_product(db, product_id))


@router.post("/products", response_model=ProductOut, status_code=201)
async def create_product(body: ProductCreate, db: AsyncSession = Depends(get_db)):
    return _product_out(await ProductService.create_product(db, body.model_dump()))


@router.put("/products/{product_id}", response_model=ProductOut)
async def update_product(
    product_id: int,
    body: ProductUpdate,
    db: AsyncSession = Depends(get_db),
):
    product = await ProductService.update_product(
        db, product_id, body.model_dump(exclude_unset=True),
    )
    return _product_out(product)


@router.delete("/products/{product_id}", status_code=204)
async def delete_product(product_id: int, db: AsyncSession = Depends(get_db)):
    await ProductService.delete_product(db, product_id)
    return Response(status_code=204)


@router.patch("/products/{product_id}/stock", response_model=ProductOut)
async def update_stock(
    product_id: int,
    body: StockUpdate,
    db: AsyncSession = Depends(get_db),
):
    return _product_out(await ProductService.set_stock(db, product_id, body.quantity))


# ── Lookups ─────────────────────────────────────────────────────────

@router.get("/categories", response_model=list[str])
async def list_categories():
    return PRODUCT_CATEGORIES


@router.get("/stock-alerts", response_model=list[StockAlertOut])
async def stock_alerts(db: AsyncSession = Depends(get_db)):
    return [
        StockAlertOut(
            id=product.id,
            name=product.name,
            sku=product.sku,
            current_stock=total,
            threshold=product.low_stock_threshold,
        )
        for product, total in await ProductService.low_stock(db)
    ]
