"""Inventory service layer — products and stock levels.

Stock edits through the API land in the first warehouse; a
``Main Warehouse`` is created the first time one is needed.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from erp.common.constants import DEFAULT_WAREHOUSE_NAME
from erp.common.exceptions import ConflictError, NotFoundException
from erp.common.filters import apply_filters, apply_search
from erp.inventory.models import Product, Stock, Warehouse

logger = logging.getLogger(__name__)


class ProductService:
    """Async CRUD for products plus warehouse stock handling."""

    # ── Read ────────────────────────────────────────────────────────

    @staticmethod
    async def list_products(
        db: AsyncSession,
        *,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Sequence[Product]:
        query = select(Product).options(selectinload(Product.stock))
        query = apply_filters(query, Product, {"category": category})
        query = apply_search(query, Product, search, ["name", "sku"])
        result = await db.execute(query.order_by(Product.name, Product.id))
        return result.scalars().all()

    @staticmethod
    async def get_product(db: AsyncSession, product_id: int) -> Product:
        product = await db.get(
            Product,
            product_id,
            options=[selectinload(Product.stock)],
            populate_existing=True,
        )
        if product is None:
            raise NotFoundException("Product", product_id)
        return product

    # ── Write ───────────────────────────────────────────────────────

    @staticmethod
    async def create_product(db: AsyncSession, data: dict[str, Any]) -> Product:
        quantity = data.pop("stock", 0)
        await ProductService._ensure_unique_sku(db, data["sku"])

        product = Product(**data)
        db.add(product)
        await db.flush()

        if quantity > 0:
            await ProductService.set_stock(db, product.id, quantity)
        return await ProductService.get_product(db, product.id)

    @staticmethod
    async def update_product(
        db: AsyncSession, product_id: int, data: dict[str, Any],
    ) -> Product:
        product = await ProductService.get_product(db, product_id)
        quantity = data.pop("stock", None)

        if data.get("sku") and data["sku"] != product.sku:
            await ProductService._ensure_unique_sku(db, data["sku"])

        for key, value in data.items():
            setattr(product, key, value)
        await db.flush()

        if quantity is not None:
            await ProductService.set_stock(db, product_id, quantity)
        return await ProductService.get_product(db, product_id)

    @staticmethod
    async def delete_product(db: AsyncSession, product_id: int) -> None:
        product = await ProductService.get_product(db, product_id)
        await db.delete(product)
        await db.flush()

    # ── Stock ───────────────────────────────────────────────────────

    @staticmethod
    async def set_stock(db: AsyncSession, product_id: int, quantity: int) -> Product:
        """Overwrite the product's first stock row, creating one if needed."""
        result = await db.execute(
            select(Stock).where(Stock.product_id == product_id).order_by(Stock.id)
        )
        stock = result.scalars().first()
        if stock is None:
            await ProductService.get_product(db, product_id)
            warehouse = await ProductService.default_warehouse(db)
            stock = Stock(product_id=product_id, warehouse_id=warehouse.id, quantity=quantity)
            db.add(stock)
        else:
            stock.quantity = quantity
        await db.flush()
        logger.info("Stock for product %d set to %d", product_id, quantity)
        return await ProductService.get_product(db, product_id)

    @staticmethod
    async def default_warehouse(db: AsyncSession) -> Warehouse:
        result = await db.execute(select(Warehouse).order_by(Warehouse.id))
        warehouse = result.scalars().first()
        if warehouse is None:
            warehouse = Warehouse(name=DEFAULT_WAREHOUSE_NAME)
            db.add(warehouse)
            await db.flush()
        return warehouse

    @staticmethod
    async def low_stock(db: AsyncSession) -> list[tuple[Product, int]]:
        """Products at or below their own threshold, with their total stock."""
        products = await ProductService.list_products(db)
        levels = [(p, p.total_stock) for p in products]
        return [(p, total) for p, total in levels if total <= p.low_stock_threshold]

    @staticmethod
    async def _ensure_unique_sku(db: AsyncSession, sku: str) -> None:
        existing = await db.execute(select(Product.id).where(Product.sku == sku))
        if existing.scalar() is not None:
            raise ConflictError("sku", sku)
