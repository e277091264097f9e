"""Inventory ORM models: Product, Warehouse, Stock."""

from __future__ import annotations

from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp.common.constants import COGS_RATIO, DEFAULT_LOW_STOCK_THRESHOLD
from erp.database import Base

Money = sa.Numeric(12, 2, asdecimal=False)


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    sku: Mapped[str] = mapped_column(sa.String(100), unique=True, nullable=False)
    price: Mapped[float] = mapped_column(Money, nullable=False)
    cost: Mapped[Optional[float]] = mapped_column(Money)
    category: Mapped[Optional[str]] = mapped_column(sa.String(100))
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    low_stock_threshold: Mapped[int] = mapped_column(
        sa.Integer, default=DEFAULT_LOW_STOCK_THRESHOLD, nullable=False,
    )

    stock: Mapped[list["Stock"]] = relationship(
        back_populates="product", cascade="all, delete-orphan",
    )

    @property
    def total_stock(self) -> int:
        """Sum across warehouses. Requires ``stock`` to be loaded."""
        return sum(s.quantity for s in self.stock)

    @property
    def unit_cost(self) -> float:
        """Cost price; a missing or zero cost is estimated from the sale price."""
        return self.cost or self.price * COGS_RATIO


class Warehouse(Base):
    __tablename__ = "warehouses"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(sa.String(200))

    stock: Mapped[list["Stock"]] = relationship(back_populates="warehouse")


class Stock(Base):
    __tablename__ = "stock"

    id: Mapped[int] = mapped_column(primary_key=True)
    product_id: Mapped[int] = mapped_column(
        sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False,
    )
    warehouse_id: Mapped[int] = mapped_column(
        sa.ForeignKey("warehouses.id", ondelete="CASCADE"), nullable=False,
    )
    quantity: Mapped[int] = mapped_column(sa.Integer, default=0, nullable=False)

    product: Mapped["Product"] = relationship(back_populates="stock")
    warehouse: Mapped["Warehouse"] = relationship(back_populates="stock")
