"""Automation ORM model: Alert."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from erp.common.constants import AlertStatus
from erp.database import Base


class Alert(Base):
    """A business condition detected by one of the scheduled rules."""

    __tablename__ = "alerts"

    id: Mapped[int] = mapped_column(primary_key=True)
    type: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    message: Mapped[str] = mapped_column(sa.Text, nullable=False)
    severity: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    target_id: Mapped[Optional[int]] = mapped_column(sa.Integer)
    target_type: Mapped[Optional[str]] = mapped_column(sa.String(50))
    status: Mapped[str] = mapped_column(
        sa.String(20), default=AlertStatus.active.value, nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    resolved_by: Mapped[Optional[int]] = mapped_column(
        sa.ForeignKey("users.id", ondelete="SET NULL"),
    )
