"""Project ORM models: Project, Task."""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp.common.constants import TaskStatus
from erp.database import Base

if TYPE_CHECKING:
    from erp.crm.models import Customer
    from erp.hr.models import Employee


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    customer_id: Mapped[int] = mapped_column(
        sa.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    start_date: Mapped[Optional[dt.date]] = mapped_column(sa.Date)
    end_date: Mapped[Optional[dt.date]] = mapped_column(sa.Date)
    budget: Mapped[Optional[float]] = mapped_column(sa.Numeric(12, 2, asdecimal=False))
    priority: Mapped[str] = mapped_column(sa.String(20), default="medium")
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )

    # Relationships
    customer: Mapped["Customer"] = relationship(back_populates="projects")
    tasks: Mapped[list["Task"]] = relationship(
        back_populates="project", cascade="all, delete-orphan",
    )


class Task(Base):
    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    project_id: Mapped[int] = mapped_column(
        sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False,
    )
    assigned_to_id: Mapped[Optional[int]] = mapped_column(
        sa.ForeignKey("employees.id", ondelete="SET NULL"),
    )
    status: Mapped[str] = mapped_column(
        sa.String(20), default=TaskStatus.pending.value, nullable=False,
    )
    priority: Mapped[str] = mapped_column(sa.String(20), default="medium")
    due_date: Mapped[Optional[dt.date]] = mapped_column(sa.Date)

    # Relationships
    project: Mapped["Project"] = relationship(back_populates="tasks")
    assigned_to: Mapped[Optional["Employee"]] = relationship(back_populates="tasks")
