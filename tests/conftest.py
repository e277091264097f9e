"""Shared test fixtures — async DB, client, auth helpers, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL. Mail
goes through ``FakeTransport`` instead of SMTP.
"""

from __future__ import annotations

import os

# Settings are read at import time; configure them before anything else.
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DB_AUTO_CREATE", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date, timedelta
from typing import AsyncGenerator, Iterable, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

import erp.models  # noqa: F401
from erp.accounting.models import Invoice, RecurringInvoice, Transaction
from erp.auth.models import User
from erp.auth.service import create_access_token, register_user
from erp.common.constants import ADMIN_ROLE, DEFAULT_ROLE
from erp.crm.models import Customer
from erp.database import Base, get_db
from erp.dependencies import get_mail_transport
from erp.hr.models import Employee
from erp.hr.service import DepartmentService
from erp.inventory.models import Product, Stock, Warehouse
from erp.main import create_app
from erp.notifications.service import EmailService
from erp.notifications.transport import OutgoingEmail
from erp.projects.models import Project, Task

# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Mail ────────────────────────────────────────────────────────────

class FakeTransport:
    """Records outgoing mail.

    ``fail`` makes every send raise; ``fail_for`` makes only sends to those
    addresses raise.
    """

    def __init__(self, fail: bool = False, fail_for: Iterable[str] = ()) -> None:
        self.fail = fail
        self.fail_for = set(fail_for)
        self.sent: list[OutgoingEmail] = []

    async def send(self, message: OutgoingEmail) -> None:
        if self.fail or message.to in self.fail_for:
            raise ConnectionError("SMTP server unavailable")
        self.sent.append(message)

    @property
    def recipients(self) -> list[str]:
        return [m.to for m in self.sent]


@pytest.fixture
def mail_transport() -> FakeTransport:
    return FakeTransport()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app(mail_transport):
    """Create a fresh app instance with DB and mail dependencies overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    application.dependency_overrides[get_mail_transport] = lambda: mail_transport
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


@pytest.fixture
async def email_templates(db, mail_transport) -> None:
    """Seed the built-in templates (the lifespan does not run under ASGITransport)."""
    await EmailService(db, mail_transport).seed_default_templates()


# ── Auth helpers ────────────────────────────────────────────────────

def bearer(user: User) -> dict[str, str]:
    token, _ = create_access_token(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin_user(db) -> User:
    user = await register_user(db, "admin@example.com", "admin-password", ADMIN_ROLE)
    await db.commit()
    return user


@pytest.fixture
async def auth_headers(admin_user) -> dict[str, str]:
    """Bearer headers for an admin."""
    return bearer(admin_user)


@pytest.fixture
async def user_headers(db) -> dict[str, str]:
    """Bearer headers for a plain (non-admin) user."""
    user = await register_user(db, "staff@example.com", "staff-password", DEFAULT_ROLE)
    await db.commit()
    return bearer(user)


# ── Model factories ─────────────────────────────────────────────────

async def make_employee(
    db: AsyncSession,
    *,
    email: str = "jane.doe@example.com",
    first_name: str = "Jane",
    last_name: str = "Doe",
    department: str = "Engineering",
    position: Optional[str] = "Developer",
    salary: Optional[float] = 4800.0,
    hourly_rate: Optional[float] = None,
    status: str = "active",
    user_id: Optional[int] = None,
) -> Employee:
    dept = await DepartmentService.get_or_create(db, department)
    employee = Employee(
        first_name=first_name,
        last_name=last_name,
        email=email,
        position=position,
        department_id=dept.id,
        hire_date=date(2023, 3, 1),
        salary=salary,
        hourly_rate=hourly_rate,
        status=status,
        user_id=user_id,
    )
    db.add(employee)
    await db.commit()
    return employee


async def make_customer(
    db: AsyncSession,
    *,
    name: str = "Acme Corp",
    email: Optional[str] = "billing@acme.example",
    company: Optional[str] = "Acme",
) -> Customer:
    customer = Customer(name=name, email=email, company=company)
    db.add(customer)
    await db.commit()
    return customer


async def make_invoice(
    db: AsyncSession,
    customer: Customer,
    *,
    amount: float = 1000.0,
    invoice_date: Optional[date] = None,
    due_date: Optional[date] = None,
    status: str = "pending",
) -> Invoice:
    invoice_date = invoice_date or date.today()
    invoice = Invoice(
        customer_id=customer.id,
        amount=amount,
        date=invoice_date,
        due_date=due_date or invoice_date + timedelta(days=30),
        status=status,
    )
    db.add(invoice)
    await db.commit()
    return invoice


async def make_transaction(
    db: AsyncSession,
    *,
    amount: float,
    type: str = "income",
    txn_date: Optional[date] = None,
    invoice: Optional[Invoice] = None,
    description: Optional[str] = None,
) -> Transaction:
    txn = Transaction(
        amount=amount,
        type=type,
        date=txn_date or date.today(),
        description=description,
        invoice_id=invoice.id if invoice else None,
    )
    db.add(txn)
    await db.commit()
    return txn


async def make_product(
    db: AsyncSession,
    *,
    name: str = "USB-C Cable",
    sku: str = "CBL-001",
    price: float = 20.0,
    cost: Optional[float] = None,
    quantity: Optional[int] = 50,
    threshold: int = 10,
    category: Optional[str] = "Electronics",
) -> Product:
    """Create a product; ``quantity=None`` leaves it without any stock row."""
    product = Product(
        name=name,
        sku=sku,
        price=price,
        cost=cost,
        category=category,
        low_stock_threshold=threshold,
    )
    db.add(product)
    await db.flush()
    if quantity is not None:
        warehouse = Warehouse(name="Main Warehouse")
        db.add(warehouse)
        await db.flush()
        db.add(Stock(product_id=product.id, warehouse_id=warehouse.id, quantity=quantity))
    await db.commit()
    return product


async def make_project(
    db: AsyncSession,
    customer: Customer,
    *,
    name: str = "Website Redesign",
) -> Project:
    project = Project(name=name, customer_id=customer.id, priority="high")
    db.add(project)
    await db.commit()
    return project


async def make_task(
    db: AsyncSession,
    project: Project,
    *,
    name: str = "Draft wireframes",
    assignee: Optional[Employee] = None,
    status: str = "pending",
    due_date: Optional[date] = None,
) -> Task:
    task = Task(
        name=name,
        project_id=project.id,
        assigned_to_id=assignee.id if assignee else None,
        status=status,
        due_date=due_date,
    )
    db.add(task)
    await db.commit()
    return task


async def make_recurring_invoice(
    db: AsyncSession,
    customer: Customer,
    *,
    amount: float = 250.0,
    frequency: str = "monthly",
    start_date: date = date(2024, 1, 1),
    next_due_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: str = "active",
) -> RecurringInvoice:
    recurring = RecurringInvoice(
        customer_id=customer.id,
        amount=amount,
        frequency=frequency,
        start_date=start_date,
        next_due_date=next_due_date or start_date,
        end_date=end_date,
        status=status,
    )
    db.add(recurring)
    await db.commit()
    return recurring
