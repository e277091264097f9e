"""Shared plumbing — health check, error envelopes, query helpers, dates."""

from __future__ import annotations

from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from erp.common.dates import add_months, month_bounds, month_key, month_label, zone_clock
from erp.common.exceptions import ConflictError
from erp.common.filters import apply_filters, apply_search, apply_sorting
from erp.hr.models import Employee
from tests.conftest import make_employee


# ── App surface ─────────────────────────────────────────────────────


async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy", "version": "1.0.0", "environment": "test"}


async def test_not_found_is_problem_json(client, auth_headers):
    resp = await client.get("/api/hr/employees/12345", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.headers["content-type"].startswith("application/problem+json")
    body = resp.json()
    assert body["title"] == "Employee Not Found"
    assert body["error"] == body["detail"]
    assert body["instance"] == "/api/hr/employees/12345"


async def test_request_validation_errors_keyed_by_field(client, auth_headers):
    resp = await client.post("/api/hr/employees", json={"first_name": "X"}, headers=auth_headers)
    assert resp.status_code == 422
    assert "email" in resp.json()["errors"]


def test_conflict_error_names_field():
    exc = ConflictError("sku", "CBL-001")
    assert exc.status_code == 409
    assert list(exc.errors) == ["sku"]


async def test_unexpected_error_is_hidden(app):
    @app.get("/api/boom")
    async def boom():
        raise RuntimeError("database exploded")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.get("/api/boom")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal Server Error"}


# ── Query helpers ───────────────────────────────────────────────────


async def _names(db, query) -> list[str]:
    return list((await db.execute(query)).scalars())


async def test_apply_filters(db):
    await make_employee(db, email="a@example.com", first_name="Ann", salary=3000)
    await make_employee(db, email="b@example.com", first_name="Ben", salary=5000)
    await make_employee(
        db, email="c@example.com", first_name="Cal", salary=7000, status="inactive",
    )
    base = select(Employee.first_name).order_by(Employee.id)

    query = apply_filters(base, Employee, {"status": "active", "salary__from": 4000})
    assert await _names(db, query) == ["Ben"]

    query = apply_filters(base, Employee, {"first_name__in": ["Ann", "Cal"], "nope": 1})
    assert await _names(db, query) == ["Ann", "Cal"]

    query = apply_filters(base, Employee, {"status": None, "salary__lt": 5000})
    assert await _names(db, query) == ["Ann"]


async def test_apply_search_and_sorting(db):
    await make_employee(db, email="ann@example.com", first_name="Ann", last_name="Zed")
    await make_employee(db, email="bob@example.com", first_name="Bob", last_name="Annex")
    await make_employee(db, email="cy@example.com", first_name="Cy", last_name="Lu")
    base = select(Employee.first_name)

    query = apply_search(base, Employee, " ANN ", ["first_name", "last_name"])
    query = apply_sorting(query, Employee, "-first_name")
    assert await _names(db, query) == ["Bob", "Ann"]

    unsorted = apply_sorting(base, Employee, "-missing")
    assert unsorted is base
    assert apply_search(base, Employee, "  ", ["first_name"]) is base


# ── Dates ───────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "start, months, expected",
    [
        (date(2024, 1, 31), 1, date(2024, 2, 29)),
        (date(2023, 1, 31), 1, date(2023, 2, 28)),
        (date(2024, 11, 15), 3, date(2025, 2, 15)),
        (date(2024, 3, 31), -1, date(2024, 2, 29)),
        (date(2024, 1, 10), -13, date(2022, 12, 10)),
    ],
)
def test_add_months(start, months, expected):
    assert add_months(start, months) == expected


def test_month_bounds():
    assert month_bounds(date(2024, 3, 15)) == (date(2024, 3, 1), date(2024, 3, 31))
    assert month_bounds(date(2024, 3, 15), -1) == (date(2024, 2, 1), date(2024, 2, 29))


def test_month_labels():
    assert month_key(date(2024, 3, 9)) == "2024-03"
    assert month_label(date(2024, 3, 9)) == "Mar 2024"


def test_zone_clock_follows_the_zone():
    ahead = zone_clock("Pacific/Kiritimati")()
    behind = zone_clock("Etc/GMT+12")()
    assert (ahead - behind).days in (1, 2)
