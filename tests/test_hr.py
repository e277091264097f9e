"""HR module tests — employee CRUD, departments, attendance and payroll listing."""

from __future__ import annotations

from datetime import date

from erp.hr.models import Payroll
from tests.conftest import make_employee

EMPLOYEE = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "position": "Engineer",
    "department": "Engineering",
    "hire_date": "2024-01-08",
    "salary": 6000,
}


# ── Employees ───────────────────────────────────────────────────────


async def test_create_employee(client, auth_headers):
    resp = await client.post("/api/hr/employees", json=EMPLOYEE, headers=auth_headers)
    assert resp.status_code == 201
    data = resp.json()
    assert data["full_name"] == "Ada Lovelace"
    assert data["department"] == "Engineering"
    assert data["status"] == "active"
    assert data["phone"] == ""
    assert data["salary"] == 6000


async def test_create_employee_defaults_hire_date_to_today(client, auth_headers):
    body = {k: v for k, v in EMPLOYEE.items() if k != "hire_date"}
    resp = await client.post("/api/hr/employees", json=body, headers=auth_headers)
    assert resp.status_code == 201
    assert resp.json()["hire_date"] == date.today().isoformat()


async def test_create_employee_duplicate_email(client, auth_headers):
    await client.post("/api/hr/employees", json=EMPLOYEE, headers=auth_headers)
    resp = await client.post("/api/hr/employees", json=EMPLOYEE, headers=auth_headers)
    assert resp.status_code == 409
    assert "email" in resp.json()["errors"]


async def test_create_employee_invalid_email(client, auth_headers):
    resp = await client.post(
        "/api/hr/employees", json={**EMPLOYEE, "email": "not-an-email"}, headers=auth_headers,
    )
    assert resp.status_code == 422


async def test_list_employees_filters(client, db, auth_headers):
    await make_employee(db, email="a@example.com", first_name="Alice", department="Sales")
    await make_employee(db, email="b@example.com", first_name="Bob", department="Engineering")
    await make_employee(
        db, email="c@example.com", first_name="Cara", department="Sales", status="inactive",
    )

    resp = await client.get("/api/hr/employees?department=Sales", headers=auth_headers)
    assert {e["first_name"] for e in resp.json()} == {"Alice", "Cara"}

    resp = await client.get(
        "/api/hr/employees?department=Sales&status=active", headers=auth_headers,
    )
    assert [e["first_name"] for e in resp.json()] == ["Alice"]

    resp = await client.get("/api/hr/employees?search=bob", headers=auth_headers)
    assert [e["email"] for e in resp.json()] == ["b@example.com"]


async def test_get_update_delete_employee(client, db, auth_headers):
    employee = await make_employee(db)
    url = f"/api/hr/employees/{employee.id}"

    resp = await client.get(url, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == "jane.doe@example.com"

    resp = await client.put(
        url, json={"position": "Lead", "department": "Platform"}, headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["position"] == "Lead"
    assert resp.json()["department"] == "Platform"
    assert resp.json()["first_name"] == "Jane"

    assert (await client.delete(url, headers=auth_headers)).status_code == 204
    assert (await client.get(url, headers=auth_headers)).status_code == 404


async def test_update_employee_to_taken_email(client, db, auth_headers):
    await make_employee(db, email="taken@example.com")
    other = await make_employee(db, email="other@example.com")

    resp = await client.put(
        f"/api/hr/employees/{other.id}", json={"email": "taken@example.com"}, headers=auth_headers,
    )
    assert resp.status_code == 409


async def test_get_missing_employee_problem_detail(client, auth_headers):
    resp = await client.get("/api/hr/employees/4242", headers=auth_headers)
    assert resp.status_code == 404
    body = resp.json()
    assert body["status"] == 404
    assert body["title"] == "Employee Not Found"
    assert body["instance"] == "/api/hr/employees/4242"


async def test_departments(client, db, auth_headers):
    await make_employee(db, email="a@example.com", department="Sales")
    await make_employee(db, email="b@example.com", department="Engineering")

    resp = await client.get("/api/hr/departments", headers=auth_headers)
    assert resp.json() == ["Engineering", "Sales"]


# ── Attendance ──────────────────────────────────────────────────────


async def test_record_attendance_computes_hours(client, db, auth_headers):
    employee = await make_employee(db)
    resp = await client.post(
        "/api/hr/attendance",
        json={
            "employee_id": employee.id,
            "date": "2024-03-04",
            "check_in": "2024-03-04T09:00:00Z",
            "check_out": "2024-03-04T17:30:00Z",
        },
        headers=auth_headers,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["hours_worked"] == 8.5
    assert data["employee_name"] == "Jane Doe"


async def test_record_attendance_twice_same_day(client, db, auth_headers):
    employee = await make_employee(db)
    body = {"employee_id": employee.id, "date": "2024-03-04", "hours_worked": 8}
    assert (await client.post("/api/hr/attendance", json=body, headers=auth_headers)).status_code == 201

    resp = await client.post("/api/hr/attendance", json=body, headers=auth_headers)
    assert resp.status_code == 409


async def test_record_attendance_checkout_before_checkin(client, db, auth_headers):
    employee = await make_employee(db)
    resp = await client.post(
        "/api/hr/attendance",
        json={
            "employee_id": employee.id,
            "date": "2024-03-04",
            "check_in": "2024-03-04T17:00:00Z",
            "check_out": "2024-03-04T09:00:00Z",
        },
        headers=auth_headers,
    )
    assert resp.status_code == 422


async def test_record_attendance_unknown_employee(client, auth_headers):
    resp = await client.post(
        "/api/hr/attendance",
        json={"employee_id": 999, "date": "2024-03-04"},
        headers=auth_headers,
    )
    assert resp.status_code == 404


async def test_list_attendance_date_range(client, db, auth_headers):
    employee = await make_employee(db)
    for day in ("2024-03-01", "2024-03-05", "2024-03-09"):
        await client.post(
            "/api/hr/attendance",
            json={"employee_id": employee.id, "date": day, "hours_worked": 8},
            headers=auth_headers,
        )

    resp = await client.get(
        "/api/hr/attendance?date_from=2024-03-02&date_to=2024-03-09", headers=auth_headers,
    )
    assert [r["date"] for r in resp.json()] == ["2024-03-09", "2024-03-05"]


# ── Payroll ─────────────────────────────────────────────────────────


async def test_list_payroll(client, db, auth_headers):
    employee = await make_employee(db)
    db.add(
        Payroll(
            employee_id=employee.id,
            amount=4800,
            base_salary=4800,
            start_date=date(2024, 2, 1),
            end_date=date(2024, 2, 29),
        )
    )
    await db.commit()

    resp = await client.get("/api/hr/payroll", headers=auth_headers)
    assert resp.status_code == 200
    (row,) = resp.json()
    assert row["employee_name"] == "Jane Doe"
    assert row["status"] == "pending"
    assert row["period"] == "monthly"
