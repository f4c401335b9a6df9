from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import pytest
from werkzeug.security import generate_password_hash

from src.workforce_admin.workforce_admin.attendance.model import Attendance
from src.workforce_admin.workforce_admin.clients.model import Client
from src.workforce_admin.workforce_admin.container import Repositories, assemble
from src.workforce_admin.workforce_admin.core.enums import AttendanceStatus, RequestStatus, Role
from src.workforce_admin.workforce_admin.deductions.model import Deduction
from src.workforce_admin.workforce_admin.employees.model import Employee
from src.workforce_admin.workforce_admin.invoices.model import Invoice
from src.workforce_admin.workforce_admin.main import create_app
from src.workforce_admin.workforce_admin.payroll.model import Salary
from src.workforce_admin.workforce_admin.requests.model import ChangeRequest
from src.workforce_admin.workforce_admin.users.model import User


class Table:
    """Minimal id -> dataclass store shared by the fakes below."""

    def __init__(self):
        self.rows = {}
        self._next = 0

    def _insert(self, make):
        self._next += 1
        self.rows[self._next] = make(self._next)
        return self._next

    def get_by_id(self, row_id):
        return self.rows.get(row_id)

    def exists(self, row_id):
        return row_id in self.rows

    def delete(self, row_id):
        return self.rows.pop(row_id, None) is not None

    def update_fields(self, row_id, fields):
        if row_id not in self.rows:
            return False
        fields = dict(fields)
        if "categories" in fields:
            fields["categories"] = tuple(fields["categories"])
        self.rows[row_id] = replace(self.rows[row_id], **fields)
        return True


class Users(Table):
    def get_by_username(self, username):
        return next((u for u in self.rows.values() if u.username == username), None)

    def create_user(self, **fields):
        return self._insert(lambda i: User(user_id=i, **fields))

    def list_all(self):
        return list(self.rows.values())

    def set_active(self, user_id, *, is_active):
        return self.update_fields(user_id, {"is_active": is_active})

    def delete_by_id(self, user_id):
        return self.delete(user_id)


class Clients(Table):
    def create(self, fields, categories):
        return self._insert(lambda i: Client(client_id=i, categories=tuple(categories), **fields))

    def list_all(self):
        return list(self.rows.values())


class Employees(Table):
    def create(self, fields):
        fields = {"category": "", "client_id": None, **fields}
        return self._insert(lambda i: Employee(employee_id=i, **fields))

    def list_all(self, *, client_id=None):
        return [e for e in self.rows.values() if client_id is None or e.client_id == client_id]


class Attendances(Table):
    def create(self, **fields):
        return self._insert(lambda i: Attendance(attendance_id=i, **fields))

    def find_active(self, employee_id, work_date, *, exclude_id=None):
        for r in self.rows.values():
            if (r.employee_id, r.work_date) == (employee_id, work_date) and r.status != AttendanceStatus.REJECTED:
                if r.attendance_id != exclude_id:
                    return r
        return None

    def set_status(self, attendance_id, status):
        return self.update_fields(attendance_id, {"status": status})

    def list(self, *, status=None):
        rows = [r for r in self.rows.values() if status is None or r.status == status]
        return sorted(rows, key=lambda r: (r.work_date, r.attendance_id))

    def _window(self, ids, start, end, status):
        return [
            r
            for r in self.rows.values()
            if r.employee_id in ids and start <= r.work_date < end and (status is None or r.status == status)
        ]

    def sum_sessions(self, employee_id, start, end, *, status=None):
        return sum(r.session_count for r in self._window({employee_id}, start, end, status))

    def list_in_window(self, employee_ids, start, end, *, status=None):
        return self._window(set(employee_ids), start, end, status)


class Deductions(Table):
    def sum_for_employee(self, employee_id, *, month=None, year=None):
        return sum((d.amount for d in self.rows.values() if d.employee_id == employee_id), Decimal(0))

    def list(self, *, employee_id=None):
        return [d for d in self.rows.values() if employee_id is None or d.employee_id == employee_id]


class Requests(Table):
    def create(self, **fields):
        return self._insert(
            lambda i: ChangeRequest(
                request_id=i, status=RequestStatus.PENDING, created_at=datetime(2025, 3, 1, 12, 0), **fields
            )
        )

    def get(self, request_id, *, for_update=False):
        return self.rows.get(request_id)

    def list(self, *, requester_id=None, status=None):
        rows = [
            r
            for r in self.rows.values()
            if (requester_id is None or r.requester_id == requester_id) and (status is None or r.status == status)
        ]
        return sorted(rows, key=lambda r: r.request_id, reverse=True)

    def decide(self, *, request_id, status, decided_by):
        req = self.rows.get(request_id)
        if not req or req.status != RequestStatus.PENDING:
            return False
        self.rows[request_id] = replace(req, status=status, decided_by=decided_by, decided_at=datetime(2025, 3, 2))
        return True


class Salaries(Table):
    def create(self, **fields):
        return self._insert(lambda i: Salary(salary_id=i, **fields))

    def list(self, *, month=None, year=None, employee_id=None):
        return [
            s
            for s in self.rows.values()
            if (month is None or s.month == month)
            and (year is None or s.year == year)
            and (employee_id is None or s.employee_id == employee_id)
        ]


class Invoices(Table):
    def create(self, *, invoice_no, lines, **fields):
        return self._insert(
            lambda i: Invoice(invoice_id=i, invoice_no=invoice_no or str(i), lines=tuple(lines), **fields)
        )

    def list(self, *, client_id=None):
        return [i for i in self.rows.values() if client_id is None or i.client_id == client_id]


PASSWORD = "pass123"


@pytest.fixture
def repos():
    users = Users()
    for name, role in (("admin", Role.ADMIN), ("hr", Role.HR), ("acct", Role.ACCOUNTANT), ("sup", Role.SUPERVISOR)):
        users.create_user(
            full_name=name.title(),
            username=name,
            password_hash=generate_password_hash(PASSWORD),
            role=role,
            client_id=None,
            site_name=None,
        )
    return Repositories(
        users=users,
        clients=Clients(),
        employees=Employees(),
        attendance=Attendances(),
        deductions=Deductions(),
        requests=Requests(),
        salaries=Salaries(),
        invoices=Invoices(),
    )


@pytest.fixture
def app(monkeypatch, repos):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=assemble(repos))


def _login(app, username):
    client = app.test_client()
    resp = client.post("/api/auth/login", json={"username": username, "password": PASSWORD})
    assert resp.status_code == 200
    return client


def test_login_me_logout(app):
    client = _login(app, "hr")

    me = client.get("/api/auth/me").get_json()
    assert me == {"user_id": 2, "role": "hr", "full_name": "Hr"}

    client.post("/api/auth/logout")
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.get_json()["error"]["kind"] == "unauthenticated"


def test_bad_credentials_are_401(app):
    resp = app.test_client().post("/api/auth/login", json={"username": "hr", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json() == {"error": {"kind": "unauthenticated", "message": "Invalid username or password"}}


def test_error_kinds_map_to_status_codes(app):
    hr = _login(app, "hr")

    forbidden = hr.post("/api/clients", json={"name": "Acme"})
    assert forbidden.status_code == 403
    assert forbidden.get_json()["error"]["kind"] == "forbidden"

    missing = hr.get("/api/clients/9")
    assert missing.status_code == 404

    invalid = hr.post("/api/attendances", json=["not", "an", "object"])
    assert invalid.status_code == 400
    assert invalid.get_json()["error"]["kind"] == "invalid_input"

    unknown_route = hr.get("/api/nowhere")
    assert unknown_route.status_code == 404
    assert unknown_route.get_json()["error"]["kind"] == "not_found"


def test_attendance_flow_over_http(app, repos):
    admin = _login(app, "admin")
    admin.post("/api/clients", json={"name": "Acme"})
    admin.post("/api/employees", json={"name": "Alice", "client_id": 1})

    sup = _login(app, "sup")
    created = sup.post(
        "/api/attendances", json={"employee_id": 1, "date": "2025-03-01", "session_count": 2, "submitted_by": "supervisor"}
    )
    assert created.status_code == 201
    assert created.get_json()["status"] == "PENDING"

    dup = sup.post("/api/attendances", json={"employee_id": 1, "date": "2025-03-01", "session_count": 1})
    assert dup.status_code == 409

    hr = _login(app, "hr")
    approved = hr.post("/api/attendances/1/approve")
    assert approved.get_json()["status"] == "APPROVED"

    batch = hr.post(
        "/api/attendances/batch",
        json={"rows": [{"employee_id": 1, "date": "2025-03-02", "session_count": 1}, {"employee_id": 1}]},
    ).get_json()
    assert [r["ok"] for r in batch] == [True, False]
    assert batch[1]["error"]["kind"] == "invalid_input"

    listed = hr.get("/api/attendances?status=APPROVED").get_json()
    assert [r["date"] for r in listed] == ["2025-03-01", "2025-03-02"]


def test_change_request_flow_over_http(app, repos):
    admin = _login(app, "admin")
    admin.post("/api/clients", json={"name": "Acme"})
    admin.post("/api/employees", json={"name": "Alice", "category": "Guard", "client_id": 1})

    hr = _login(app, "hr")
    submitted = hr.post(
        "/api/change-requests",
        json={"table_name": "employees", "row_id": 1, "action": "EDIT", "payload": {"name": "X"}},
    )
    assert submitted.status_code == 201
    request_id = submitted.get_json()["request_id"]
    assert repos.employees.rows[1].name == "Alice"

    assert hr.post(f"/api/change-requests/{request_id}/approve").status_code == 403

    approved = admin.post(f"/api/change-requests/{request_id}/approve")
    assert approved.status_code == 200
    assert approved.get_json()["status"] == "APPROVED"
    assert repos.employees.rows[1].name == "X"

    replay = admin.post(f"/api/change-requests/{request_id}/approve")
    assert replay.status_code == 409
    assert replay.get_json()["error"]["kind"] == "conflict_replay"

    assert [r["request_id"] for r in hr.get("/api/change-requests").get_json()] == [request_id]
    assert _login(app, "acct").get("/api/change-requests").get_json() == []


def test_salary_and_invoice_generation_with_csv(app, repos):
    admin = _login(app, "admin")
    admin.post(
        "/api/clients",
        json={"name": "Acme", "cgst_rate": 9, "sgst_rate": 9, "categories": [{"name": "security guard", "rate_per_month": 1200}]},
    )
    admin.post(
        "/api/employees",
        json={"name": "Alice", "category": "Security Guard", "client_id": 1, "rate_per_month": 3000},
    )
    for day, sessions in ((1, 1), (2, 1), (3, 2)):
        admin.post("/api/attendances", json={"employee_id": 1, "date": f"2025-03-0{day}", "session_count": sessions})

    acct = _login(app, "acct")
    salaries = acct.post("/api/salaries/generate", json={"month": 3, "year": 2025})
    assert salaries.status_code == 201
    assert salaries.get_json()[0]["basic_amount"] == "400.00"

    sheet = acct.get("/api/salaries.csv?month=3&year=2025")
    assert sheet.mimetype == "text/csv"
    assert "salaries_2025_03.csv" in sheet.headers["Content-Disposition"]
    assert "Alice" in sheet.data.decode("utf-8-sig")

    invoice = acct.post("/api/invoices/generate", json={"client_id": 1, "month": 3, "year": 2025}).get_json()
    assert invoice["subtotal"] == "160.00"
    assert Decimal(invoice["grand_total"]) == Decimal("188.8")
    assert invoice["chart"][0]["days"] == {"1": 1, "2": 1, "3": 2}

    doc = acct.get(f"/api/invoices/{invoice['invoice']['invoice_id']}.csv")
    text = doc.data.decode("utf-8-sig")
    assert doc.status_code == 200
    assert "Acme" in text
    assert "Grand Total" in text


def test_account_management_over_http(app, repos):
    hr = _login(app, "hr")
    bad = hr.post("/api/auth/change-password", json={"old_password": "wrong", "new_password": "another1"})
    assert bad.status_code == 400
    changed = hr.post("/api/auth/change-password", json={"old_password": PASSWORD, "new_password": "another1"})
    assert changed.status_code == 200
    assert app.test_client().post("/api/auth/login", json={"username": "hr", "password": "another1"}).status_code == 200

    assert hr.patch("/api/users/4", json={"site_name": "Gate"}).status_code == 403

    admin = _login(app, "admin")
    updated = admin.patch("/api/users/4", json={"full_name": "Sup One", "site_name": "Gate"})
    assert updated.status_code == 200
    assert updated.get_json()["site_name"] == "Gate"

    assert admin.post("/api/users/2/password", json={"new_password": "reset123"}).status_code == 200
    assert app.test_client().post("/api/auth/login", json={"username": "hr", "password": "reset123"}).status_code == 200

    off = admin.post("/api/users/3/active", json={"is_active": False})
    assert off.get_json()["is_active"] is False
    locked = app.test_client().post("/api/auth/login", json={"username": "acct", "password": PASSWORD})
    assert locked.status_code == 401

    assert admin.post("/api/users/1/active", json={"is_active": False}).status_code == 400
    assert admin.delete("/api/users/4").status_code == 200
    assert repos.users.get_by_id(4) is None
    assert admin.delete("/api/users/1").status_code == 400


def test_deduction_update_over_http(app, repos):
    repos.employees.create({"name": "Alice", "category": "guard", "client_id": None, "rate_per_month": Decimal(3000)})
    repos.deductions._insert(
        lambda i: Deduction(deduction_id=i, employee_id=1, name="Advance", amount=Decimal("100"), month=3, year=2025)
    )
    acct = _login(app, "acct")

    resp = acct.patch("/api/deductions/1", json={"amount": "80", "year": 2024})
    assert resp.status_code == 200
    assert resp.get_json()["amount"] == "80"
    assert (resp.get_json()["month"], resp.get_json()["year"]) == (3, 2024)

    assert acct.patch("/api/deductions/9", json={"amount": "1"}).status_code == 404
    assert acct.get("/api/deductions/1").get_json()["amount"] == "80"
    assert _login(app, "sup").patch("/api/deductions/1", json={"amount": "1"}).status_code == 403
