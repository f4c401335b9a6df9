from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.workforce_admin.workforce_admin.clients.model import Client, ClientCategory
from src.workforce_admin.workforce_admin.clients.service import ClientService, coerce_client_patch
from src.workforce_admin.workforce_admin.core.enums import Role
from src.workforce_admin.workforce_admin.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from src.workforce_admin.workforce_admin.deductions.model import Deduction
from src.workforce_admin.workforce_admin.deductions.service import DeductionService
from src.workforce_admin.workforce_admin.employees.model import Employee
from src.workforce_admin.workforce_admin.employees.service import EmployeeService
from src.workforce_admin.workforce_admin.users.model import User
from src.workforce_admin.workforce_admin.users.service import AuthService, UserService


@dataclass
class InMemoryUsers:
    users_by_username: dict[str, User] = field(default_factory=dict)

    def get_by_username(self, username: str) -> Optional[User]:
        return self.users_by_username.get(username)

    def get_by_id(self, user_id: int) -> Optional[User]:
        return next((u for u in self.users_by_username.values() if u.user_id == user_id), None)

    def create_user(self, *, full_name, username, password_hash, role, client_id, site_name) -> int:
        user_id = len(self.users_by_username) + 1
        self.users_by_username[username] = User(
            user_id=user_id,
            full_name=full_name,
            username=username,
            password_hash=password_hash,
            role=role,
            client_id=client_id,
            site_name=site_name,
        )
        return user_id

    def list_all(self):
        return sorted(self.users_by_username.values(), key=lambda u: u.user_id)

    def update_fields(self, user_id, fields):
        user = self.get_by_id(user_id)
        if user is None:
            return False
        del self.users_by_username[user.username]
        updated = replace(user, **fields)
        self.users_by_username[updated.username] = updated
        return True

    def set_active(self, user_id, *, is_active):
        return self.update_fields(user_id, {"is_active": is_active})

    def delete_by_id(self, user_id):
        user = self.get_by_id(user_id)
        if user is None:
            return False
        del self.users_by_username[user.username]
        return True


class InMemoryClients:
    def __init__(self):
        self.rows: dict[int, Client] = {}

    def get_by_id(self, client_id):
        return self.rows.get(client_id)

    def exists(self, client_id):
        return client_id in self.rows

    def create(self, fields, categories):
        client_id = len(self.rows) + 1
        self.rows[client_id] = Client(client_id=client_id, categories=tuple(categories), **fields)
        return client_id

    def list_all(self):
        return list(self.rows.values())

    def update_fields(self, client_id, fields):
        if client_id not in self.rows:
            return False
        fields = dict(fields)
        if "categories" in fields:
            fields["categories"] = tuple(fields["categories"])
        current = self.rows[client_id]
        self.rows[client_id] = Client(**{**current.__dict__, **fields})
        return True

    def delete(self, client_id):
        return self.rows.pop(client_id, None) is not None


class InMemoryEmployees:
    def __init__(self):
        self.rows: dict[int, Employee] = {}

    def get_by_id(self, employee_id):
        return self.rows.get(employee_id)

    def exists(self, employee_id):
        return employee_id in self.rows

    def create(self, fields):
        employee_id = len(self.rows) + 1
        fields = {"category": "", "client_id": None, **fields}
        self.rows[employee_id] = Employee(employee_id=employee_id, **fields)
        return employee_id

    def list_all(self, *, client_id=None):
        return [e for e in self.rows.values() if client_id is None or e.client_id == client_id]

    def update_fields(self, employee_id, fields):
        if employee_id not in self.rows:
            return False
        self.rows[employee_id] = Employee(**{**self.rows[employee_id].__dict__, **fields})
        return True

    def delete(self, employee_id):
        return self.rows.pop(employee_id, None) is not None


class InMemoryDeductions:
    def __init__(self):
        self.rows: dict[int, Deduction] = {}

    def create(self, *, employee_id, name, amount, month=None, year=None, note=""):
        deduction_id = len(self.rows) + 1
        self.rows[deduction_id] = Deduction(
            deduction_id=deduction_id,
            employee_id=employee_id,
            name=name,
            amount=amount,
            month=month,
            year=year,
            note=note,
        )
        return deduction_id

    def get_by_id(self, deduction_id):
        return self.rows.get(deduction_id)

    def list(self, *, employee_id=None):
        return [d for d in self.rows.values() if employee_id is None or d.employee_id == employee_id]

    def update_fields(self, deduction_id, fields):
        if deduction_id not in self.rows:
            return False
        self.rows[deduction_id] = replace(self.rows[deduction_id], **fields)
        return True

    def delete(self, deduction_id):
        return self.rows.pop(deduction_id, None) is not None


@pytest.fixture
def users():
    repo = InMemoryUsers()
    repo.create_user(
        full_name="Hanna HR",
        username="hr1",
        password_hash=generate_password_hash("secret1"),
        role=Role.HR,
        client_id=None,
        site_name=None,
    )
    return repo


def test_login_returns_session_user(users):
    user = AuthService(users).authenticate(" hr1 ", "secret1")

    assert user.user_id == 1
    assert user.role == Role.HR
    assert user.full_name == "Hanna HR"


@pytest.mark.parametrize("username,password", [("hr1", "wrong"), ("nobody", "secret1"), ("", "")])
def test_login_failures_share_one_message(users, username, password):
    with pytest.raises(AuthenticationError, match="Invalid username or password"):
        AuthService(users).authenticate(username, password)


def test_login_with_placeholder_hash_fails_cleanly():
    repo = InMemoryUsers()
    repo.create_user(
        full_name="Seed",
        username="seed",
        password_hash="CHANGE_ME",
        role=Role.ADMIN,
        client_id=None,
        site_name=None,
    )
    with pytest.raises(AuthenticationError):
        AuthService(repo).authenticate("seed", "CHANGE_ME")


def test_admin_creates_accounts_but_never_admins(users):
    svc = UserService(users)
    user_id = svc.create_account(
        actor_role=Role.ADMIN,
        full_name="Sam Supervisor",
        username="sup1",
        password="pass123",
        role=Role.SUPERVISOR,
        client_id="3",
        site_name=" North Gate ",
    )

    created = users.get_by_id(user_id)
    assert created.client_id == 3
    assert created.site_name == "North Gate"
    assert AuthService(users).authenticate("sup1", "pass123").role == Role.SUPERVISOR

    with pytest.raises(ValidationError):
        svc.create_account(actor_role=Role.ADMIN, full_name="X", username="x", password="pass123", role=Role.ADMIN)
    with pytest.raises(ValidationError):
        svc.create_account(actor_role=Role.ADMIN, full_name="X", username="hr1", password="pass123", role=Role.HR)
    with pytest.raises(ValidationError):
        svc.create_account(actor_role=Role.ADMIN, full_name="X", username="y", password="123", role=Role.HR)
    with pytest.raises(AuthorizationError):
        svc.create_account(actor_role=Role.HR, full_name="X", username="z", password="pass123", role=Role.HR)


def test_list_accounts_is_admin_only(users):
    svc = UserService(users)
    assert [u["username"] for u in svc.list_accounts(actor_role=Role.ADMIN)] == ["hr1"]
    assert "password_hash" not in svc.list_accounts(actor_role=Role.ADMIN)[0]
    with pytest.raises(AuthorizationError):
        svc.list_accounts(actor_role=Role.ACCOUNTANT)


def test_client_create_with_categories_and_rates():
    svc = ClientService(InMemoryClients())
    client = svc.create_client(
        actor_role=Role.ACCOUNTANT,
        data={
            "name": " Acme ",
            "cgst_rate": "9",
            "categories": [{"name": "Guard", "rate_per_month": "1200"}, {"name": "Driver", "rate": 3000}],
        },
    )

    assert client.name == "Acme"
    assert client.cgst_rate == Decimal("9")
    assert client.sgst_rate is None
    assert client.categories == (
        ClientCategory(name="Guard", rate_per_month=Decimal("1200")),
        ClientCategory(name="Driver", rate_per_month=Decimal("3000")),
    )


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"name": ""},
        {"client_id": 3},
        {"cgst_rate": "120"},
        {"sgst_rate": "2.255"},
        {"categories": [{"name": "Guard", "rate_per_month": 1}, {"name": "guard", "rate_per_month": 2}]},
        {"categories": [{"name": "Guard", "rate_per_month": -1}]},
        {"categories": "Guard"},
    ],
)
def test_client_patch_validation(payload):
    with pytest.raises(ValidationError):
        coerce_client_patch(payload)


def test_client_direct_edits_are_admin_only():
    repo = InMemoryClients()
    svc = ClientService(repo)
    client = svc.create_client(actor_role=Role.ADMIN, data={"name": "Acme"})

    updated = svc.update_client(actor_role=Role.ADMIN, client_id=client.client_id, payload={"telephone": "555"})
    assert updated.telephone == "555"
    assert updated.name == "Acme"

    with pytest.raises(AuthorizationError):
        svc.update_client(actor_role=Role.ACCOUNTANT, client_id=client.client_id, payload={"name": "B"})
    with pytest.raises(AuthorizationError):
        svc.delete_client(actor_role=Role.HR, client_id=client.client_id)
    with pytest.raises(AuthorizationError):
        svc.create_client(actor_role=Role.HR, data={"name": "Nope"})

    svc.delete_client(actor_role=Role.ADMIN, client_id=client.client_id)
    with pytest.raises(NotFoundError):
        svc.get_client(actor_role=Role.HR, client_id=client.client_id)
    with pytest.raises(NotFoundError):
        svc.delete_client(actor_role=Role.ADMIN, client_id=client.client_id)


def test_employee_create_checks_client_and_defaults_rate():
    clients = InMemoryClients()
    clients.create({"name": "Acme"}, [])
    employees = InMemoryEmployees()
    svc = EmployeeService(employees, clients)

    emp = svc.create_employee(actor_role=Role.HR, data={"name": "Alice", "category": " Guard ", "client_id": 1})
    assert emp.category == "Guard"
    assert emp.rate_per_month == Decimal("0")

    with pytest.raises(NotFoundError):
        svc.create_employee(actor_role=Role.HR, data={"name": "Bob", "client_id": 9})
    with pytest.raises(ValidationError):
        svc.create_employee(actor_role=Role.ADMIN, data={"category": "Guard"})
    with pytest.raises(ValidationError):
        svc.create_employee(actor_role=Role.ADMIN, data={"name": "Bob", "rate_per_month": "-5"})
    with pytest.raises(AuthorizationError):
        svc.create_employee(actor_role=Role.ACCOUNTANT, data={"name": "Bob"})

    assert [e.name for e in svc.list_employees(actor_role=Role.ACCOUNTANT, client_id=1)] == ["Alice"]


def test_employee_update_touches_only_given_fields():
    clients = InMemoryClients()
    employees = InMemoryEmployees()
    svc = EmployeeService(employees, clients)
    emp = svc.create_employee(
        actor_role=Role.ADMIN, data={"name": "Alice", "category": "Guard", "rate_per_month": "3000"}
    )

    updated = svc.update_employee(actor_role=Role.ADMIN, employee_id=emp.employee_id, payload={"telephone": "12"})
    assert updated.telephone == "12"
    assert updated.rate_per_month == Decimal("3000")

    with pytest.raises(NotFoundError):
        svc.update_employee(actor_role=Role.ADMIN, employee_id=99, payload={"name": "X"})


def test_deductions_require_positive_amount_and_known_employee():
    clients = InMemoryClients()
    employees = InMemoryEmployees()
    EmployeeService(employees, clients).create_employee(actor_role=Role.HR, data={"name": "Alice"})
    svc = DeductionService(InMemoryDeductions(), employees)

    ded = svc.create_deduction(actor_role=Role.ACCOUNTANT, employee_id=1, name="Advance", amount="150.5", month=3, year=2025)
    assert ded.amount == Decimal("150.5")
    assert (ded.month, ded.year) == (3, 2025)

    with pytest.raises(ValidationError):
        svc.create_deduction(actor_role=Role.HR, employee_id=1, name="Advance", amount="0")
    with pytest.raises(ValidationError):
        svc.create_deduction(actor_role=Role.HR, employee_id=1, name="Advance", amount="5", month=3)
    with pytest.raises(NotFoundError):
        svc.create_deduction(actor_role=Role.HR, employee_id=2, name="Advance", amount="5")
    with pytest.raises(AuthorizationError):
        svc.create_deduction(actor_role=Role.SUPERVISOR, employee_id=1, name="Advance", amount="5")

    assert len(svc.list_deductions(actor_role=Role.HR, employee_id=1)) == 1
    assert svc.get_deduction(actor_role=Role.ADMIN, deduction_id=ded.deduction_id) == ded
    svc.delete_deduction(actor_role=Role.HR, deduction_id=ded.deduction_id)
    with pytest.raises(NotFoundError):
        svc.delete_deduction(actor_role=Role.HR, deduction_id=ded.deduction_id)


def test_users_change_their_own_password(users):
    svc = UserService(users)

    with pytest.raises(ValidationError, match="Old password incorrect"):
        svc.change_password(actor_id=1, old_password="nope", new_password="newpass1")
    with pytest.raises(ValidationError):
        svc.change_password(actor_id=1, old_password="secret1", new_password="short")

    svc.change_password(actor_id=1, old_password="secret1", new_password="newpass1")
    assert AuthService(users).authenticate("hr1", "newpass1").user_id == 1
    with pytest.raises(AuthenticationError):
        AuthService(users).authenticate("hr1", "secret1")


def test_admin_resets_any_password_without_the_old_one(users):
    svc = UserService(users)

    with pytest.raises(AuthorizationError):
        svc.reset_password(actor_role=Role.HR, user_id=1, new_password="reset99")
    with pytest.raises(NotFoundError):
        svc.reset_password(actor_role=Role.ADMIN, user_id=42, new_password="reset99")

    svc.reset_password(actor_role=Role.ADMIN, user_id="1", new_password="reset99")
    assert AuthService(users).authenticate("hr1", "reset99").user_id == 1


def test_admin_updates_supervisor_profile(users):
    svc = UserService(users)
    sup_id = svc.create_account(
        actor_role=Role.ADMIN, full_name="Sam", username="sup1", password="pass123", role=Role.SUPERVISOR
    )

    updated = svc.update_account(
        actor_role=Role.ADMIN, user_id=sup_id, payload={"full_name": "Sam S", "site_name": " Dock 2 ", "client_id": 4}
    )
    assert (updated.full_name, updated.site_name, updated.client_id) == ("Sam S", "Dock 2", 4)
    assert updated.username == "sup1"

    with pytest.raises(ValidationError):
        svc.update_account(actor_role=Role.ADMIN, user_id=sup_id, payload={"username": "hr1"})
    with pytest.raises(ValidationError):
        svc.update_account(actor_role=Role.ADMIN, user_id=sup_id, payload={"role": "admin"})
    with pytest.raises(ValidationError):
        svc.update_account(actor_role=Role.ADMIN, user_id=sup_id, payload={})
    with pytest.raises(AuthorizationError):
        svc.update_account(actor_role=Role.HR, user_id=sup_id, payload={"full_name": "X"})


def test_deactivated_accounts_cannot_log_in(users):
    svc = UserService(users)
    acct_id = svc.create_account(
        actor_role=Role.ADMIN, full_name="Acct", username="acct", password="pass123", role=Role.ACCOUNTANT
    )

    user = svc.set_active(actor_role=Role.ADMIN, actor_id=99, user_id=1, active=False)
    assert user.is_active is False
    assert svc.list_accounts(actor_role=Role.ADMIN)[0]["is_active"] is False
    with pytest.raises(AuthenticationError, match="Invalid username or password"):
        AuthService(users).authenticate("hr1", "secret1")

    svc.set_active(actor_role=Role.ADMIN, actor_id=99, user_id=1, active=True)
    assert AuthService(users).authenticate("hr1", "secret1").user_id == 1

    with pytest.raises(ValidationError):
        svc.set_active(actor_role=Role.ADMIN, actor_id=acct_id, user_id=acct_id, active=False)
    with pytest.raises(ValidationError):
        svc.set_active(actor_role=Role.ADMIN, actor_id=99, user_id=1, active="no")
    with pytest.raises(AuthorizationError):
        svc.set_active(actor_role=Role.ACCOUNTANT, actor_id=acct_id, user_id=1, active=False)


def test_delete_account_removes_non_admins_only(users):
    svc = UserService(users)
    sup_id = svc.create_account(
        actor_role=Role.ADMIN, full_name="Sam", username="sup1", password="pass123", role=Role.SUPERVISOR
    )
    users.create_user(
        full_name="Root",
        username="root",
        password_hash=generate_password_hash("rootpw"),
        role=Role.ADMIN,
        client_id=None,
        site_name=None,
    )

    svc.delete_account(actor_role=Role.ADMIN, user_id=sup_id)
    assert users.get_by_id(sup_id) is None
    with pytest.raises(NotFoundError):
        svc.delete_account(actor_role=Role.ADMIN, user_id=sup_id)
    with pytest.raises(ValidationError):
        svc.delete_account(actor_role=Role.ADMIN, user_id=users.get_by_username("root").user_id)
    with pytest.raises(AuthorizationError):
        svc.delete_account(actor_role=Role.HR, user_id=1)


def test_update_deduction_changes_given_fields_and_keeps_the_period_paired():
    clients = InMemoryClients()
    employees = InMemoryEmployees()
    employee_svc = EmployeeService(employees, clients)
    employee_svc.create_employee(actor_role=Role.HR, data={"name": "Alice"})
    employee_svc.create_employee(actor_role=Role.HR, data={"name": "Bob"})
    svc = DeductionService(InMemoryDeductions(), employees)
    ded = svc.create_deduction(actor_role=Role.HR, employee_id=1, name="Advance", amount="100", month=3, year=2025)

    updated = svc.update_deduction(
        actor_role=Role.ACCOUNTANT, deduction_id=ded.deduction_id, payload={"amount": "75.25", "note": " fixed "}
    )
    assert updated.amount == Decimal("75.25")
    assert updated.note == "fixed"
    assert (updated.name, updated.month, updated.year) == ("Advance", 3, 2025)

    moved = svc.update_deduction(
        actor_role=Role.HR, deduction_id=ded.deduction_id, payload={"employee_id": 2, "month": 4}
    )
    assert (moved.employee_id, moved.month, moved.year) == (2, 4, 2025)

    cleared = svc.update_deduction(
        actor_role=Role.HR, deduction_id=ded.deduction_id, payload={"month": None, "year": None}
    )
    assert (cleared.month, cleared.year) == (None, None)

    with pytest.raises(ValidationError):
        svc.update_deduction(actor_role=Role.HR, deduction_id=ded.deduction_id, payload={"month": 5})
    with pytest.raises(ValidationError):
        svc.update_deduction(actor_role=Role.HR, deduction_id=ded.deduction_id, payload={"amount": "-1"})
    with pytest.raises(ValidationError):
        svc.update_deduction(actor_role=Role.HR, deduction_id=ded.deduction_id, payload={"salary_id": 1})
    with pytest.raises(NotFoundError):
        svc.update_deduction(actor_role=Role.HR, deduction_id=ded.deduction_id, payload={"employee_id": 9})
    with pytest.raises(NotFoundError):
        svc.update_deduction(actor_role=Role.HR, deduction_id=99, payload={"name": "X"})
    with pytest.raises(AuthorizationError):
        svc.update_deduction(actor_role=Role.SUPERVISOR, deduction_id=ded.deduction_id, payload={"name": "X"})
