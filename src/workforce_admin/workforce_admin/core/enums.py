from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    HR = "hr"
    ACCOUNTANT = "accountant"
    SUPERVISOR = "supervisor"


class AttendanceStatus(str, Enum):
    """Attendance lifecycle. Only APPROVED rows are billed to clients."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RequestStatus(str, Enum):
    """Change request lifecycle: PENDING -> APPROVED | REJECTED (terminal)."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RequestAction(str, Enum):
    EDIT = "EDIT"
    DELETE = "DELETE"


class EntityTag(str, Enum):
    """Entities protected by the change request workflow (value = table name)."""

    CLIENT = "clients"
    EMPLOYEE = "employees"
    ATTENDANCE = "attendances"
    INVOICE = "invoices"
    SALARY = "salaries"

    @classmethod
    def parse(cls, value: str) -> "EntityTag":
        """Accept either the table name ("clients") or the entity name ("Client")."""
        key = (value or "").strip().lower()
        for tag in cls:
            if key in {tag.value, tag.name.lower()}:
                return tag
        raise ValueError(value)
