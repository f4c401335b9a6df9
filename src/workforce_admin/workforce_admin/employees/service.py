from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

from ..clients.repository import ClientRepository
from ..common.validators import optional_id, require_non_empty, require_positive_id, to_decimal
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import Operation, require_role
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

TEXT_FIELDS = (
    "father_name",
    "gender",
    "telephone",
    "email",
    "local_address",
    "permanent_address",
    "epf_number",
    "esic_number",
)
EDITABLE_FIELDS = frozenset({"name", "category", "client_id", "rate_per_month", *TEXT_FIELDS})


def coerce_employee_patch(payload: Mapping[str, Any]) -> Dict[str, Any]:
    if not isinstance(payload, Mapping) or not payload:
        raise ValidationError("payload must be a non-empty object")
    unknown = sorted(set(payload) - EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Fields not editable on employees: {', '.join(unknown)}")

    fields: Dict[str, Any] = {}
    for key, value in payload.items():
        if key == "name":
            fields[key] = require_non_empty(value, "name")
        elif key == "category":
            fields[key] = (str(value).strip() if value is not None else "")
        elif key == "client_id":
            fields[key] = optional_id(value, "client_id")
        elif key == "rate_per_month":
            rate = to_decimal(value, "rate_per_month")
            if rate < 0:
                raise ValidationError("rate_per_month cannot be negative")
            fields[key] = rate
        else:
            fields[key] = (str(value).strip() if value is not None else "")
    return fields


def employee_to_dict(e: Employee) -> dict:
    return {
        "employee_id": e.employee_id,
        "name": e.name,
        "category": e.category,
        "client_id": e.client_id,
        "rate_per_month": str(e.rate_per_month),
        **{f: getattr(e, f) for f in TEXT_FIELDS},
    }


class EmployeeService:
    def __init__(self, employees: EmployeeRepository, clients: ClientRepository):
        self._employees = employees
        self._clients = clients

    def create_employee(self, *, actor_role: Role, data: Mapping[str, Any]) -> Employee:
        require_role(Operation.EMPLOYEE_CREATE, actor_role)
        if "name" not in data:
            raise ValidationError("name is required")
        fields = coerce_employee_patch(data)
        fields.setdefault("rate_per_month", to_decimal(0, "rate_per_month"))
        self._check_client(fields.get("client_id"))

        employee_id = self._employees.create(fields)
        logger.info("created employee %s (%s)", employee_id, fields["name"])
        return self._require(employee_id)

    def get_employee(self, *, actor_role: Role, employee_id: Any) -> Employee:
        require_role(Operation.RECORDS_READ, actor_role)
        return self._require(require_positive_id(employee_id, "employee_id"))

    def list_employees(self, *, actor_role: Role, client_id: Any = None) -> Sequence[Employee]:
        require_role(Operation.RECORDS_READ, actor_role)
        return self._employees.list_all(client_id=optional_id(client_id, "client_id"))

    def update_employee(self, *, actor_role: Role, employee_id: Any, payload: Mapping[str, Any]) -> Employee:
        require_role(Operation.ENTITY_WRITE_DIRECT, actor_role)
        eid = require_positive_id(employee_id, "employee_id")
        self.apply_update(eid, coerce_employee_patch(payload))
        return self._require(eid)

    def apply_update(self, employee_id: int, fields: Mapping[str, Any]) -> None:
        """Write already-coerced fields; shared by direct edits and approved change requests."""
        self._check_client(fields.get("client_id"))
        if not self._employees.update_fields(employee_id, fields):
            raise NotFoundError(f"Employee {employee_id} not found")

    def delete_employee(self, *, actor_role: Role, employee_id: Any) -> None:
        require_role(Operation.ENTITY_WRITE_DIRECT, actor_role)
        eid = require_positive_id(employee_id, "employee_id")
        if not self._employees.delete(eid):
            raise NotFoundError(f"Employee {eid} not found")
        logger.info("deleted employee %s", eid)

    def _check_client(self, client_id: Optional[int]) -> None:
        if client_id is not None and not self._clients.exists(client_id):
            raise NotFoundError(f"Client {client_id} not found")

    def _require(self, employee_id: int) -> Employee:
        emp = self._employees.get_by_id(employee_id)
        if not emp:
            raise NotFoundError(f"Employee {employee_id} not found")
        return emp
