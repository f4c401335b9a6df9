from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Mapping, Sequence

from ..common.validators import optional_id, require_non_empty, require_period, require_positive_id, to_decimal
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import Operation, require_role
from ..employees.repository import EmployeeRepository
from .model import Deduction
from .repository import DeductionRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"employee_id", "name", "amount", "month", "year", "note"})


def deduction_to_dict(d: Deduction) -> dict:
    return {
        "deduction_id": d.deduction_id,
        "employee_id": d.employee_id,
        "name": d.name,
        "amount": str(d.amount),
        "month": d.month,
        "year": d.year,
        "note": d.note,
    }


def _positive_amount(value: Any) -> Decimal:
    amount = to_decimal(value, "amount")
    if amount <= 0:
        raise ValidationError("amount must be greater than 0")
    return amount


class DeductionService:
    def __init__(self, deductions: DeductionRepository, employees: EmployeeRepository):
        self._deductions = deductions
        self._employees = employees

    def create_deduction(
        self,
        *,
        actor_role: Role,
        employee_id: Any,
        name: str,
        amount: Any,
        month: Any = None,
        year: Any = None,
        note: str = "",
    ) -> Deduction:
        require_role(Operation.DEDUCTION_WRITE, actor_role)
        eid = require_positive_id(employee_id, "employee_id")
        name = require_non_empty(name, "name")
        value = _positive_amount(amount)

        m = y = None
        if month not in (None, "") or year not in (None, ""):
            m, y = require_period(month, year)

        if not self._employees.exists(eid):
            raise NotFoundError(f"Employee {eid} not found")

        deduction_id = self._deductions.create(
            employee_id=eid, name=name, amount=value, month=m, year=y, note=(note or "").strip()
        )
        logger.info("deduction %s of %s recorded for employee %s", deduction_id, value, eid)
        return self._deductions.get_by_id(deduction_id)

    def list_deductions(self, *, actor_role: Role, employee_id: Any = None) -> Sequence[Deduction]:
        require_role(Operation.RECORDS_READ, actor_role)
        return self._deductions.list(employee_id=optional_id(employee_id, "employee_id"))

    def get_deduction(self, *, actor_role: Role, deduction_id: Any) -> Deduction:
        require_role(Operation.RECORDS_READ, actor_role)
        did = require_positive_id(deduction_id, "deduction_id")
        deduction = self._deductions.get_by_id(did)
        if not deduction:
            raise NotFoundError(f"Deduction {did} not found")
        return deduction

    def update_deduction(self, *, actor_role: Role, deduction_id: Any, payload: Mapping[str, Any]) -> Deduction:
        """Partial edit. A month/year tag is set or cleared as a pair."""

        require_role(Operation.DEDUCTION_WRITE, actor_role)
        did = require_positive_id(deduction_id, "deduction_id")
        if not isinstance(payload, Mapping) or not payload:
            raise ValidationError("payload must be a non-empty object")
        unknown = sorted(set(payload) - EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields not editable on deductions: {', '.join(unknown)}")

        current = self._deductions.get_by_id(did)
        if not current:
            raise NotFoundError(f"Deduction {did} not found")

        fields: Dict[str, Any] = {}
        if "employee_id" in payload:
            eid = require_positive_id(payload["employee_id"], "employee_id")
            if not self._employees.exists(eid):
                raise NotFoundError(f"Employee {eid} not found")
            fields["employee_id"] = eid
        if "name" in payload:
            fields["name"] = require_non_empty(payload["name"], "name")
        if "amount" in payload:
            fields["amount"] = _positive_amount(payload["amount"])
        if "note" in payload:
            fields["note"] = str(payload["note"] or "").strip()
        if "month" in payload or "year" in payload:
            month = payload.get("month", current.month)
            year = payload.get("year", current.year)
            if month in (None, "") and year in (None, ""):
                fields["month"] = fields["year"] = None
            else:
                fields["month"], fields["year"] = require_period(month, year)

        self._deductions.update_fields(did, fields)
        logger.info("deduction %s updated: %s", did, ", ".join(sorted(fields)))
        return self._deductions.get_by_id(did)

    def delete_deduction(self, *, actor_role: Role, deduction_id: Any) -> None:
        require_role(Operation.DEDUCTION_WRITE, actor_role)
        did = require_positive_id(deduction_id, "deduction_id")
        if not self._deductions.delete(did):
            raise NotFoundError(f"Deduction {did} not found")
        logger.info("deleted deduction %s", did)
