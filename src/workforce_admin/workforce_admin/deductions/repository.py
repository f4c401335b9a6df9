from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Deduction


class DeductionRepository(Protocol):
    def create(
        self,
        *,
        employee_id: int,
        name: str,
        amount: Decimal,
        month: Optional[int] = None,
        year: Optional[int] = None,
        note: str = "",
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, deduction_id: int) -> Optional[Deduction]:
        raise NotImplementedError

    def list(self, *, employee_id: Optional[int] = None) -> Sequence[Deduction]:
        raise NotImplementedError

    def update_fields(self, deduction_id: int, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, deduction_id: int) -> bool:
        raise NotImplementedError

    def sum_for_employee(self, employee_id: int, *, month: Optional[int] = None, year: Optional[int] = None) -> Decimal:
        """All-time total, or only rows tagged with month/year when both are given."""
        raise NotImplementedError
