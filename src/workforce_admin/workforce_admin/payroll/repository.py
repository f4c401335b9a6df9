from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import Salary


class SalaryRepository(Protocol):
    def create(
        self,
        *,
        employee_id: int,
        month: int,
        year: int,
        total_sessions: int,
        basic_amount: Decimal,
        deductions: Decimal,
        net_pay: Decimal,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, salary_id: int) -> Optional[Salary]:
        raise NotImplementedError

    def exists(self, salary_id: int) -> bool:
        raise NotImplementedError

    def list(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[Salary]:
        raise NotImplementedError

    def delete(self, salary_id: int) -> bool:
        raise NotImplementedError
