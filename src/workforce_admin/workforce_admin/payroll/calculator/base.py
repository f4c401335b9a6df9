from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class SalaryFigures:
    rate_per_day: Decimal
    total_sessions: int
    basic_amount: Decimal
    deductions: Decimal
    net_pay: Decimal


class SalaryCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def rate_per_day(self, rate_per_month: Decimal) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def compute(self, *, rate_per_month: Decimal, total_sessions: int, deductions: Decimal) -> SalaryFigures:
        raise NotImplementedError
