from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ...core.constants import DAYS_PER_MONTH_DIVISOR
from .base import SalaryCalculator, SalaryFigures

CENT = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class StandardSalaryCalculator(SalaryCalculator):
    """Standard rule: rate_per_month / 30 per session; net = basic - deductions (may go negative)."""

    def rate_per_day(self, rate_per_month: Decimal) -> Decimal:
        return Decimal(rate_per_month) / DAYS_PER_MONTH_DIVISOR

    def compute(self, *, rate_per_month: Decimal, total_sessions: int, deductions: Decimal) -> SalaryFigures:
        per_day = self.rate_per_day(rate_per_month)
        # Round once at the end so 1000/30 * 3 stays 100.00.
        basic = to_money(per_day * int(total_sessions))
        deducted = to_money(deductions)
        return SalaryFigures(
            rate_per_day=per_day,
            total_sessions=int(total_sessions),
            basic_amount=basic,
            deductions=deducted,
            net_pay=basic - deducted,
        )
