from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Salary:
    """Immutable snapshot of one employee's pay for a month."""

    salary_id: int
    employee_id: int
    month: int
    year: int
    total_sessions: int
    basic_amount: Decimal
    deductions: Decimal
    net_pay: Decimal
    created_at: Optional[datetime] = None
