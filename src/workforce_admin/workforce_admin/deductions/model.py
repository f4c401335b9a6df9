from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Deduction:
    """An amount withheld from an employee's pay.

    ``month``/``year`` are optional tags; untagged deductions count in every
    salary run unless period-scoped deductions are enabled.
    """

    deduction_id: int
    employee_id: int
    name: str
    amount: Decimal
    month: Optional[int] = None
    year: Optional[int] = None
    note: str = ""
