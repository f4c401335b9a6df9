from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Employee:
    employee_id: int
    name: str
    category: str
    client_id: Optional[int]
    rate_per_month: Decimal
    father_name: str = ""
    gender: str = ""
    telephone: str = ""
    email: str = ""
    local_address: str = ""
    permanent_address: str = ""
    epf_number: str = ""
    esic_number: str = ""

    def in_category(self, category_name: str) -> bool:
        """Category match used for billing: trimmed, case-insensitive."""
        return (self.category or "").strip().lower() == (category_name or "").strip().lower()
