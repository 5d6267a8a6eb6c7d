from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class LeaveBalance:
    """Số ngày phép năm của một nhân viên (một dòng cho mỗi năm)."""

    employee_id: int
    year: int
    total_days: Decimal
    used_days: Decimal = Decimal("0")
    carried_over_days: Decimal = Decimal("0")

    @property
    def remaining_days(self) -> Decimal:
        return max(Decimal("0"), self.total_days + self.carried_over_days - self.used_days)
