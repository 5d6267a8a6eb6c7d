from __future__ import annotations

from typing import Optional, Protocol

from .model import LeaveBalance


class LeaveBalanceRepository(Protocol):
    def get(self, employee_id: int, year: int) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def save(self, balance: LeaveBalance) -> LeaveBalance:
        """Insert or overwrite the row for (employee_id, year)."""

        raise NotImplementedError
