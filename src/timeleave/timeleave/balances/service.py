from __future__ import annotations

import dataclasses
import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from ..common.validators import require_non_negative_days
from ..core.enums import LeaveCategory, LeaveStatus
from ..core.exceptions import NotFoundError
from ..core.locks import AggregateLocks
from ..employees.model import EmployeeProfile
from ..employees.repository import EmployeeDirectory
from ..leave.repository import LeaveRequestRepository
from .model import LeaveBalance
from .repository import LeaveBalanceRepository

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class LeaveBalanceService:
    """Sổ ngày phép năm: tạo lười (lazy), chuyển phép sang năm sau, trừ/hoàn khi duyệt.

    Lưu ý: remaining_days luôn tính lại từ total + carried_over - used, không lưu riêng.
    """

    def __init__(
        self,
        balances: LeaveBalanceRepository,
        employees: EmployeeDirectory,
        requests: LeaveRequestRepository,
        *,
        locks: Optional[AggregateLocks] = None,
    ):
        self._balances = balances
        self._employees = employees
        self._requests = requests
        self._locks = locks or AggregateLocks()

    def _require_employee(self, employee_id: int) -> EmployeeProfile:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError(f"Employee not found: {employee_id}")
        return employee

    def calculate_carry_over(self, employee_id: int, year: int) -> Decimal:
        employee = self._require_employee(employee_id)
        previous = self._balances.get(employee_id, year - 1)
        if previous is None:
            return ZERO
        remaining = previous.total_days + previous.carried_over_days - previous.used_days
        if remaining <= ZERO:
            return ZERO
        return min(remaining, Decimal(employee.vacation_carry_over_max))

    def get_or_create_balance(self, employee_id: int, year: int) -> LeaveBalance:
        with self._locks.hold(employee_id):
            existing = self._balances.get(employee_id, year)
            if existing:
                return existing
            employee = self._require_employee(employee_id)
            balance = self._balances.save(
                LeaveBalance(
                    employee_id=employee_id,
                    year=year,
                    total_days=Decimal(employee.vacation_days_per_year),
                    used_days=ZERO,
                    carried_over_days=self.calculate_carry_over(employee_id, year),
                )
            )
            logger.info(
                "Initialized %s vacation balance for employee %s: total=%s carried_over=%s",
                year,
                employee_id,
                balance.total_days,
                balance.carried_over_days,
            )
            return balance

    def get_balance(self, employee_id: int, year: int) -> LeaveBalance:
        return self.get_or_create_balance(employee_id, year)

    def pending_days(self, employee_id: int, year: int) -> Decimal:
        """Days tied up in PENDING vacation requests starting in ``year``."""
        pending = self._requests.list_for_employee(
            employee_id,
            category=LeaveCategory.VACATION,
            statuses=[LeaveStatus.PENDING],
            start_from=date(year, 1, 1),
            start_to=date(year, 12, 31),
        )
        return sum((r.total_days for r in pending), ZERO)

    def apply_approval(self, employee_id: int, year: int, days: Decimal) -> LeaveBalance:
        with self._locks.hold(employee_id):
            balance = self.get_or_create_balance(employee_id, year)
            updated = dataclasses.replace(balance, used_days=balance.used_days + Decimal(days))
            return self._balances.save(updated)

    def release_approval(self, employee_id: int, year: int, days: Decimal) -> LeaveBalance:
        with self._locks.hold(employee_id):
            balance = self.get_or_create_balance(employee_id, year)
            updated = dataclasses.replace(balance, used_days=max(ZERO, balance.used_days - Decimal(days)))
            return self._balances.save(updated)

    def set_balance(
        self,
        employee_id: int,
        year: int,
        *,
        total_days: Optional[Decimal] = None,
        used_days: Optional[Decimal] = None,
        carried_over_days: Optional[Decimal] = None,
    ) -> LeaveBalance:
        """Administrative correction of any subset of the balance fields."""
        total_days = require_non_negative_days(total_days, "total_days")
        used_days = require_non_negative_days(used_days, "used_days")
        carried_over_days = require_non_negative_days(carried_over_days, "carried_over_days")

        with self._locks.hold(employee_id):
            balance = self.get_or_create_balance(employee_id, year)
            updated = dataclasses.replace(
                balance,
                total_days=total_days if total_days is not None else balance.total_days,
                used_days=used_days if used_days is not None else balance.used_days,
                carried_over_days=carried_over_days if carried_over_days is not None else balance.carried_over_days,
            )
            saved = self._balances.save(updated)
        logger.info(
            "Balance %s of employee %s set: total=%s used=%s carried_over=%s",
            year,
            employee_id,
            saved.total_days,
            saved.used_days,
            saved.carried_over_days,
        )
        return saved

    def trigger_carry_over(self, employee_id: int, year: int) -> LeaveBalance:
        """Recompute carried_over_days from the previous year; other fields are kept."""
        with self._locks.hold(employee_id):
            balance = self.get_or_create_balance(employee_id, year)
            carried = self.calculate_carry_over(employee_id, year)
            saved = self._balances.save(dataclasses.replace(balance, carried_over_days=carried))
        logger.info("Carry-over into %s for employee %s recomputed: %s", year, employee_id, carried)
        return saved
