from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import FrozenSet, Optional

from ..core.constants import (
    DEFAULT_DAILY_WORK_HOURS,
    DEFAULT_VACATION_CARRY_OVER_MAX,
    DEFAULT_VACATION_DAYS_PER_YEAR,
    DEFAULT_WEEKLY_WORK_HOURS,
    DEFAULT_WORK_DAYS,
)


@dataclass(frozen=True)
class EmployeeProfile:
    """Thực thể miền (domain): Nhân viên và cấu hình giờ làm/ngày phép.

    Lưu ý: Đây là đối tượng dữ liệu thuần; quan hệ quản lý chỉ giữ id
    (manager_id), tra cứu qua EmployeeDirectory.
    """

    employee_id: int
    full_name: str
    manager_id: Optional[int] = None
    daily_work_hours: Decimal = DEFAULT_DAILY_WORK_HOURS
    weekly_work_hours: Decimal = DEFAULT_WEEKLY_WORK_HOURS
    work_days: FrozenSet[int] = field(default=DEFAULT_WORK_DAYS)
    vacation_days_per_year: int = DEFAULT_VACATION_DAYS_PER_YEAR
    vacation_carry_over_max: int = DEFAULT_VACATION_CARRY_OVER_MAX
    state_code: Optional[str] = None
    is_active: bool = True

    @property
    def daily_target_minutes(self) -> int:
        return int(Decimal(self.daily_work_hours) * 60)
