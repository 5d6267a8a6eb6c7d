from __future__ import annotations

from enum import Enum


class ClockEventType(str, Enum):
    """Loại sự kiện chấm công ghi vào sổ (ledger)."""

    CLOCK_IN = "CLOCK_IN"
    CLOCK_OUT = "CLOCK_OUT"
    BREAK_START = "BREAK_START"
    BREAK_END = "BREAK_END"


class ClockEventSource(str, Enum):
    """Where a clock event was recorded."""

    WEB = "WEB"
    TERMINAL = "TERMINAL"
    MOBILE = "MOBILE"
    MANUAL = "MANUAL"


class TrackingState(str, Enum):
    """Live state, always derived from the latest clock event."""

    CLOCKED_OUT = "CLOCKED_OUT"
    CLOCKED_IN = "CLOCKED_IN"
    ON_BREAK = "ON_BREAK"


class LeaveCategory(str, Enum):
    VACATION = "VACATION"
    SICK = "SICK"
    BUSINESS_TRIP = "BUSINESS_TRIP"


class LeaveStatus(str, Enum):
    """Trạng thái luồng duyệt yêu cầu (nghỉ phép/ốm/công tác)."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

    @property
    def is_terminal(self) -> bool:
        return self in {LeaveStatus.REJECTED, LeaveStatus.CANCELLED, LeaveStatus.COMPLETED}


ACTIVE_LEAVE_STATUSES = frozenset({LeaveStatus.PENDING, LeaveStatus.APPROVED})
