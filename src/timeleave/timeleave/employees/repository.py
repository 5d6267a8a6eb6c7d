from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import EmployeeProfile


class EmployeeDirectory(Protocol):
    """Giao diện tra cứu nhân viên (read-only).

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    def get_by_id(self, employee_id: int) -> Optional[EmployeeProfile]:
        raise NotImplementedError

    def list_subordinates(self, manager_id: int) -> Sequence[EmployeeProfile]:
        raise NotImplementedError
