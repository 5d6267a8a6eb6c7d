"""Ví dụ: job xuất báo cáo tháng, gọi service layer như một client bên ngoài.

Chỉ gọi get_time_sheet và get_balance. Lưu ý: get_balance tạo dòng leave_balances
nếu năm đó chưa có, nên job vẫn có thể ghi vào DB.
Cách chạy: python examples/example_usage.py 1 2026 6
"""

import sys
from calendar import monthrange
from datetime import date
from pathlib import Path

import pandas as pd

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.timeleave.timeleave.common.datetime_utils import format_minutes
from src.timeleave.timeleave.main import create_container


def build_team_report(container, manager_id: int, year: int, month: int) -> pd.DataFrame:
    start = date(year, month, 1)
    end = date(year, month, monthrange(year, month)[1])

    rows = []
    for member in container.employees_repo.list_subordinates(manager_id):
        sheet = container.time_tracking_service.get_time_sheet(member.employee_id, start, end)
        balance = container.balance_service.get_balance(member.employee_id, year)
        rows.append(
            {
                "Mã NV": member.employee_id,
                "Tên": member.full_name,
                "Giờ làm": format_minutes(sheet.total_work_minutes),
                "Giờ nghỉ": format_minutes(sheet.total_break_minutes),
                "Tăng ca": format_minutes(sheet.total_overtime_minutes),
                "Ngày vi phạm": sum(1 for s in sheet.summaries if not s.is_compliant),
                "Phép còn lại": str(balance.remaining_days),
            }
        )
    return pd.DataFrame(rows)


def main():
    manager_id, year, month = (int(v) for v in sys.argv[1:4])
    container = create_container()
    df = build_team_report(container, manager_id, year, month)
    out = REPO_ROOT / f"team_report_{manager_id}_{year}_{month:02d}.csv"
    df.to_csv(out, index=False)
    print(df.to_string(index=False))
    print(f"-> {out}")


if __name__ == "__main__":
    main()
