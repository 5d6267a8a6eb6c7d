from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import load_settings

from src.timeleave.timeleave.database.bootstrap import apply_seed_sql


def main() -> None:
    settings = load_settings()
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    print(f"OK: demo employees and holidays seeded into {db_config.get('database')}")


if __name__ == "__main__":
    main()
