"""Seed a demo site with two weeks of daily records for one owner.

Usage: python scripts/seed_db.py [owner_id]
"""

from __future__ import annotations

import sys
from datetime import timedelta
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import load_settings

from src.site_ledger.site_ledger.common.datetime_utils import now_local
from src.site_ledger.site_ledger.container import build_container
from src.site_ledger.site_ledger.users.model import SessionUser


def main() -> None:
    settings = load_settings()
    container = build_container(
        storage_backend=settings.STORAGE_BACKEND,
        data_file=getattr(settings, "DATA_FILE", None),
        db_config=getattr(settings, "DB_CONFIG", None),
        rate_policy=getattr(settings, "RATE_POLICY", "live"),
    )
    session = SessionUser(owner_id=sys.argv[1] if len(sys.argv) > 1 else "demo", display_name="Demo")

    place = container.place_service.add_place(session, name="Demo Site", worker_rate=1000, labourer_rate=600)
    today = now_local().date()
    for offset in range(14):
        day = today - timedelta(days=offset)
        if day.isoweekday() == 7:
            continue
        container.record_service.save_record(
            session,
            place.place_id,
            work_date=day,
            workers=8 + offset % 3,
            labourers=12 + offset % 4,
            additional_costs=[{"description": "Cement", "amount": 500}] if offset % 5 == 0 else [],
        )

    container.close()
    print(f"OK: Seeded place {place.place_id} for owner {session.owner_id!r}")


if __name__ == "__main__":
    main()
