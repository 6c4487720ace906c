"""Backup every stored document to a JSON file.

Works for any configured backend (memory, file, mysql) since it only goes
through the document-store interface.
"""

from __future__ import annotations

import json
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import load_settings

from src.site_ledger.site_ledger.container import build_backend


def main() -> None:
    settings = load_settings()
    backend = build_backend(
        settings.STORAGE_BACKEND,
        data_file=getattr(settings, "DATA_FILE", None),
        db_config=getattr(settings, "DB_CONFIG", None),
    )

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"site_ledger_{ts}.json"

    docs = {key: backend.get(key) for key in backend.keys("")}
    out_file.write_text(json.dumps(docs, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")
    print(f"OK: Backup created: {out_file} ({len(docs)} documents)")


if __name__ == "__main__":
    main()
