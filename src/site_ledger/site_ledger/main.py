from __future__ import annotations

import atexit
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module, load_settings

from .container import build_container
from .core.enums import StorageBackend
from .database.bootstrap import apply_schema, list_tables
from .places.controller import register as register_places
from .records.controller import register as register_records

logger = logging.getLogger(__name__)


def create_app(settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = load_settings(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    storage_backend = str(getattr(settings, "STORAGE_BACKEND", StorageBackend.MEMORY.value)).lower()
    db_config = dict(getattr(settings, "DB_CONFIG", {}) or {})
    logger.info("settings=%s storage=%s", settings_module, storage_backend)

    if storage_backend == StorageBackend.MYSQL.value and bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("schema ready (tables=%s)", ", ".join(list_tables(db_config)))

    container = build_container(
        storage_backend=storage_backend,
        data_file=getattr(settings, "DATA_FILE", None),
        db_config=db_config,
        rate_policy=getattr(settings, "RATE_POLICY", "live"),
        write_workers=int(getattr(settings, "WRITE_WORKERS", 2)),
    )
    app.extensions["site_ledger"] = container
    atexit.register(container.close)

    register_places(app, container)
    register_records(app, container)

    return app
