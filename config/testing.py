import os

SECRET_KEY = "test-secret"

STORAGE_BACKEND = "memory"
DATA_FILE = os.getenv("DATA_FILE", "instance/site-ledger-test.json")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "site_ledger_test"),
}

RATE_POLICY = "live"

WRITE_WORKERS = 1

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
