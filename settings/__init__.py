"""Application settings."""

import os
from pathlib import Path

# Database
DB_PATH = os.getenv("FLIP_DB_PATH", "flip.duckdb")

# Logging
LOG_DIR = Path(os.getenv("FLIP_LOG_DIR", "logs"))
LOG_LEVEL = os.getenv("FLIP_LOG_LEVEL", "INFO")
LOG_TO_FILE = os.getenv("FLIP_LOG_TO_FILE", "1") == "1"
LOG_RETENTION = os.getenv("FLIP_LOG_RETENTION", "7 days")

# API
API_BASE_URL = "https://prices.runescape.wiki/api/v1/osrs"
API_TIMEOUT = 30
USER_AGENT = os.getenv("FLIP_USER_AGENT", "flip-analyzer")
MAX_CONCURRENT = 20

# Timeseries cache
VALID_INTERVALS = ("5m", "1h", "6h", "24h")
FLUSH_DELAY = 0.05
BATCH_SIZE = 20
TIMESERIES_TTL = 5 * 60
CLEANUP_INTERVAL = 60 * 60

# Expressions
MAX_COLUMN_DEPTH = 10

# Key-value storage
STORAGE_KEYS = {
    "columns": "flip-analyzer-columns-v1",
    "filters": "flip-analyzer-filters-v1",
    "favorites": "flip-analyzer-favorites-v1",
}
