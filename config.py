"""
config.py - Configuration for the Pavement Maintenance Planning backend
"""
import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.resolve()
SEGMENTS_JSON_PATH = Path(
    os.environ.get(
        "SEGMENTS_JSON_PATH",
        str(PROJECT_ROOT / "data" / "road_network.json")
    )
)

# Database: PostgreSQL preferred; SQLite for local dev without Postgres
DATABASE_URL = os.environ.get(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{PROJECT_ROOT / 'pavement.db'}"
)
# Sync URL for seed scripts (SQLAlchemy sync engine)
DATABASE_URL_SYNC = DATABASE_URL.replace("+aiosqlite", "").replace("+asyncpg", "")

# Remote feature source: sql (segments table) | arcgis (feature layer) | none
REMOTE_SOURCE = os.environ.get("REMOTE_SOURCE", "sql").lower()
FEATURE_LAYER_URL = os.environ.get("FEATURE_LAYER_URL", "")
REMOTE_QUERY_TIMEOUT = float(os.environ.get("REMOTE_QUERY_TIMEOUT", 30))
SURVEY_YEAR = int(os.environ.get("SURVEY_YEAR", 2018))

# fixed: every record is SEGMENT_LENGTH_M long | measured: sum of Shape_Length
LENGTH_MODE = os.environ.get("LENGTH_MODE", "fixed").lower()

# Cost geometry
SEGMENT_LENGTH_M = float(os.environ.get("SEGMENT_LENGTH_M", 100))
STANDARD_ROAD_WIDTH_M = float(os.environ.get("STANDARD_ROAD_WIDTH_M", 7.5))

# Coalescing window for rapid parameter edits
RECALC_DEBOUNCE_MS = int(os.environ.get("RECALC_DEBOUNCE_MS", 300))

# API
API_PORT = int(os.environ.get("API_PORT", 8001))
