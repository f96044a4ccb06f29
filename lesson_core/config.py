from __future__ import annotations

import os
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent

# Data directory (dictionary JSON, lesson files):
DATA_DIR = Path(os.getenv("DATA_DIR", str(PACKAGE_DIR.parent / "data"))).resolve()

# Precomputed dictionary in the all_cedict.json shape; see scripts/build_cedict_json.py
CEDICT_PATH = Path(os.getenv("CEDICT_PATH", str(DATA_DIR / "all_cedict.json"))).resolve()

# "cursor" keeps matches in lesson order; "first_match" always scans from the start.
MATCH_STRATEGY = os.getenv("MATCH_STRATEGY", "cursor").strip().lower() or "cursor"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

ALIGNMENT_PROVIDER = "eleven_labs"


def _parse_csv_env(name: str) -> list[str]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return []
    return [x.strip() for x in raw.split(",") if x.strip()]


# CORS:
# - Default to a small allowlist (local dev). For production, set CORS_ORIGINS to your site origins.
#   Example:
#     CORS_ORIGINS=https://example.github.io,https://yourdomain.com
DEFAULT_CORS_ORIGINS = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:8081",
    "http://127.0.0.1",
    "http://127.0.0.1:3000",
]
CORS_ORIGINS = _parse_csv_env("CORS_ORIGINS") or DEFAULT_CORS_ORIGINS
