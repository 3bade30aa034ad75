"""
config/settings.py
──────────────────────────────────────────────────────────────────────────────
Single source of truth for all tuneable parameters.

All values can be overridden via environment variables or a .env file placed
at the project root.  The frozen dataclass ensures settings are never mutated
at runtime.

To swap the reference-data store, change the relevant env var — no code
edits required:
  REFERENCE_PROVIDER  → builtin | json | http | postgres
  REFERENCE_JSON_PATH → export file used by the json provider
  API_BASE_URL        → reference backend used by the http provider
  DB_DSN              → database used by the postgres provider
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (two levels up from this file)
load_dotenv(Path(__file__).parent.parent.parent / ".env")


def _env(key: str, default: str) -> str:
    return os.getenv(key, default)


def _env_int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _env_path(key: str, default: Path) -> Path:
    return Path(os.getenv(key, str(default)))


@dataclass(frozen=True)
class Settings:
    """Immutable application settings loaded from environment variables."""

    # ── Reference-data provider ─────────────────────────────────────────────
    # Valid values: "builtin" | "json" | "http" | "postgres"
    reference_provider: str = field(
        default_factory=lambda: _env("REFERENCE_PROVIDER", "builtin")
    )

    # ── JSON export ─────────────────────────────────────────────────────────
    reference_json_path: Path = field(
        default_factory=lambda: _env_path(
            "REFERENCE_JSON_PATH",
            Path(__file__).parent.parent.parent / "reference_data.json",
        )
    )

    # ── Reference backend (REST) ────────────────────────────────────────────
    api_base_url: str = field(
        default_factory=lambda: _env("API_BASE_URL", "http://localhost:8000")
    )
    gua_endpoint: str = field(
        default_factory=lambda: _env("GUA_ENDPOINT", "/api/guas")
    )
    yao_endpoint: str = field(
        default_factory=lambda: _env("YAO_ENDPOINT", "/api/yaos")
    )

    # ── Database ───────────────────────────────────────────────────────────
    db_dsn: str = field(
        default_factory=lambda: _env("DB_DSN", "dbname=oracle_db")
    )
    gua_table: str = field(
        default_factory=lambda: _env("GUA_TABLE", "guas")
    )
    yao_table: str = field(
        default_factory=lambda: _env("YAO_TABLE", "yaos")
    )

    # ── Output ─────────────────────────────────────────────────────────────
    # Valid values: "en" | "zh"
    summary_locale: str = field(
        default_factory=lambda: _env("SUMMARY_LOCALE", "en")
    )

    # ── HTTP timeouts (seconds) ────────────────────────────────────────────
    http_timeout: int = field(default_factory=lambda: _env_int("HTTP_TIMEOUT", 15))
    http_retries: int = field(default_factory=lambda: _env_int("HTTP_RETRIES", 3))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Returns a cached singleton Settings instance.

    Use this everywhere instead of instantiating Settings() directly —
    it guarantees a single object is shared across the entire process.
    """
    return Settings()
