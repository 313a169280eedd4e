# -*- coding: utf-8 -*-
"""
Application configuration.

Settings are read from environment variables; a ``.env`` file in the project
root is loaded first when present.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _default_backend() -> str:
    """Postgres when a server is configured, otherwise the embedded store."""
    backend = os.getenv("DATA_BACKEND", "").lower()
    if backend in ("local", "postgres"):
        return backend
    if os.getenv("DATABASE_URL") or os.getenv("QOS_DB_HOST"):
        return "postgres"
    return "local"


# ============================================================================
# Read settings from environment variables (from .env or system)
# ============================================================================
_PROJECT_ROOT = Path(__file__).parent.parent.parent

_DATA_BACKEND = _default_backend()
_DATABASE_URL = os.getenv("DATABASE_URL", "")
_SQLITE_PATH = os.getenv("QOS_SQLITE_PATH", "")

_STALE_THRESHOLD_DAYS = int(os.getenv("QOS_STALE_THRESHOLD_DAYS", "30"))
_DEFAULT_USER = os.getenv("QOS_DEFAULT_USER", "demo-user")
_LOG_TO_FILE = _env_bool("QOS_LOG_TO_FILE", "true")


@dataclass
class Config:
    """Application configuration."""

    # Application Info
    APP_NAME: str = "QOS-ET"
    APP_TITLE: str = "Quality Complaint Data Consistency Core"
    VERSION: str = "1.0.0"

    # Paths
    PROJECT_ROOT: Path = _PROJECT_ROOT
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # Storage backend: "local" (embedded store) or "postgres" (relational store)
    DATA_BACKEND: str = _DATA_BACKEND
    DATABASE_URL: str = _DATABASE_URL

    # SQLite (embedded store / development fallback)
    DB_NAME: str = "qos_et.db"
    DB_PATH: Path = Path(_SQLITE_PATH) if _SQLITE_PATH else DATA_DIR / DB_NAME

    # Embedded store bulk writes are split into slices of this size
    EMBEDDED_WRITE_CHUNK: int = 2000

    # Identity fallback when the caller supplies none
    DEFAULT_USER_ID: str = _DEFAULT_USER

    # Dataset freshness
    STALE_THRESHOLD_DAYS: int = _STALE_THRESHOLD_DAYS

    # Logging
    LOG_TO_FILE: bool = _LOG_TO_FILE
    LOG_FILE: str = "app.log"
    LOG_PATH: Path = LOGS_DIR / LOG_FILE
    LOG_MAX_BYTES: int = 5 * 1024 * 1024  # 5MB
    LOG_BACKUP_COUNT: int = 3

    # Date/Time Formats
    DATE_FORMAT: str = "%Y-%m-%d"
    DATETIME_FORMAT: str = "%Y-%m-%d %H:%M:%S"


# Upload sections tracked by the freshness evaluator
class Sections:
    COMPLAINTS = "complaints"
    DELIVERIES = "deliveries"
    PPAP = "ppap"
    DEVIATIONS = "deviations"
    AUDIT = "audit"
    PLANTS = "plants"

    # Order used for health summaries
    ALL = ("plants", "complaints", "deliveries", "ppap", "deviations", "audit")
