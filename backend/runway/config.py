# backend/runway/config.py
from __future__ import annotations
import os
from datetime import timedelta


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Signing key for bearer tokens; falls back to SECRET_KEY in dev
    JWT_SECRET = os.environ.get("JWT_SECRET", SECRET_KEY)
    SESSION_TTL = timedelta(days=int(os.environ.get("SESSION_TTL_DAYS", "7")))

    # SQLite DB stored in backend/instance/runway.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///runway.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    DEFAULT_CURRENCY = os.environ.get("DEFAULT_CURRENCY", "CAD")
    EXPORT_LOCALE = os.environ.get("EXPORT_LOCALE", "en_US")

    ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "ALLOWED_ORIGINS",
            "http://localhost:5173,http://localhost:4173",
        ).split(",")
        if origin.strip()
    ]

    # New organizations start with a handful of example transactions
    SEED_SAMPLE_TRANSACTIONS = _env_flag("SEED_SAMPLE_TRANSACTIONS", True)

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
