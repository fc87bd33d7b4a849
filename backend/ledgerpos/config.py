# backend/ledgerpos/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/ledgerpos.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///ledgerpos.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Global kill switch for phase-2 GL posting. Business units still opt in
    # through PosConfiguration.auto_post_to_gl.
    LEDGER_AUTO_POST_ENABLED = _env_bool("LEDGER_AUTO_POST_ENABLED", True)

    # Used when a business unit has no tax rate of its own (12%)
    POS_DEFAULT_TAX_RATE_BPS = int(os.environ.get("POS_DEFAULT_TAX_RATE_BPS", "1200"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
