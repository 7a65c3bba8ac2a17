# backend/discpos/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/discpos.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location (postgresql://...)
        "sqlite:///discpos.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer tokens
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET", os.environ.get("SECRET_KEY", "dev-jwt-secret-change-me"))
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRES_HOURS = int(os.environ.get("JWT_EXPIRES_HOURS", "24"))

    # bcrypt cost factor (tests drop this to 4)
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "10"))

    # Inventory
    LOW_STOCK_THRESHOLD = 10
    ALLOW_NEGATIVE_STOCK = _env_flag("ALLOW_NEGATIVE_STOCK")

    # Comma separated list, "*" allows any origin
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
