# backend/brillix/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # "development" | "production" | "test"
    ENV = os.environ.get("APP_ENV", "development")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # SQLite DB stored in backend/instance/brillix.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///brillix.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Signed identity tokens
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET", "dev-jwt-secret-change-me")
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRES_IN = os.environ.get("JWT_EXPIRE", "7d")

    # bcrypt cost factor used when a password is (re)hashed
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_SALT_ROUNDS", "10"))

    CORS_ORIGIN = os.environ.get("CORS_ORIGIN", "http://localhost:3000")

    # Per-IP request limits: (max requests, window seconds)
    RATELIMIT_ENABLED = _env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_API = (100, 15 * 60)
    RATELIMIT_AUTH = (5, 15 * 60)
    RATELIMIT_REGISTER = (3, 60 * 60)
