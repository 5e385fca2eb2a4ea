"""Core configuration and infrastructure helpers."""

from .config import (
    APP_ENV,
    BASE_URL,
    BCRYPT_ROUNDS,
    COOKIE_DOMAIN,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    DB_RESET,
    REMEMBER_FOR_DAYS,
    RESET_PASSWORD_WITHIN_HOURS,
    SECRET_KEY,
    SESSION_COOKIE,
    SSO_ENABLED,
)
from .database import engine, get_session
from .logging import setup_logging
from .time import as_utc, utcnow

__all__ = [
    "APP_ENV",
    "BASE_URL",
    "BCRYPT_ROUNDS",
    "COOKIE_DOMAIN",
    "COOKIE_SAMESITE",
    "COOKIE_SECURE",
    "DB_RESET",
    "REMEMBER_FOR_DAYS",
    "RESET_PASSWORD_WITHIN_HOURS",
    "SECRET_KEY",
    "SESSION_COOKIE",
    "SSO_ENABLED",
    "as_utc",
    "engine",
    "get_session",
    "setup_logging",
    "utcnow",
]
