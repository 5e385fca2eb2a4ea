"""Application settings and environment helpers."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(override=False)


def _require_env(name: str) -> str:
    """Return a required environment variable or raise an error."""

    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc


def _cookie_samesite(raw: str) -> str:
    """Return the SameSite policy; form posts carry no token so "none" is refused."""

    value = (raw or "").strip().lower()
    if value not in {"lax", "strict"}:
        raise RuntimeError("COOKIE_SAMESITE must be 'lax' or 'strict'")
    return value


_PROJECT_ROOT = Path(__file__).resolve().parents[2]


# Application security -------------------------------------------------------
SECRET_KEY = _require_env("SECRET_KEY")
APP_ENV = os.getenv("APP_ENV", "development").strip().lower()

SESSION_COOKIE = os.getenv("SESSION_COOKIE", "_gatehouse_session")
COOKIE_DOMAIN = os.getenv("COOKIE_DOMAIN") or None
COOKIE_SECURE = _env_bool("COOKIE_SECURE", APP_ENV == "production")
COOKIE_SAMESITE = _cookie_samesite(os.getenv("COOKIE_SAMESITE", "lax"))

BCRYPT_ROUNDS = _env_int("BCRYPT_ROUNDS", 12)
REMEMBER_FOR_DAYS = _env_int("REMEMBER_FOR_DAYS", 14)
RESET_PASSWORD_WITHIN_HOURS = _env_int("RESET_PASSWORD_WITHIN_HOURS", 6)


# Database -------------------------------------------------------------------
DATABASE_URL = os.getenv(
    "DATABASE_URL", f"sqlite:///{_PROJECT_ROOT / 'data' / 'app.db'}"
)
DB_RESET = _env_bool("DB_RESET", False)


# Mail -----------------------------------------------------------------------
MAIL_BACKEND = os.getenv("MAIL_BACKEND", "console").strip().lower()
MAIL_FROM = os.getenv("MAIL_FROM", "please-change-me@example.com")
SMTP_HOST = os.getenv("SMTP_HOST", "localhost")
SMTP_PORT = _env_int("SMTP_PORT", 587)
SMTP_USERNAME = os.getenv("SMTP_USERNAME") or None
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD") or None
SMTP_USE_TLS = _env_bool("SMTP_USE_TLS", True)

# Used for links in outgoing mail; the request URL is used when empty.
BASE_URL = os.getenv("BASE_URL", "").rstrip("/")


# Entra ID single sign-on ----------------------------------------------------
ENTRA_CLIENT_ID = os.getenv("ENTRA_CLIENT_ID")
ENTRA_CLIENT_SECRET = os.getenv("ENTRA_CLIENT_SECRET")
ENTRA_TENANT_ID = os.getenv("ENTRA_TENANT_ID", "common")
OAUTH_REDIRECT_URL = os.getenv("OAUTH_REDIRECT_URL") or None
SSO_ENABLED = bool(ENTRA_CLIENT_ID and ENTRA_CLIENT_SECRET)


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


__all__ = [
    "APP_ENV",
    "BASE_URL",
    "BCRYPT_ROUNDS",
    "COOKIE_DOMAIN",
    "COOKIE_SAMESITE",
    "COOKIE_SECURE",
    "DATABASE_URL",
    "DB_RESET",
    "ENTRA_CLIENT_ID",
    "ENTRA_CLIENT_SECRET",
    "ENTRA_TENANT_ID",
    "LOG_LEVEL",
    "MAIL_BACKEND",
    "MAIL_FROM",
    "OAUTH_REDIRECT_URL",
    "REMEMBER_FOR_DAYS",
    "RESET_PASSWORD_WITHIN_HOURS",
    "SECRET_KEY",
    "SESSION_COOKIE",
    "SMTP_HOST",
    "SMTP_PASSWORD",
    "SMTP_PORT",
    "SMTP_USERNAME",
    "SMTP_USE_TLS",
    "SSO_ENABLED",
]
