"""
Module: sponsorkit/utils/config_handler.py
Unified comment style: module docstring + minimal inline notes.
"""
import os
from pathlib import Path
from typing import Any, Dict, Mapping

DEFAULT_DEV_SECRET = "dev-only-key-not-for-production"

DEFAULT_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def _flag(name: str, default: str = "0") -> bool:
    return (os.getenv(name, default) or "").strip().lower() in {"1", "true", "yes", "on"}


def _int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


def data_dir() -> Path:
    raw = os.getenv("DATA_DIR")
    return Path(raw) if raw else Path.cwd() / "data"


def _origins() -> list[str]:
    raw = os.getenv("ALLOWED_ORIGINS") or os.getenv("CORS_ORIGIN") or ""
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or list(DEFAULT_ORIGINS)


def load_config(overrides: Mapping[str, Any] | None = None) -> Dict[str, Any]:
    """Collect environment settings into one dict; ``overrides`` wins."""
    app_env = (os.getenv("APP_ENV") or os.getenv("FLASK_ENV") or "development").strip().lower()
    data: Dict[str, Any] = {
        "APP_ENV": app_env,
        "DATABASE_URL": os.getenv("DATABASE_URL") or f"sqlite:///{data_dir() / 'sponsorkit.db'}",
        "SECRET_KEY": os.getenv("SECRET_KEY", ""),
        "JWT_SECRET_KEY": os.getenv("JWT_SECRET_KEY", ""),
        "SESSION_EXPIRES_DAYS": _int("SESSION_EXPIRES_DAYS", 7),
        "COOKIE_SECURE": _flag("COOKIE_SECURE", "1" if app_env == "production" else "0"),
        "COOKIE_CSRF_PROTECT": _flag("COOKIE_CSRF_PROTECT", "0"),
        "ALLOWED_ORIGINS": _origins(),
        "EXPOSE_ERROR_DETAILS": _flag("EXPOSE_ERROR_DETAILS", "1" if app_env == "development" else "0"),
        "AUTO_MIGRATE": _flag("AUTO_MIGRATE", "1"),
        "MAX_CONTENT_MB": _int("MAX_CONTENT_MB", 10),
        "LOG_LEVEL": (os.getenv("LOG_LEVEL") or "INFO").upper(),
        "TESTING": False,
    }
    if overrides:
        data.update(overrides)

    secret = data.get("SECRET_KEY") or ""
    if not secret or secret == "dev":
        if data["APP_ENV"] == "production":
            raise ValueError("SECRET_KEY must be set in production")
        data["SECRET_KEY"] = DEFAULT_DEV_SECRET
    if not data.get("JWT_SECRET_KEY"):
        data["JWT_SECRET_KEY"] = data["SECRET_KEY"]
    return data
