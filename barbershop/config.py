"""Configuration objects loaded by ``create_app``."""
from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "on"}


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{PROJECT_ROOT / 'instance' / 'barbershop.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", str(PROJECT_ROOT / "uploads"))
    UPLOAD_URL_PREFIX = "/uploads"
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_UPLOAD_MB", 16)) * 1024 * 1024

    # Built single-page frontend, served only when the directory exists.
    FRONTEND_DIST = os.environ.get("FRONTEND_DIST", str(PROJECT_ROOT / "dist"))

    TOKEN_MAX_AGE = int(os.environ.get("TOKEN_MAX_AGE", 12 * 60 * 60))
    PRIVILEGED_ROLE = "admin"

    SEED_ADMIN = _env_flag("SEED_ADMIN", True)
    ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "admin")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SEED_ADMIN = True
    ADMIN_USERNAME = "admin"
    ADMIN_PASSWORD = "admin"
    LOG_LEVEL = "WARNING"
