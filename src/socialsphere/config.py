# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024
DEFAULT_SESSION_SALT = "socialsphere.session.v1"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "y"}


def _optional_int(name: str) -> Optional[int]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    return int(raw)


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup and passed explicitly."""

    secret_key: str
    db_path: Optional[Path] = Path("data") / "socialsphere.yml"
    upload_dir: Path = Path("uploads")
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    session_salt: str = DEFAULT_SESSION_SALT
    session_max_age: Optional[int] = None
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 3000
    reload: bool = False
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def secure_cookies(self) -> bool:
        return self.is_production


def _load_secret_key(environment: str) -> str:
    """Read the signing secret, generating a throwaway one outside production."""
    secret = os.getenv("SECRET_KEY") or os.getenv("SOCIALSPHERE_SECRET_KEY")
    if secret:
        return secret
    if environment == "production":
        raise RuntimeError("Missing SECRET_KEY (or SOCIALSPHERE_SECRET_KEY) in environment")
    logger.warning(
        "Using a randomly generated signing secret. Sessions will break when the "
        "process restarts. Set SECRET_KEY to a fixed value."
    )
    return secrets.token_urlsafe(32)


def load_settings() -> Settings:
    environment = os.getenv("SOCIALSPHERE_ENV", "development").strip().lower()
    port = os.getenv("SOCIALSPHERE_PORT") or os.getenv("PORT") or "3000"
    return Settings(
        secret_key=_load_secret_key(environment),
        db_path=Path(os.getenv("SOCIALSPHERE_DB_PATH", str(Path("data") / "socialsphere.yml"))).resolve(),
        upload_dir=Path(os.getenv("SOCIALSPHERE_UPLOAD_DIR", "uploads")).resolve(),
        max_upload_bytes=int(os.getenv("SOCIALSPHERE_MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES))),
        session_salt=os.getenv("SOCIALSPHERE_SESSION_SALT", DEFAULT_SESSION_SALT),
        session_max_age=_optional_int("SOCIALSPHERE_SESSION_MAX_AGE"),
        environment=environment,
        host=os.getenv("SOCIALSPHERE_HOST", "0.0.0.0"),
        port=int(port),
        reload=_env_flag("SOCIALSPHERE_RELOAD"),
        log_level=os.getenv("SOCIALSPHERE_LOG_LEVEL", "INFO").upper(),
    )
