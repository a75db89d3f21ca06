"""Configuration utilities for the portal service.

Configuration is resolved with the following rules:
- Primary source: `portal_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_PORTAL_CONFIG = Path("portal_config.json")
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class DatabaseConfig(BaseModel):
    dsn: str
    ssl_required: bool = Field(default=False)
    auto_apply_migrations: bool = Field(default=False)

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v


class AuthConfig(BaseModel):
    # Header set by the authentication gateway in front of the service
    identity_header: str = Field(default="X-Identity-Id")

    @field_validator("identity_header")
    @classmethod
    def header_must_be_token(cls, v: str) -> str:
        v = (v or "").strip()
        if not v or any(ch.isspace() for ch in v):
            raise ValueError("auth.identity_header must be a single header name")
        return v


class LabelsConfig(BaseModel):
    missing_question: str = Field(default="question no longer available", min_length=1)
    missing_tender: str = Field(default="tender no longer available", min_length=1)
    anonymous_submitter: str = Field(default="anonymous", min_length=1)


class AppConfig(BaseModel):
    database: DatabaseConfig
    auth: AuthConfig = Field(default_factory=AuthConfig)
    labels: LabelsConfig = Field(default_factory=LabelsConfig)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def _truthy(value: Optional[str]) -> bool:
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) portal_config.json at project root
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_PORTAL_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    dsn = (
        _env("TEST_DATABASE_URL")
        or _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or "sqlite+pysqlite:///:memory:"
    )
    ssl_required = _truthy(_env("DATABASE_SSL_REQUIRED") or _read_config_file("database.ssl.required") or _base("database.ssl_required", "false"))
    auto_migrate = _truthy(_env("AUTO_APPLY_MIGRATIONS") or _read_config_file("database.auto_apply_migrations") or _base("database.auto_apply_migrations", "false"))

    identity_header = _env("PORTAL_IDENTITY_HEADER") or _read_config_file("auth.identity_header") or _base("auth.identity_header", "X-Identity-Id")

    origins_text = _env("PORTAL_CORS_ORIGINS") or _read_config_file("cors.origins")
    if origins_text:
        origins = [o.strip() for o in origins_text.split(",") if o.strip()]
    else:
        raw = base.get("cors_origins") if isinstance(base, dict) else None
        origins = [str(o) for o in raw] if isinstance(raw, list) and raw else ["*"]

    labels = base.get("labels") if isinstance(base.get("labels"), dict) else {}

    try:
        return AppConfig(
            database=DatabaseConfig(dsn=dsn, ssl_required=ssl_required, auto_apply_migrations=auto_migrate),
            auth=AuthConfig(identity_header=str(identity_header)),
            labels=LabelsConfig(**labels),
            cors_origins=origins,
        )
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Return the process-wide configuration, loading it on first use."""
    return load_config()


__all__ = [
    "AppConfig",
    "AuthConfig",
    "DatabaseConfig",
    "LabelsConfig",
    "get_config",
    "load_config",
]
