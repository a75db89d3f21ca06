"""SQLAlchemy engine helpers for the portal store.

The portal targets PostgreSQL in production and SQLite for local development
and CI. Repositories talk to the store through SQLAlchemy Core `text()`
statements; no declarative models are defined, this module only manages the
connection lifecycle.
"""

from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from portal.config import get_config

logger = logging.getLogger(__name__)


def _db_url() -> str:
    # Environment overrides are already folded into the config chain
    return get_config().database.dsn


def _engine_kwargs(url: str, ssl_required: bool = False) -> dict:
    kwargs: dict = {"future": True, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url:
            kwargs["poolclass"] = StaticPool
    elif url.startswith("postgresql") and ssl_required:
        kwargs["connect_args"] = {"sslmode": "require"}
    return kwargs


# Module-level cached Engine shared by every repository
_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None


def get_engine(url: str | None = None) -> Engine:
    """Return a singleton SQLAlchemy Engine for the given URL.

    A different URL replaces the cached engine. In-memory SQLite uses a
    StaticPool so the single connection (and therefore the schema) survives
    across sessions and threads.
    """
    global _ENGINE, _ENGINE_URL
    resolved_url = url or _db_url()

    if _ENGINE is None or _ENGINE_URL != resolved_url:
        kwargs = _engine_kwargs(resolved_url, get_config().database.ssl_required)
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = create_engine(resolved_url, **kwargs)
        _ENGINE_URL = resolved_url
        logger.info("db_engine_created dialect=%s", _ENGINE.dialect.name)

    return _ENGINE
