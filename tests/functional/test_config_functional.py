"""Configuration resolution and the engine settings derived from it."""

from __future__ import annotations

import json

import pytest
from sqlalchemy.pool import StaticPool

from portal.config import get_config, load_config
from portal.db.base import _db_url, _engine_kwargs


@pytest.fixture()
def config_dir(tmp_path, monkeypatch):
    """Run with no database env overrides from an empty working directory."""
    for key in ("TEST_DATABASE_URL", "DATABASE_URL", "DATABASE_SSL_REQUIRED"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_config.cache_clear()
    yield tmp_path
    get_config.cache_clear()


def test_engine_url_comes_from_the_config_file(config_dir):
    dsn = f"sqlite:///{config_dir / 'prod.db'}"
    (config_dir / "portal_config.json").write_text(
        json.dumps({"database": {"dsn": dsn, "ssl_required": True}}), encoding="utf-8"
    )
    assert load_config().database.dsn == dsn
    assert load_config().database.ssl_required is True
    assert _db_url() == dsn


def test_engine_url_from_config_text_file(config_dir):
    (config_dir / "config").mkdir()
    (config_dir / "config" / "database.url").write_text("sqlite:///override.db\n", encoding="utf-8")
    assert _db_url() == "sqlite:///override.db"


def test_environment_wins_over_config_file(config_dir, monkeypatch):
    (config_dir / "portal_config.json").write_text(
        json.dumps({"database": {"dsn": "sqlite:///from-file.db"}}), encoding="utf-8"
    )
    monkeypatch.setenv("DATABASE_URL", "sqlite:///from-env.db")
    assert _db_url() == "sqlite:///from-env.db"


def test_in_memory_default_without_any_source(config_dir):
    assert _db_url() == "sqlite+pysqlite:///:memory:"


def test_postgres_honours_ssl_flag():
    url = "postgresql+psycopg2://portal@db/portal"
    assert _engine_kwargs(url, ssl_required=True)["connect_args"] == {"sslmode": "require"}
    assert "connect_args" not in _engine_kwargs(url, ssl_required=False)


def test_sqlite_engine_settings():
    memory = _engine_kwargs("sqlite+pysqlite:///:memory:")
    assert memory["poolclass"] is StaticPool
    assert memory["connect_args"] == {"check_same_thread": False}
    assert "poolclass" not in _engine_kwargs("sqlite:///portal.db", ssl_required=True)
