from __future__ import annotations

"""Functional test bootstrap for the portal API.

Points the app at a file-backed SQLite database before any `portal` import,
applies the SQL migrations once per session, and empties every table between
tests so each test starts from a known store.
"""

import os
import pathlib
from typing import Callable, Iterator

import pytest

_ROOT = pathlib.Path(__file__).resolve().parents[2]
_DB_FILE = _ROOT / "tmp" / "functional_tests.db"
_DB_FILE.parent.mkdir(parents=True, exist_ok=True)
if _DB_FILE.exists():
    _DB_FILE.unlink()

# Use a file-backed SQLite DB to ensure persistence across connections
os.environ["TEST_DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
os.environ["DATABASE_URL"] = os.environ["TEST_DATABASE_URL"]
# Disable app startup auto-migrations; the session fixture applies them
os.environ["AUTO_APPLY_MIGRATIONS"] = "0"

_TABLES = ("tender", "tender_question", "tender_response", "role_assignment", "feedback")

ADMIN_ID = "admin-0001"
MANAGER_ID = "manager-0001"
LEGAL_ID = "legal-0001"
VISITOR_ID = "visitor-0001"


def _apply_sqlite_migrations() -> None:
    from portal.db.base import get_engine
    from portal.db.migrations_runner import DEFAULT_MIGRATIONS_DIR, apply_migrations

    engine = get_engine(os.environ["TEST_DATABASE_URL"])
    # Ensure a clean migration journal so the schema is applied on this DB
    journal = DEFAULT_MIGRATIONS_DIR / "_journal.json"
    if journal.exists():
        journal.unlink()
    apply_migrations(engine)


@pytest.fixture(scope="session", autouse=True)
def functional_sqlite_bootstrap() -> Iterator[None]:
    """Session-level bootstrap: apply migrations once for the shared DB."""
    _apply_sqlite_migrations()
    yield


@pytest.fixture(autouse=True)
def clean_tables() -> Iterator[None]:
    from sqlalchemy import text

    from portal.db.base import get_engine

    with get_engine().begin() as conn:
        for table in _TABLES:
            conn.execute(text(f"DELETE FROM {table}"))
    yield


@pytest.fixture()
def client():
    from fastapi.testclient import TestClient

    from portal.main import create_app

    with TestClient(create_app()) as c:
        yield c


@pytest.fixture()
def grant() -> Callable[[str, str], None]:
    """Insert a role assignment directly, bypassing the admin API."""
    from portal.logic.repository_roles import assign_role

    def _grant(identity_id: str, role: str) -> None:
        assign_role(identity_id, role)

    return _grant


@pytest.fixture()
def staff(grant) -> dict:
    """One identity per role; the visitor holds none."""
    grant(ADMIN_ID, "administrator")
    grant(MANAGER_ID, "tender_manager")
    grant(LEGAL_ID, "legal_manager")
    return {
        "admin": {"X-Identity-Id": ADMIN_ID},
        "manager": {"X-Identity-Id": MANAGER_ID},
        "legal": {"X-Identity-Id": LEGAL_ID},
        "visitor": {"X-Identity-Id": VISITOR_ID},
    }
