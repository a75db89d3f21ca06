"""Database bootstrap utilities for the portal.

Exposes the shared engine accessor and the SQL migrations runner that applies
files from the top-level `migrations/` directory. Repositories under
`portal/logic/` are the only callers that issue SQL.
"""

from portal.db.base import get_engine
from portal.db.migrations_runner import apply_migrations

__all__ = [
    "get_engine",
    "apply_migrations",
]
