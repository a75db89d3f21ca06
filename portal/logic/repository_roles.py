"""Role assignment repository and the role resolver.

Role rows reference the raw identity identifier issued by the authentication
gateway. Assignments have set semantics: a duplicate insert is reported as
a conflict and never produces a second row.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from portal.db.base import get_engine
from portal.logic.roles import ALL_ROLES, RoleResolution

logger = logging.getLogger(__name__)


class DuplicateRoleAssignment(Exception):
    """The identity already holds the role."""


class InvalidRoleAssignment(ValueError):
    """The identity or role of an assignment is not acceptable."""


class UnknownRole(InvalidRoleAssignment):
    """The role label is not one of the known roles."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def list_roles(identity_id: str) -> frozenset:
    """Return the role labels assigned to `identity_id`.

    Store errors propagate; `resolve_roles` is the fail-closed entry point.
    """
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text("SELECT role FROM role_assignment WHERE identity_id = :iid"),
            {"iid": str(identity_id)},
        ).fetchall()
    roles = set()
    for (role,) in rows:
        if role in ALL_ROLES:
            roles.add(str(role))
        else:
            logger.warning("role_label_ignored identity_id=%s role=%s", identity_id, role)
    return frozenset(roles)


def resolve_roles(identity_id: Optional[str]) -> RoleResolution:
    """Resolve the roles of `identity_id`, failing closed.

    No identity resolves to the empty set. A store failure also resolves to
    the empty set, flagged unavailable, and is logged.
    """
    identity = (identity_id or "").strip() or None
    if identity is None:
        return RoleResolution.of(None, ())
    try:
        roles = list_roles(identity)
    except SQLAlchemyError:
        logger.error("role_resolution_failed identity_id=%s", identity, exc_info=True)
        return RoleResolution.of(identity, (), available=False)
    logger.info("roles_resolved identity_id=%s roles=%s", identity, sorted(roles))
    return RoleResolution.of(identity, roles)


def list_assignments() -> List[Dict[str, object]]:
    """Return every identity holding at least one role with its sorted roles."""
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text("SELECT identity_id, role FROM role_assignment ORDER BY identity_id, role")
        ).fetchall()
    grouped: Dict[str, List[str]] = {}
    for identity_id, role in rows:
        grouped.setdefault(str(identity_id), []).append(str(role))
    return [{"identity_id": iid, "roles": roles} for iid, roles in grouped.items()]


def assign_role(identity_id: str, role: str) -> Dict[str, str]:
    if role not in ALL_ROLES:
        raise UnknownRole(f"role must be one of {sorted(ALL_ROLES)}")
    identity = str(identity_id or "").strip()
    if not identity:
        raise InvalidRoleAssignment("identity_id must not be blank")
    eng = get_engine()
    try:
        with eng.begin() as conn:
            existing = conn.execute(
                sql_text("SELECT 1 FROM role_assignment WHERE identity_id = :iid AND role = :role"),
                {"iid": identity, "role": role},
            ).fetchone()
            if existing is not None:
                raise DuplicateRoleAssignment(f"{identity} already has role {role}")
            conn.execute(
                sql_text(
                    "INSERT INTO role_assignment (identity_id, role, created_at) VALUES (:iid, :role, :ts)"
                ),
                {"iid": identity, "role": role, "ts": _now()},
            )
    except IntegrityError as exc:
        # Concurrent insert of the same pair lost the race on the unique constraint
        raise DuplicateRoleAssignment(f"{identity} already has role {role}") from exc
    logger.info("role_assigned identity_id=%s role=%s", identity, role)
    return {"identity_id": identity, "role": role}


def revoke_role(identity_id: str, role: str) -> bool:
    """Delete one assignment; return False when it did not exist."""
    eng = get_engine()
    with eng.begin() as conn:
        result = conn.execute(
            sql_text("DELETE FROM role_assignment WHERE identity_id = :iid AND role = :role"),
            {"iid": str(identity_id), "role": str(role)},
        )
    removed = (result.rowcount or 0) > 0
    logger.info("role_revoked identity_id=%s role=%s removed=%s", identity_id, role, removed)
    return removed


__all__ = [
    "DuplicateRoleAssignment",
    "InvalidRoleAssignment",
    "UnknownRole",
    "list_roles",
    "resolve_roles",
    "list_assignments",
    "assign_role",
    "revoke_role",
]
