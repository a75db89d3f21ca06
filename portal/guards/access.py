"""Request-scoped identity and capability guards.

The authentication gateway in front of the service forwards the caller's
identity in a header (`X-Identity-Id` by default). Roles are resolved once
per request; FastAPI caches the dependency for every guard that needs it.
A failed role lookup answers 503 ACCESS_UNAVAILABLE, a missing capability
403 ACCESS_DENIED.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request

from portal.config import get_config
from portal.http.error_mapping import problem
from portal.logic.repository_roles import resolve_roles
from portal.logic.roles import Capabilities, RoleResolution

logger = logging.getLogger(__name__)


def current_identity(request: Request) -> Optional[str]:
    header = get_config().auth.identity_header
    value = (request.headers.get(header) or "").strip()
    return value or None


def current_roles(identity: Optional[str] = Depends(current_identity)) -> RoleResolution:
    return resolve_roles(identity)


def _require(predicate: Callable[[Capabilities], bool], label: str) -> Callable[..., RoleResolution]:
    def guard(resolution: RoleResolution = Depends(current_roles)) -> RoleResolution:
        if not resolution.available:
            raise HTTPException(
                status_code=503,
                detail=problem("access_unavailable", "Roles could not be resolved; try again later"),
            )
        if not predicate(resolution.capabilities):
            logger.info(
                "access_denied identity_id=%s required=%s roles=%s",
                resolution.identity_id,
                label,
                sorted(resolution.roles),
            )
            raise HTTPException(status_code=403, detail=problem("access_denied", f"requires {label}"))
        return resolution

    guard.__name__ = f"require_{label}"
    return guard


require_administrator = _require(lambda c: c.is_administrator, "administrator")
require_tender_manager = _require(lambda c: c.can_manage_tenders, "tender_management")
require_any_role = _require(lambda c: c.has_console_access, "admin_console")


__all__ = [
    "current_identity",
    "current_roles",
    "require_administrator",
    "require_tender_manager",
    "require_any_role",
]
