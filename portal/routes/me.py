"""Current caller's roles, capabilities and visible admin panels."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from portal.guards.access import current_roles
from portal.logic.roles import RoleResolution

router = APIRouter()


@router.get(
    "/me/capabilities",
    summary="Resolve the caller's roles into capabilities and admin panels",
    operation_id="getMyCapabilities",
    tags=["Access"],
)
def get_my_capabilities(resolution: RoleResolution = Depends(current_roles)) -> dict:
    # Never an error: unresolved or anonymous callers get an empty role set
    return resolution.to_dict()


__all__ = ["router"]
