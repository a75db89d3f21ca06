"""Role assignment management for administrators."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import JSONResponse

from portal.guards.access import require_administrator
from portal.http.error_mapping import problem
from portal.logic.repository_roles import (
    DuplicateRoleAssignment,
    InvalidRoleAssignment,
    assign_role,
    list_assignments,
    revoke_role,
)
from portal.models.payloads import RoleAssignmentCreate

router = APIRouter(dependencies=[Depends(require_administrator)])


@router.get(
    "/admin/roles",
    summary="List identities holding roles",
    operation_id="listRoleAssignments",
    tags=["Roles"],
)
def get_role_assignments() -> dict:
    return {"items": list_assignments()}


@router.post(
    "/admin/roles",
    summary="Grant a role to an identity",
    operation_id="assignRole",
    tags=["Roles"],
)
def post_role_assignment(payload: RoleAssignmentCreate) -> JSONResponse:
    try:
        created = assign_role(payload.identity_id, payload.role)
    except InvalidRoleAssignment as exc:
        raise HTTPException(status_code=422, detail=problem("validation_failed", str(exc)))
    except DuplicateRoleAssignment as exc:
        raise HTTPException(status_code=409, detail=problem("conflict", str(exc)))
    return JSONResponse(created, status_code=201)


@router.delete(
    "/admin/roles/{identity_id}/{role}",
    summary="Revoke a role from an identity",
    operation_id="revokeRole",
    tags=["Roles"],
)
def remove_role_assignment(identity_id: str, role: str) -> Response:
    if not revoke_role(identity_id, role):
        raise HTTPException(
            status_code=404,
            detail=problem("not_found", f"{identity_id} does not hold role {role}"),
        )
    return Response(status_code=204)


__all__ = ["router"]
