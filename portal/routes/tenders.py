"""Tender listing (public) and tender management (tender managers)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import JSONResponse

from portal.guards.access import require_tender_manager
from portal.http.error_mapping import problem
from portal.logic.repository_tenders import (
    TenderNotFound,
    create_tender,
    delete_tender,
    list_tenders,
    update_tender,
)
from portal.models.payloads import TenderCreate, TenderPatch

router = APIRouter()


@router.get(
    "/tenders",
    summary="List active tenders, newest first",
    operation_id="listActiveTenders",
    tags=["Tenders"],
)
def get_active_tenders() -> dict:
    return {"items": list_tenders(active_only=True)}


@router.get(
    "/admin/tenders",
    summary="List all tenders for management",
    operation_id="listTenders",
    tags=["Tenders"],
    dependencies=[Depends(require_tender_manager)],
)
def get_all_tenders(with_form: bool = False) -> dict:
    # with_form=true feeds the question and response pickers
    return {"items": list_tenders(with_form_only=with_form)}


@router.post(
    "/admin/tenders",
    summary="Create a tender",
    operation_id="createTender",
    tags=["Tenders"],
    dependencies=[Depends(require_tender_manager)],
)
def post_tender(payload: TenderCreate) -> JSONResponse:
    if not payload.title.strip():
        raise HTTPException(status_code=422, detail=problem("validation_failed", "title must not be blank"))
    created = create_tender(
        title=payload.title,
        content=payload.content,
        is_active=payload.is_active,
        has_form=payload.has_form,
    )
    return JSONResponse(created, status_code=201)


@router.patch(
    "/admin/tenders/{tender_id}",
    summary="Update a tender, including the active toggle",
    operation_id="updateTender",
    tags=["Tenders"],
    dependencies=[Depends(require_tender_manager)],
)
def patch_tender(tender_id: str, payload: TenderPatch) -> dict:
    changes = payload.model_dump(exclude_unset=True)
    if "title" in changes and changes["title"] is not None and not changes["title"].strip():
        raise HTTPException(status_code=422, detail=problem("validation_failed", "title must not be blank"))
    try:
        return update_tender(tender_id, changes)
    except TenderNotFound:
        raise HTTPException(status_code=404, detail=problem("not_found", f"tender {tender_id} not found"))


@router.delete(
    "/admin/tenders/{tender_id}",
    summary="Delete a tender; its questions and responses are kept",
    operation_id="deleteTender",
    tags=["Tenders"],
    dependencies=[Depends(require_tender_manager)],
)
def remove_tender(tender_id: str) -> Response:
    try:
        delete_tender(tender_id)
    except TenderNotFound:
        raise HTTPException(status_code=404, detail=problem("not_found", f"tender {tender_id} not found"))
    return Response(status_code=204)


__all__ = ["router"]
