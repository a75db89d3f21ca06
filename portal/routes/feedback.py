"""Public contact form and its admin inbox."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from portal.guards.access import current_identity, require_any_role
from portal.http.error_mapping import problem
from portal.logic.repository_feedback import FeedbackNotFound, create_feedback, list_feedback, update_feedback
from portal.models.payloads import FeedbackCreate, FeedbackPatch

router = APIRouter()


@router.post(
    "/feedback",
    summary="Send a question, complaint or suggestion",
    operation_id="createFeedback",
    tags=["Feedback"],
)
def post_feedback(payload: FeedbackCreate, identity: Optional[str] = Depends(current_identity)) -> JSONResponse:
    item = create_feedback(
        name=payload.name,
        email=payload.email,
        subject=payload.subject,
        message=payload.message,
        message_type=payload.message_type,
        submitter_id=identity,
    )
    return JSONResponse(item, status_code=201)


@router.get(
    "/admin/feedback",
    summary="List feedback messages, newest first",
    operation_id="listFeedback",
    tags=["Feedback"],
    dependencies=[Depends(require_any_role)],
)
def get_feedback() -> dict:
    return {"items": list_feedback()}


@router.patch(
    "/admin/feedback/{feedback_id}",
    summary="Update a feedback message's status or response",
    operation_id="updateFeedback",
    tags=["Feedback"],
    dependencies=[Depends(require_any_role)],
)
def patch_feedback(feedback_id: str, payload: FeedbackPatch) -> dict:
    try:
        return update_feedback(feedback_id, payload.model_dump(exclude_unset=True))
    except FeedbackNotFound:
        raise HTTPException(status_code=404, detail=problem("not_found", f"feedback {feedback_id} not found"))


__all__ = ["router"]
