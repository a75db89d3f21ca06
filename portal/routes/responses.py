"""Submitted responses viewer for tender managers."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from portal.config import get_config
from portal.guards.access import require_tender_manager
from portal.logic.repository_questions import list_questions
from portal.logic.repository_responses import list_responses
from portal.logic.repository_tenders import find_tender
from portal.logic.response_viewer import build_response_views

router = APIRouter()


@router.get(
    "/admin/tenders/{tender_id}/responses",
    summary="List a tender's responses rendered against its current questions",
    operation_id="listTenderResponses",
    tags=["Responses"],
    dependencies=[Depends(require_tender_manager)],
)
def get_tender_responses(tender_id: str) -> dict:
    labels = get_config().labels
    tender = find_tender(tender_id)
    questions = list_questions(tender_id)
    records = list_responses(tender_id)
    return {
        "tender_id": tender_id,
        "title": tender["title"] if tender is not None else labels.missing_tender,
        "questions": [q.to_dict() for q in questions],
        "items": build_response_views(
            questions,
            records,
            missing_label=labels.missing_question,
            anonymous_label=labels.anonymous_submitter,
        ),
    }


__all__ = ["router"]
