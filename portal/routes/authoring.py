"""Tender form schema management for tender managers.

Create, edit, delete and reorder the questions of a tender's application
form. Domain rule violations come back as 422 problem bodies from the global
FormValidationError handler.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import JSONResponse

from portal.guards.access import require_tender_manager
from portal.http.error_mapping import problem
from portal.logic.repository_questions import (
    QuestionNotFound,
    create_question,
    delete_question,
    list_questions,
    move_question,
    update_question,
)
from portal.logic.repository_tenders import find_tender
from portal.models.payloads import MoveRequest, QuestionDraft, QuestionPatch

router = APIRouter(dependencies=[Depends(require_tender_manager)])


def _question_not_found(question_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=problem("not_found", f"question {question_id} not found"))


@router.get(
    "/admin/tenders/{tender_id}/questions",
    summary="List a tender's questions by position",
    operation_id="listTenderQuestions",
    tags=["Authoring"],
)
def get_tender_questions(tender_id: str) -> dict:
    return {"tender_id": tender_id, "items": [q.to_dict() for q in list_questions(tender_id)]}


@router.post(
    "/admin/tenders/{tender_id}/questions",
    summary="Add a question to a tender's form",
    operation_id="createTenderQuestion",
    tags=["Authoring"],
)
def post_tender_question(tender_id: str, payload: QuestionDraft) -> JSONResponse:
    if find_tender(tender_id) is None:
        raise HTTPException(status_code=404, detail=problem("not_found", f"tender {tender_id} not found"))
    question = create_question(
        tender_id,
        text=payload.text,
        kind=payload.kind,
        choices=payload.choices,
        required=payload.required,
        position=payload.position,
    )
    return JSONResponse(question.to_dict(), status_code=201)


@router.patch(
    "/admin/questions/{question_id}",
    summary="Edit a question in place",
    operation_id="updateTenderQuestion",
    tags=["Authoring"],
)
def patch_tender_question(question_id: str, payload: QuestionPatch) -> dict:
    changes = payload.model_dump(exclude_unset=True)
    try:
        return update_question(question_id, changes).to_dict()
    except QuestionNotFound:
        raise _question_not_found(question_id)


@router.delete(
    "/admin/questions/{question_id}",
    summary="Delete a question; stored answers to it are kept",
    operation_id="deleteTenderQuestion",
    tags=["Authoring"],
)
def remove_tender_question(question_id: str) -> Response:
    try:
        delete_question(question_id)
    except QuestionNotFound:
        raise _question_not_found(question_id)
    return Response(status_code=204)


@router.post(
    "/admin/tenders/{tender_id}/questions/{question_id}/move",
    summary="Swap a question with its neighbour",
    operation_id="moveTenderQuestion",
    tags=["Authoring"],
)
def post_move_question(tender_id: str, question_id: str, payload: MoveRequest) -> dict:
    try:
        ordered = move_question(tender_id, question_id, payload.direction)
    except QuestionNotFound:
        raise _question_not_found(question_id)
    return {"tender_id": tender_id, "items": [q.to_dict() for q in ordered]}


__all__ = ["router"]
