"""Public tender application form: render and submit."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from portal.guards.access import current_identity
from portal.http.error_mapping import problem
from portal.http.problem import problem_response
from portal.logic.form_renderer import render_form
from portal.logic.form_session import FormSession, submit_session
from portal.logic.repository_questions import list_questions
from portal.logic.repository_responses import insert_response
from portal.logic.repository_tenders import find_tender
from portal.logic.validation import FormValidationError
from portal.models.payloads import ResponseSubmission

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/tenders/{tender_id}/form",
    summary="Render the tender's application form",
    operation_id="getTenderForm",
    tags=["Forms"],
)
def get_tender_form(tender_id: str) -> dict:
    tender = find_tender(tender_id)
    if tender is None:
        raise HTTPException(status_code=404, detail=problem("not_found", f"tender {tender_id} not found"))
    session = FormSession(tender_id=tender_id).load(list_questions(tender_id))
    return {
        "tender_id": tender_id,
        "title": tender["title"],
        "phase": session.phase,
        "fields": render_form(session),
    }


@router.post(
    "/tenders/{tender_id}/responses",
    summary="Submit an application form response",
    operation_id="submitTenderResponse",
    tags=["Forms"],
)
def post_tender_response(
    tender_id: str,
    payload: ResponseSubmission,
    identity: Optional[str] = Depends(current_identity),
) -> JSONResponse:
    # Questions may outlive their tender, so the form is accepted without a tender row
    session = FormSession(tender_id=tender_id, submitter_id=identity).load(list_questions(tender_id))
    for question_id, value in payload.answers.items():
        session.set_answer(question_id, value)
    try:
        submitted = submit_session(session, insert_response)
    except FormValidationError as exc:
        logger.info("form_rejected tender_id=%s violations=%s", tender_id, len(exc.errors))
        return problem_response(
            problem(
                "form_incomplete",
                str(exc),
                errors=exc.errors,
                answers=session.answers,
            )
        )
    except SQLAlchemyError:
        return problem_response(
            problem(
                "submission_failed",
                "The response could not be saved; your answers are returned unchanged",
                phase=session.phase,
                answers=session.answers,
            )
        )
    return JSONResponse(submitted.record.to_dict(), status_code=201)  # type: ignore[union-attr]


__all__ = ["router"]
