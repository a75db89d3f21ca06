"""Pydantic models for request bodies accepted by the portal API.

Shape checks only; domain rules (non-blank text, choice filtering, required
answers) are applied in `portal/logic/validation.py` so the same rules hold
for callers that bypass HTTP.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class QuestionDraft(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    text: str
    kind: str = Field(alias="type")
    choices: Optional[List[str]] = None
    required: bool = False
    position: Optional[int] = Field(default=None, ge=0)


class QuestionPatch(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    text: Optional[str] = None
    kind: Optional[str] = Field(default=None, alias="type")
    choices: Optional[List[str]] = None
    required: Optional[bool] = None


class MoveRequest(BaseModel):
    direction: Literal["up", "down"]


class ResponseSubmission(BaseModel):
    # Values are shape-checked against the question kinds by the form session
    answers: Dict[str, Any] = Field(default_factory=dict)


class RoleAssignmentCreate(BaseModel):
    identity_id: str = Field(min_length=1)
    role: str


class TenderCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    content: str = ""
    is_active: bool = True
    has_form: bool = False


class TenderPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    is_active: Optional[bool] = None
    has_form: Optional[bool] = None


class FeedbackCreate(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    subject: str = Field(min_length=1)
    message: str = Field(min_length=1)
    message_type: Literal["question", "complaint", "suggestion"] = "question"


class FeedbackPatch(BaseModel):
    status: Optional[Literal["new", "in_progress", "resolved", "closed"]] = None
    admin_response: Optional[str] = None


__all__ = [
    "QuestionDraft",
    "QuestionPatch",
    "MoveRequest",
    "ResponseSubmission",
    "RoleAssignmentCreate",
    "TenderCreate",
    "TenderPatch",
    "FeedbackCreate",
    "FeedbackPatch",
]
