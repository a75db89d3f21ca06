"""Domain values for tender form questions and submitted responses.

A question is one of two variants: a free-text question (short or long) that
never carries choices, or an enumerated-choice question that always carries a
choice tuple (possibly empty). Rows that mix the two cannot be built.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from portal.models.question_kind import CHOICE_KINDS, TEXT_KINDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextQuestion:
    question_id: str
    tender_id: str
    text: str
    kind: str
    required: bool
    position: int

    def __post_init__(self) -> None:
        if self.kind not in TEXT_KINDS:
            raise ValueError(f"TextQuestion cannot have kind {self.kind!r}")

    @property
    def choices(self) -> Tuple[str, ...]:
        return ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.question_id,
            "tender_id": self.tender_id,
            "text": self.text,
            "kind": self.kind,
            "choices": [],
            "required": self.required,
            "position": self.position,
        }


@dataclass(frozen=True)
class ChoiceQuestion:
    question_id: str
    tender_id: str
    text: str
    kind: str
    required: bool
    position: int
    choices: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.kind not in CHOICE_KINDS:
            raise ValueError(f"ChoiceQuestion cannot have kind {self.kind!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.question_id,
            "tender_id": self.tender_id,
            "text": self.text,
            "kind": self.kind,
            "choices": list(self.choices),
            "required": self.required,
            "position": self.position,
        }


Question = Union[TextQuestion, ChoiceQuestion]


def _decode_choices(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return ()
    try:
        data = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        logger.error("question_choices_decode_failed raw=%r", raw, exc_info=True)
        return ()
    if not isinstance(data, list):
        return ()
    return tuple(str(c) for c in data)


def build_question(
    *,
    question_id: str,
    tender_id: str,
    text: str,
    kind: str,
    required: bool,
    position: int,
    choices: Tuple[str, ...] = (),
) -> Question:
    """Build the variant matching `kind`; choices are dropped for text kinds."""
    if kind in CHOICE_KINDS:
        return ChoiceQuestion(
            question_id=question_id,
            tender_id=tender_id,
            text=text,
            kind=kind,
            required=required,
            position=position,
            choices=tuple(choices),
        )
    return TextQuestion(
        question_id=question_id,
        tender_id=tender_id,
        text=text,
        kind=kind,
        required=required,
        position=position,
    )


def question_from_row(row: Mapping[str, Any]) -> Question:
    """Map a `tender_question` row mapping onto a Question variant."""
    return build_question(
        question_id=str(row["question_id"]),
        tender_id=str(row["tender_id"]),
        text=str(row["question_text"]),
        kind=str(row["question_kind"]),
        required=bool(row["is_required"]),
        position=int(row["position"] or 0),
        choices=_decode_choices(row["choices_json"]),
    )


@dataclass(frozen=True)
class ResponseRecord:
    response_id: str
    tender_id: str
    submitter_id: Optional[str]
    submitted_at: str
    answers: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "response_id": self.response_id,
            "tender_id": self.tender_id,
            "submitter_id": self.submitter_id,
            "submitted_at": self.submitted_at,
            "answers": dict(self.answers),
        }


def response_from_row(row: Mapping[str, Any]) -> ResponseRecord:
    try:
        answers = json.loads(row["answers_json"] or "{}")
    except (TypeError, json.JSONDecodeError):
        logger.error("response_answers_decode_failed response_id=%s", row["response_id"], exc_info=True)
        answers = {}
    if not isinstance(answers, dict):
        answers = {}
    submitter = row["submitter_id"]
    return ResponseRecord(
        response_id=str(row["response_id"]),
        tender_id=str(row["tender_id"]),
        submitter_id=str(submitter) if submitter is not None else None,
        submitted_at=str(row["submitted_at"]),
        answers=answers,
    )


__all__ = [
    "TextQuestion",
    "ChoiceQuestion",
    "Question",
    "ResponseRecord",
    "build_question",
    "question_from_row",
    "response_from_row",
]
