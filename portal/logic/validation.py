"""Validation rules for form schemas and submitted answers.

Runs before any store call. Violations are collected rather than raised one
at a time so callers can report every problem together.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from portal.models.question import Question, build_question
from portal.models.question_kind import ALL_KINDS, CHOICE_KINDS, QuestionKind

MISSING_REQUIRED = "missing_required_answer"
TYPE_MISMATCH = "type_mismatch"


class FormValidationError(ValueError):
    """Raised when a schema draft or an answer map breaks a rule.

    `errors` holds one mapping per violation with at least a `code` key and
    either a `field` or a `question_id` key.
    """

    def __init__(self, message: str, errors: Sequence[Mapping[str, Any]]):
        super().__init__(message)
        self.errors: List[Dict[str, Any]] = [dict(e) for e in errors]


def normalize_choices(choices: Optional[Iterable[Any]]) -> List[str]:
    """Trim entries and drop the blank ones, keeping definition order."""
    if not choices:
        return []
    return [str(c).strip() for c in choices if c is not None and str(c).strip()]


def _check_choices(kind: str, choices: Optional[List[str]], errors: List[Dict[str, Any]]) -> List[str]:
    if kind not in CHOICE_KINDS:
        return []
    cleaned = normalize_choices(choices)
    # An empty or omitted list is accepted; a list made only of blanks is not
    if choices and not cleaned:
        errors.append({"field": "choices", "code": "blank_choices", "detail": "choices contain only blank entries"})
    return cleaned


def validate_question_draft(
    *,
    text: Optional[str],
    kind: Optional[str],
    choices: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Validate a new question and return its normalized fields.

    Returns a mapping with `text`, `kind` and `choices` (empty for text kinds).
    Raises FormValidationError listing every violation.
    """
    errors: List[Dict[str, Any]] = []
    clean_text = (text or "").strip()
    if not clean_text:
        errors.append({"field": "text", "code": "missing", "detail": "question text is required"})
    clean_kind = (kind or "").strip()
    if clean_kind not in ALL_KINDS:
        errors.append(
            {"field": "type", "code": "invalid", "detail": f"type must be one of {sorted(ALL_KINDS)}"}
        )
        clean_choices: List[str] = []
    else:
        clean_choices = _check_choices(clean_kind, choices, errors)
    if errors:
        raise FormValidationError("invalid question draft", errors)
    return {"text": clean_text, "kind": clean_kind, "choices": clean_choices}


def apply_question_patch(question: Question, patch: Mapping[str, Any]) -> Question:
    """Return `question` with the supplied patch fields applied.

    Only keys present in `patch` change. Moving to a text kind clears
    choices; moving to a choice kind without choices keeps the current ones
    when the question already was a choice question and otherwise leaves an
    empty option set.
    """
    errors: List[Dict[str, Any]] = []

    text = question.text
    if "text" in patch and patch["text"] is not None:
        text = str(patch["text"]).strip()
        if not text:
            errors.append({"field": "text", "code": "missing", "detail": "question text must not be empty"})

    kind = question.kind
    if "kind" in patch and patch["kind"] is not None:
        kind = str(patch["kind"]).strip()
        if kind not in ALL_KINDS:
            errors.append(
                {"field": "type", "code": "invalid", "detail": f"type must be one of {sorted(ALL_KINDS)}"}
            )
            kind = question.kind

    if "choices" in patch and patch["choices"] is not None:
        choices = _check_choices(kind, list(patch["choices"]), errors)
    else:
        choices = list(question.choices) if kind in CHOICE_KINDS else []

    required = question.required
    if "required" in patch and patch["required"] is not None:
        required = bool(patch["required"])

    if errors:
        raise FormValidationError("invalid question patch", errors)
    return build_question(
        question_id=question.question_id,
        tender_id=question.tender_id,
        text=text,
        kind=kind,
        required=required,
        position=question.position,
        choices=tuple(choices),
    )


def is_blank_answer(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def find_missing_required(questions: Iterable[Question], answers: Mapping[str, Any]) -> List[str]:
    """Return ids of required questions without a non-empty answer, in schema order."""
    return [
        q.question_id
        for q in questions
        if q.required and is_blank_answer(answers.get(q.question_id))
    ]


def _shape_ok(kind: str, value: Any) -> bool:
    if value is None:
        return True
    if kind == QuestionKind.MULTI_CHOICE:
        return isinstance(value, list) and all(isinstance(v, str) for v in value)
    return isinstance(value, str)


def find_violations(questions: Sequence[Question], answers: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Collect every answer-map violation against the loaded schema.

    Per question in schema order: a shape mismatch or a missing required
    answer. Keys for ids no longer in the schema are left alone; they are
    stored as given and shown under the placeholder label.
    """
    violations: List[Dict[str, Any]] = []
    for q in questions:
        value = answers.get(q.question_id)
        if not _shape_ok(q.kind, value):
            expected = "list of strings" if q.kind == QuestionKind.MULTI_CHOICE else "string"
            violations.append(
                {"question_id": q.question_id, "code": TYPE_MISMATCH, "detail": f"expected {expected}"}
            )
        elif q.required and is_blank_answer(value):
            violations.append({"question_id": q.question_id, "code": MISSING_REQUIRED})
    return violations


__all__ = [
    "FormValidationError",
    "MISSING_REQUIRED",
    "TYPE_MISMATCH",
    "normalize_choices",
    "validate_question_draft",
    "apply_question_patch",
    "is_blank_answer",
    "find_missing_required",
    "find_violations",
]
