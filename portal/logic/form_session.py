"""Application form session for a single tender.

A `FormSession` is the explicit value holding one applicant's progress
through a tender form: the schema loaded once, the answers entered so far and
the current phase. Transitions:

    loading -> ready -> submitting -> submitted
                 ^          |
                 +-- failed-+

Answers survive a failed submit untouched. The session never talks to the
store itself; `submit_session` drives it against any writer callable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from portal.logic.validation import FormValidationError, find_violations
from portal.models.question import Question, ResponseRecord
from portal.models.question_kind import QuestionKind

logger = logging.getLogger(__name__)


class FormPhase:
    LOADING = "loading"
    READY = "ready"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


class InvalidTransition(RuntimeError):
    """Raised when an operation is attempted in the wrong phase."""


ResponseWriter = Callable[[str, Optional[str], Dict[str, Any]], ResponseRecord]


@dataclass
class FormSession:
    tender_id: str
    submitter_id: Optional[str] = None
    questions: Tuple[Question, ...] = ()
    answers: Dict[str, Any] = field(default_factory=dict)
    phase: str = FormPhase.LOADING
    error: Optional[str] = None
    violations: List[Dict[str, Any]] = field(default_factory=list)
    record: Optional[ResponseRecord] = None

    def _require(self, *phases: str) -> None:
        if self.phase not in phases:
            raise InvalidTransition(f"cannot do this while {self.phase}; expected {', '.join(phases)}")

    def load(self, questions: Sequence[Question]) -> "FormSession":
        """Hold the schema for the rest of the session and become ready."""
        self._require(FormPhase.LOADING)
        self.questions = tuple(sorted(questions, key=lambda q: q.position))
        self.phase = FormPhase.READY
        return self

    def question(self, question_id: str) -> Optional[Question]:
        for q in self.questions:
            if q.question_id == question_id:
                return q
        return None

    def set_answer(self, question_id: str, value: Any) -> "FormSession":
        self._require(FormPhase.READY)
        if isinstance(value, tuple):
            value = list(value)
        self.answers[question_id] = value
        return self

    def toggle_choice(self, question_id: str, choice: str) -> "FormSession":
        """Add `choice` to a multi-choice answer, or remove it if present.

        Accumulates in toggle order, not in choice-definition order.
        """
        self._require(FormPhase.READY)
        q = self.question(question_id)
        if q is None or q.kind != QuestionKind.MULTI_CHOICE:
            raise ValueError(f"question {question_id!r} is not a multi-choice question")
        current = self.answers.get(question_id)
        selected = list(current) if isinstance(current, list) else []
        if choice in selected:
            selected.remove(choice)
        else:
            selected.append(choice)
        self.answers[question_id] = selected
        return self

    def validate(self) -> List[Dict[str, Any]]:
        self.violations = find_violations(self.questions, self.answers)
        return self.violations

    def begin_submit(self) -> Dict[str, Any]:
        """Validate and move to submitting; return the payload to persist.

        On violations the session stays ready and FormValidationError carries
        all of them.
        """
        self._require(FormPhase.READY)
        violations = self.validate()
        if violations:
            raise FormValidationError("form has unanswered or malformed questions", violations)
        self.error = None
        self.phase = FormPhase.SUBMITTING
        return {
            "tender_id": self.tender_id,
            "submitter_id": self.submitter_id,
            "answers": dict(self.answers),
        }

    def submit_succeeded(self, record: ResponseRecord) -> "FormSession":
        self._require(FormPhase.SUBMITTING)
        self.record = record
        self.phase = FormPhase.SUBMITTED
        return self

    def submit_failed(self, error: str) -> "FormSession":
        self._require(FormPhase.SUBMITTING)
        self.error = error
        self.phase = FormPhase.READY
        return self


def submit_session(session: FormSession, writer: ResponseWriter) -> FormSession:
    """Run one submit attempt of `session` through `writer`.

    Validation failures propagate as FormValidationError with the session
    still ready. A writer failure is logged, recorded on the session and
    re-raised; the answers stay in place for the next attempt.
    """
    payload = session.begin_submit()
    try:
        record = writer(payload["tender_id"], payload["submitter_id"], payload["answers"])
    except Exception as exc:
        logger.error("form_submit_failed tender_id=%s", session.tender_id, exc_info=True)
        session.submit_failed(type(exc).__name__)
        raise
    logger.info(
        "form_submitted tender_id=%s response_id=%s answers=%s",
        session.tender_id,
        record.response_id,
        len(payload["answers"]),
    )
    return session.submit_succeeded(record)


__all__ = [
    "FormPhase",
    "FormSession",
    "InvalidTransition",
    "ResponseWriter",
    "submit_session",
]
