"""QuestionKind constants for tender application form questions.

Kinds travel as plain strings through SQL rows and JSON payloads. The two
closed groupings below are what callers match on.
"""

from __future__ import annotations


class QuestionKind:
    SHORT_TEXT = "short_text"
    LONG_TEXT = "long_text"
    SINGLE_CHOICE_LIST = "single_choice_list"
    SINGLE_CHOICE_EXCLUSIVE = "single_choice_exclusive"
    MULTI_CHOICE = "multi_choice"


TEXT_KINDS = frozenset({QuestionKind.SHORT_TEXT, QuestionKind.LONG_TEXT})
CHOICE_KINDS = frozenset(
    {
        QuestionKind.SINGLE_CHOICE_LIST,
        QuestionKind.SINGLE_CHOICE_EXCLUSIVE,
        QuestionKind.MULTI_CHOICE,
    }
)
ALL_KINDS = TEXT_KINDS | CHOICE_KINDS


__all__ = ["QuestionKind", "TEXT_KINDS", "CHOICE_KINDS", "ALL_KINDS"]
