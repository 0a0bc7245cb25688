"""Conditional visibility of questions."""

from __future__ import annotations

from typing import List, Optional, Set

from campus_forms.definitions import FormDefinition, Section
from campus_forms.errors import UnknownQuestionError
from campus_forms.questions import Question
from campus_forms.responses import ResponseStore


def condition_met(question: Question, responses: ResponseStore) -> bool:
    """Return ``True`` if the question's own rule holds for ``responses``."""

    conditional = question.conditional
    if conditional is None:
        return True
    return responses.get(conditional.depends_on) == conditional.equals


def is_visible(
    question: Question,
    responses: ResponseStore,
    definition: Optional[FormDefinition] = None,
) -> bool:
    """Determine whether ``question`` is shown and enforced.

    Without ``definition`` only the question's own rule is checked. With it,
    the rule chain is followed: a question that depends on a hidden question is
    hidden too, whatever answer is still stored for the hidden one.
    """

    if definition is None:
        return condition_met(question, responses)

    seen: Set[str] = set()
    current: Optional[Question] = question
    while current is not None:
        if current.id in seen:
            return False
        seen.add(current.id)
        if not condition_met(current, responses):
            return False
        conditional = current.conditional
        if conditional is None:
            return True
        try:
            current = definition.find_question(conditional.depends_on)
        except UnknownQuestionError:
            current = None
    return True


def visible_questions(
    section: Section,
    responses: ResponseStore,
    definition: Optional[FormDefinition] = None,
) -> List[Question]:
    """Return the questions of ``section`` that are currently shown."""

    return [
        question
        for question in section.questions
        if is_visible(question, responses, definition)
    ]


__all__ = ["condition_met", "is_visible", "visible_questions"]
