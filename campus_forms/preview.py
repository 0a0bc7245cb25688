"""Read-only summary of all answers shown before submitting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from campus_forms.definitions import FormDefinition
from campus_forms.questions import CheckboxQuestion, MatrixQuestion, Question, RatingQuestion
from campus_forms.responses import ResponseStore, is_empty_answer
from campus_forms.schema_defaults import NO_RESPONSE_LABEL, RATING_SCALE
from campus_forms.visibility import is_visible


@dataclass(frozen=True)
class PreviewItem:
    question_id: str
    prompt: str
    lines: Tuple[str, ...]
    answered: bool


@dataclass(frozen=True)
class PreviewSection:
    section_id: str
    title: str
    items: Tuple[PreviewItem, ...]


def _display_lines(question: Question, responses: ResponseStore) -> Tuple[str, ...]:
    if isinstance(question, MatrixQuestion):
        lines = []
        for row in question.rows:
            label = question.column_label(responses.get(question.row_key(row)))
            if label is not None:
                lines.append(f"{row}: {label}")
        return tuple(lines)

    value = responses.get(question.id)
    if is_empty_answer(value):
        return ()
    if isinstance(question, RatingQuestion):
        return (f"{value} / {RATING_SCALE[-1]}",)
    if isinstance(question, CheckboxQuestion) and isinstance(value, list):
        return (", ".join(str(item) for item in value),)
    return (str(value),)


def build_preview(definition: FormDefinition, responses: ResponseStore) -> List[PreviewSection]:
    """Return every section with display text for each visible question."""

    sections: List[PreviewSection] = []
    for section in definition.sections:
        items = []
        for question in section.questions:
            if not is_visible(question, responses, definition):
                continue
            lines = _display_lines(question, responses)
            items.append(
                PreviewItem(
                    question_id=question.id,
                    prompt=question.prompt,
                    lines=lines or (NO_RESPONSE_LABEL,),
                    answered=bool(lines),
                )
            )
        sections.append(PreviewSection(section_id=section.id, title=section.title, items=tuple(items)))
    return sections


__all__ = ["PreviewItem", "PreviewSection", "build_preview"]
