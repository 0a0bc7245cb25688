"""Sections and form definitions, plus their stored (JSON) representation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from campus_forms.errors import UnknownQuestionError, UnknownSectionError
from campus_forms.questions import (
    Conditional,
    Question,
    question_from_dict,
    question_to_dict,
)
from campus_forms.schema_defaults import (
    DEFAULT_FORM_TITLE,
    FORM_STATUSES,
    FORM_TYPES,
    SECTION_ID_TEMPLATE,
    SECTION_TITLE_TEMPLATE,
)


@dataclass(frozen=True)
class Section:
    """An ordered, independently validated group of questions.

    Feedback forms call these sections and surveys call them pages.
    """

    id: str
    title: str = ""
    description: str = ""
    questions: Tuple[Question, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "questions", tuple(self.questions))

    def question_index(self, question_id: str) -> int:
        for index, question in enumerate(self.questions):
            if question.id == question_id:
                return index
        raise UnknownQuestionError(question_id)

    def get_question(self, question_id: str) -> Question:
        return self.questions[self.question_index(question_id)]


def first_section() -> Section:
    """Return the empty section every new form starts with."""

    return Section(
        id=SECTION_ID_TEMPLATE.format(number=1),
        title=SECTION_TITLE_TEMPLATE.format(number=1),
    )


@dataclass(frozen=True)
class FormDefinition:
    """A complete form: metadata plus ordered sections."""

    id: str
    title: str = DEFAULT_FORM_TITLE
    description: str = ""
    sections: Tuple[Section, ...] = field(default_factory=lambda: (first_section(),))
    form_type: str = "feedback"
    category: str = ""
    status: str = "draft"
    instructions: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "sections", tuple(self.sections))
        if self.form_type not in FORM_TYPES:
            raise ValueError(f"Unsupported form type: {self.form_type}")
        if self.status not in FORM_STATUSES:
            raise ValueError(f"Unsupported form status: {self.status}")

    def section_index(self, section_id: str) -> int:
        for index, section in enumerate(self.sections):
            if section.id == section_id:
                return index
        raise UnknownSectionError(section_id)

    def get_section(self, section_id: str) -> Section:
        return self.sections[self.section_index(section_id)]

    def iter_questions(self) -> Iterator[Tuple[int, Question]]:
        """Yield ``(section_index, question)`` pairs in presentation order."""

        for index, section in enumerate(self.sections):
            for question in section.questions:
                yield index, question

    def find_question(self, question_id: str) -> Question:
        for _, question in self.iter_questions():
            if question.id == question_id:
                return question
        raise UnknownQuestionError(question_id)

    def has_question(self, question_id: str) -> bool:
        return any(question.id == question_id for _, question in self.iter_questions())

    def answer_keys(self) -> List[str]:
        return [key for _, question in self.iter_questions() for key in question.answer_keys()]

    @property
    def question_count(self) -> int:
        return sum(len(section.questions) for section in self.sections)


def _ensure_mapping(value: Any) -> Dict[str, Any]:
    """Return ``value`` if it is a mapping, otherwise an empty dict."""

    return dict(value) if isinstance(value, Mapping) else {}


def _ensure_list(value: Any) -> List[Any]:
    """Return ``value`` if it is a list, otherwise an empty list."""

    return list(value) if isinstance(value, list) else []


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def section_from_dict(payload: Any, position: int) -> Section:
    """Build a section, naming it after ``position`` when fields are missing."""

    data = _ensure_mapping(payload)
    number = position + 1
    identifier = _text(data.get("id")) or SECTION_ID_TEMPLATE.format(number=number)
    return Section(
        id=identifier,
        title=str(data.get("title") or ""),
        description=str(data.get("description") or ""),
        questions=tuple(question_from_dict(item) for item in _ensure_list(data.get("questions"))),
    )


def section_to_dict(section: Section) -> Dict[str, Any]:
    return {
        "id": section.id,
        "title": section.title,
        "description": section.description,
        "questions": [question_to_dict(question) for question in section.questions],
    }


def form_from_dict(payload: Any, form_id: Optional[str] = None) -> FormDefinition:
    """Build a form definition from its stored mapping.

    Survey payloads list ``pages`` instead of ``sections``; both are accepted.
    A payload without any section gets a single empty one.
    """

    data = _ensure_mapping(payload)
    identifier = _text(data.get("id")) or (form_id or "")
    if not identifier:
        raise ValueError("Form is missing an 'id'.")

    raw_sections = data.get("sections")
    form_type = _text(data.get("type") or data.get("form_type")).lower()
    if raw_sections is None and "pages" in data:
        raw_sections = data.get("pages")
        form_type = form_type or "survey"
    sections = tuple(
        section_from_dict(item, position)
        for position, item in enumerate(_ensure_list(raw_sections))
    )

    kwargs: Dict[str, Any] = {
        "id": identifier,
        "title": str(data.get("title") or DEFAULT_FORM_TITLE),
        "description": str(data.get("description") or ""),
        "form_type": form_type if form_type in FORM_TYPES else "feedback",
        "category": str(data.get("category") or ""),
        "status": data.get("status") if data.get("status") in FORM_STATUSES else "draft",
        "instructions": str(data.get("instructions") or ""),
    }
    if sections:
        kwargs["sections"] = sections
    return FormDefinition(**kwargs)


def form_to_dict(form: FormDefinition) -> Dict[str, Any]:
    """Return the stored mapping for ``form``."""

    return {
        "id": form.id,
        "title": form.title,
        "description": form.description,
        "type": form.form_type,
        "category": form.category,
        "status": form.status,
        "instructions": form.instructions,
        "sections": [section_to_dict(section) for section in form.sections],
    }


__all__ = [
    "Conditional",
    "FormDefinition",
    "Section",
    "first_section",
    "form_from_dict",
    "form_to_dict",
    "section_from_dict",
    "section_to_dict",
]
