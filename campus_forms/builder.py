"""Authoring operations for form definitions.

Every function takes a :class:`FormDefinition` and returns a new one; the
input is never modified, so callers can keep earlier snapshots for undo.
Operations that would break a structural rule raise a
:class:`~campus_forms.errors.BuilderError` and leave the input untouched.
Removing one of the last two options of a question is ignored.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Any, Callable, Optional, Sequence

from campus_forms.definitions import FormDefinition, Section, first_section
from campus_forms.errors import (
    CannotDeleteLastSection,
    UnknownQuestionError,
)
from campus_forms.questions import (
    ChoiceQuestion,
    Conditional,
    MatrixQuestion,
    Question,
    TextQuestion,
    change_kind,
    question_class,
)
from campus_forms.schema_defaults import (
    DEFAULT_FORM_TITLE,
    DEFAULT_QUESTION_PROMPT,
    MIN_OPTIONS,
    OPTION_LABEL_TEMPLATE,
    SECTION_ID_TEMPLATE,
    SECTION_TITLE_TEMPLATE,
)

logger = logging.getLogger(__name__)

FORM_FIELDS = {"title", "description", "form_type", "category", "status", "instructions"}
QUESTION_FIELDS = {"prompt", "required", "help_text"}
DIRECTIONS = {"up": -1, "down": 1}


def new_form(
    form_id: Optional[str] = None,
    *,
    title: str = DEFAULT_FORM_TITLE,
    form_type: str = "feedback",
    **details: Any,
) -> FormDefinition:
    """Return a draft form with one empty section."""

    identifier = form_id or f"form-{uuid.uuid4().hex[:8]}"
    return FormDefinition(
        id=identifier,
        title=title,
        form_type=form_type,
        sections=(first_section(),),
        **details,
    )


def update_form(form: FormDefinition, **changes: Any) -> FormDefinition:
    """Change form-level details such as ``title`` or ``status``."""

    unknown = set(changes) - FORM_FIELDS
    if unknown:
        raise ValueError(f"Unknown form field(s): {sorted(unknown)}")
    return replace(form, **changes)


def _replace_section(
    form: FormDefinition, section_id: str, update: Callable[[Section], Section]
) -> FormDefinition:
    index = form.section_index(section_id)
    sections = list(form.sections)
    sections[index] = update(sections[index])
    return replace(form, sections=tuple(sections))


def _replace_question(
    form: FormDefinition,
    section_id: str,
    question_id: str,
    update: Callable[[Question], Question],
) -> FormDefinition:
    def update_section_questions(section: Section) -> Section:
        index = section.question_index(question_id)
        questions = list(section.questions)
        questions[index] = update(questions[index])
        return replace(section, questions=tuple(questions))

    return _replace_section(form, section_id, update_section_questions)


def _without_conditionals_on(form: FormDefinition, question_ids: Sequence[str]) -> FormDefinition:
    """Drop rules that point at questions no longer in the form."""

    removed = set(question_ids)
    if not removed:
        return form
    sections = []
    for section in form.sections:
        questions = tuple(
            replace(question, conditional=None)
            if question.conditional is not None and question.conditional.depends_on in removed
            else question
            for question in section.questions
        )
        sections.append(replace(section, questions=questions))
    return replace(form, sections=tuple(sections))


def _free_section_id(form: FormDefinition) -> str:
    taken = {section.id for section in form.sections}
    number = 1
    while SECTION_ID_TEMPLATE.format(number=number) in taken:
        number += 1
    return SECTION_ID_TEMPLATE.format(number=number)


def add_section(
    form: FormDefinition,
    *,
    title: Optional[str] = None,
    description: str = "",
) -> FormDefinition:
    """Append an empty section titled ``Section {n}``."""

    section = Section(
        id=_free_section_id(form),
        title=title if title is not None else SECTION_TITLE_TEMPLATE.format(number=len(form.sections) + 1),
        description=description,
    )
    return replace(form, sections=form.sections + (section,))


def update_section(
    form: FormDefinition,
    section_id: str,
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> FormDefinition:
    changes = {}
    if title is not None:
        changes["title"] = title
    if description is not None:
        changes["description"] = description
    return _replace_section(form, section_id, lambda section: replace(section, **changes))


def delete_section(form: FormDefinition, section_id: str) -> FormDefinition:
    """Remove a section; the last remaining section cannot be removed."""

    index = form.section_index(section_id)
    if len(form.sections) <= 1:
        logger.info("Refused to delete the only section %s of form %s", section_id, form.id)
        raise CannotDeleteLastSection(section_id)
    removed = form.sections[index]
    sections = form.sections[:index] + form.sections[index + 1:]
    updated = replace(form, sections=sections)
    return _without_conditionals_on(updated, [question.id for question in removed.questions])


def add_question(
    form: FormDefinition,
    section_id: str,
    kind: str = "rating",
    *,
    question_id: Optional[str] = None,
    prompt: str = DEFAULT_QUESTION_PROMPT,
) -> FormDefinition:
    """Append a question with defaults suited to ``kind``."""

    question_class(kind)
    identifier = question_id or f"question-{uuid.uuid4().hex[:12]}"
    if form.has_question(identifier):
        raise ValueError(f"Question id '{identifier}' is already used in form '{form.id}'.")
    question = change_kind(TextQuestion(id=identifier, prompt=prompt), kind)
    return _replace_section(
        form,
        section_id,
        lambda section: replace(section, questions=section.questions + (question,)),
    )


def update_question(
    form: FormDefinition, section_id: str, question_id: str, **changes: Any
) -> FormDefinition:
    """Change ``prompt``, ``required`` or ``help_text`` of a question."""

    unknown = set(changes) - QUESTION_FIELDS
    if unknown:
        raise ValueError(f"Unknown question field(s): {sorted(unknown)}")
    return _replace_question(
        form, section_id, question_id, lambda question: replace(question, **changes)
    )


def change_question_kind(
    form: FormDefinition, section_id: str, question_id: str, kind: str
) -> FormDefinition:
    return _replace_question(
        form, section_id, question_id, lambda question: change_kind(question, kind)
    )


def delete_question(form: FormDefinition, section_id: str, question_id: str) -> FormDefinition:
    def remove(section: Section) -> Section:
        index = section.question_index(question_id)
        return replace(section, questions=section.questions[:index] + section.questions[index + 1:])

    updated = _replace_section(form, section_id, remove)
    return _without_conditionals_on(updated, [question_id])


def move_question(
    form: FormDefinition, section_id: str, question_id: str, direction: str
) -> FormDefinition:
    """Swap a question with its neighbour; nothing happens at either end."""

    try:
        offset = DIRECTIONS[direction]
    except KeyError:
        raise ValueError(f"Unknown direction: {direction}") from None

    section = form.get_section(section_id)
    index = section.question_index(question_id)
    target = index + offset
    if not 0 <= target < len(section.questions):
        return form

    questions = list(section.questions)
    questions[index], questions[target] = questions[target], questions[index]
    return _replace_section(form, section_id, lambda current: replace(current, questions=tuple(questions)))


def _choice(question: Question) -> ChoiceQuestion:
    if not isinstance(question, ChoiceQuestion):
        raise ValueError(f"Question '{question.id}' of type '{question.kind}' has no options.")
    return question


def _matrix(question: Question) -> MatrixQuestion:
    if not isinstance(question, MatrixQuestion):
        raise ValueError(f"Question '{question.id}' of type '{question.kind}' is not a matrix.")
    return question


def add_option(
    form: FormDefinition,
    section_id: str,
    question_id: str,
    label: Optional[str] = None,
) -> FormDefinition:
    def append(question: Question) -> Question:
        choice = _choice(question)
        text = label if label is not None else OPTION_LABEL_TEMPLATE.format(number=len(choice.options) + 1)
        return replace(choice, options=choice.options + (text,))

    return _replace_question(form, section_id, question_id, append)


def update_option(
    form: FormDefinition, section_id: str, question_id: str, index: int, value: str
) -> FormDefinition:
    def rename(question: Question) -> Question:
        choice = _choice(question)
        if not 0 <= index < len(choice.options):
            raise IndexError(f"Question '{question_id}' has no option {index}.")
        options = list(choice.options)
        options[index] = value
        return replace(choice, options=tuple(options))

    return _replace_question(form, section_id, question_id, rename)


def delete_option(
    form: FormDefinition, section_id: str, question_id: str, index: int
) -> FormDefinition:
    """Remove an option; at two options the form is returned unchanged."""

    current = _choice(form.get_section(section_id).get_question(question_id))
    if len(current.options) <= MIN_OPTIONS:
        logger.debug(
            "Kept the last %s options of question %s in form %s", MIN_OPTIONS, question_id, form.id
        )
        return form

    def remove(question: Question) -> Question:
        choice = _choice(question)
        if not 0 <= index < len(choice.options):
            raise IndexError(f"Question '{question_id}' has no option {index}.")
        return replace(choice, options=choice.options[:index] + choice.options[index + 1:])

    return _replace_question(form, section_id, question_id, remove)


def set_matrix_rows(
    form: FormDefinition, section_id: str, question_id: str, rows: Sequence[str]
) -> FormDefinition:
    cleaned = tuple(row.strip() for row in rows if row.strip())
    return _replace_question(
        form, section_id, question_id, lambda question: replace(_matrix(question), rows=cleaned)
    )


def set_matrix_columns(
    form: FormDefinition, section_id: str, question_id: str, columns: Sequence[str]
) -> FormDefinition:
    cleaned = tuple(column.strip() for column in columns if column.strip())
    return _replace_question(
        form, section_id, question_id, lambda question: replace(_matrix(question), columns=cleaned)
    )


def set_conditional(
    form: FormDefinition,
    section_id: str,
    question_id: str,
    depends_on: Optional[str],
    equals: Any = None,
) -> FormDefinition:
    """Show a question only when ``depends_on`` is answered with ``equals``.

    Passing ``None`` for ``depends_on`` removes the rule.
    """

    if depends_on is None:
        rule = None
    else:
        if depends_on == question_id:
            raise ValueError(f"Question '{question_id}' cannot depend on itself.")
        if not form.has_question(depends_on):
            raise UnknownQuestionError(depends_on)
        rule = Conditional(depends_on=depends_on, equals=equals)
    return _replace_question(
        form, section_id, question_id, lambda question: replace(question, conditional=rule)
    )


__all__ = [
    "add_option",
    "add_question",
    "add_section",
    "change_question_kind",
    "delete_option",
    "delete_question",
    "delete_section",
    "move_question",
    "new_form",
    "set_conditional",
    "set_matrix_columns",
    "set_matrix_rows",
    "update_form",
    "update_option",
    "update_question",
    "update_section",
]
