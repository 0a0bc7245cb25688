"""Validation of answers against sections, and of forms before publishing."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from campus_forms.definitions import FormDefinition, Section
from campus_forms.questions import MatrixQuestion
from campus_forms.responses import ResponseStore
from campus_forms.schema_defaults import MATRIX_ROW_REQUIRED_MESSAGE, REQUIRED_MESSAGE
from campus_forms.visibility import is_visible

ErrorMap = Dict[str, str]


def validate_section(
    section: Section,
    responses: ResponseStore,
    definition: Optional[FormDefinition] = None,
) -> ErrorMap:
    """Return a fresh answer-key to message mapping for ``section``.

    Hidden questions are skipped. A required matrix question reports missing
    rows under each row key, never under the question id.
    """

    errors: ErrorMap = {}
    for question in section.questions:
        if not question.required:
            continue
        if not is_visible(question, responses, definition):
            continue
        if isinstance(question, MatrixQuestion):
            for row_key in question.row_keys():
                if not responses.is_answered(row_key):
                    errors[row_key] = MATRIX_ROW_REQUIRED_MESSAGE
            continue
        if not responses.is_answered(question.id):
            errors[question.id] = REQUIRED_MESSAGE
    return errors


def validate_form(definition: FormDefinition, responses: ResponseStore) -> Dict[int, ErrorMap]:
    """Return the error map of every invalid section, keyed by section index."""

    results: Dict[int, ErrorMap] = {}
    for index, section in enumerate(definition.sections):
        errors = validate_section(section, responses, definition)
        if errors:
            results[index] = errors
    return results


def first_invalid_section(
    definition: FormDefinition, responses: ResponseStore
) -> Optional[Tuple[int, ErrorMap]]:
    """Return ``(index, errors)`` for the first section that fails validation."""

    for index, section in enumerate(definition.sections):
        errors = validate_section(section, responses, definition)
        if errors:
            return index, errors
    return None


def validate_definition(definition: FormDefinition) -> List[str]:
    """Return the problems that keep ``definition`` from being published."""

    issues: List[str] = []
    if not definition.title.strip():
        issues.append("Please provide a title for your form.")
    if not definition.category.strip():
        issues.append("Please select a category for your form.")

    for number, section in enumerate(definition.sections, start=1):
        if not section.title.strip():
            issues.append(f"Please provide a title for section {number}.")
        if not section.questions:
            issues.append(
                f"Section {number} has no questions. Please add at least one question."
            )
        for question in section.questions:
            if not question.prompt.strip():
                issues.append(
                    f"Please provide a question text for all questions in section {number}."
                )
            if isinstance(question, MatrixQuestion) and not question.is_renderable:
                issues.append(
                    f"Matrix question '{question.id}' in section {number} needs at least one row and column."
                )
            conditional = question.conditional
            if conditional is not None and not definition.has_question(conditional.depends_on):
                issues.append(
                    f"Question '{question.id}' depends on unknown question '{conditional.depends_on}'."
                )
    return list(dict.fromkeys(issues))


__all__ = [
    "ErrorMap",
    "first_invalid_section",
    "validate_definition",
    "validate_form",
    "validate_section",
]
