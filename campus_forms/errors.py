"""Exceptions raised by the form engine."""

from __future__ import annotations

from typing import Dict, Optional


class FormEngineError(Exception):
    """Base class for all form engine errors."""


class RequiredFieldMissing(FormEngineError):
    """Raised when a form cannot be assembled because answers are missing.

    ``section_index`` points at the first section with errors and ``errors``
    holds that section's answer-key to message mapping.
    """

    def __init__(self, section_index: int, errors: Dict[str, str]) -> None:
        self.section_index = section_index
        self.errors = dict(errors)
        super().__init__(
            f"Section {section_index + 1} has {len(self.errors)} unanswered required field(s)."
        )


class BuilderError(FormEngineError, ValueError):
    """Raised when an authoring operation would break a structural rule."""


class CannotDeleteLastSection(BuilderError):
    """A form must keep at least one section."""

    def __init__(self, section_id: str) -> None:
        self.section_id = section_id
        super().__init__("You must have at least one section in your form.")


class UnknownSectionError(FormEngineError, KeyError):
    """The referenced section does not exist in the form."""

    def __init__(self, section_id: str) -> None:
        self.section_id = section_id
        super().__init__(section_id)

    def __str__(self) -> str:
        return f"Unknown section: {self.section_id}"


class UnknownQuestionError(FormEngineError, KeyError):
    """The referenced question does not exist in the form or section."""

    def __init__(self, question_id: str) -> None:
        self.question_id = question_id
        super().__init__(question_id)

    def __str__(self) -> str:
        return f"Unknown question: {self.question_id}"


class InvalidAnswerError(FormEngineError, ValueError):
    """An answer value does not fit the question it is recorded against."""


class SessionClosedError(FormEngineError):
    """The form-taking session was already submitted."""


class FormNotFoundError(FormEngineError, LookupError):
    """The record store has no form with the requested identifier."""

    def __init__(self, form_id: str) -> None:
        self.form_id = form_id
        super().__init__(f"Form '{form_id}' was not found.")


class SubmissionRejectedExternal(FormEngineError):
    """The record store refused or failed to persist a submission."""

    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        super().__init__(message)


__all__ = [
    "BuilderError",
    "CannotDeleteLastSection",
    "FormEngineError",
    "FormNotFoundError",
    "InvalidAnswerError",
    "RequiredFieldMissing",
    "SessionClosedError",
    "SubmissionRejectedExternal",
    "UnknownQuestionError",
    "UnknownSectionError",
]
