"""Default values shared between the form runner and the builder."""

from __future__ import annotations

from typing import List

DEFAULT_FORM_TITLE = "Untitled form"
DEFAULT_QUESTION_PROMPT = "New Question"
SECTION_TITLE_TEMPLATE = "Section {number}"
SECTION_ID_TEMPLATE = "section-{number}"
OPTION_LABEL_TEMPLATE = "Option {number}"
MATRIX_ROW_TEMPLATE = "Row {number}"
MIN_OPTIONS = 2

RATING_SCALE: tuple[int, ...] = (1, 2, 3, 4, 5)
RATING_LABELS = {1: "Poor", 5: "Excellent"}
DEFAULT_MATRIX_COLUMNS: tuple[str, ...] = ("Poor", "Fair", "Good", "Very Good", "Excellent")

REQUIRED_MESSAGE = "This field is required"
MATRIX_ROW_REQUIRED_MESSAGE = "This rating is required"
NO_RESPONSE_LABEL = "No response"

FORM_TYPES: tuple[str, ...] = ("feedback", "survey")
FORM_STATUSES: tuple[str, ...] = ("draft", "active")
FORM_CATEGORIES: tuple[str, ...] = (
    "Academic",
    "Campus Life",
    "Facilities",
    "Housing",
    "Career",
    "Other",
)

DEFAULT_SUBMIT_LABEL = "Submit"
DEFAULT_SUBMIT_SUCCESS_MESSAGE = "Thank you for completing the form!"
DEFAULT_SUBMIT_FAILURE_MESSAGE = "Something went wrong while submitting. Please try again."
DEFAULT_VALIDATION_MESSAGE = "Please complete all required fields."


def placeholder_options(count: int = MIN_OPTIONS) -> List[str]:
    """Return ``count`` placeholder option labels."""

    return [OPTION_LABEL_TEMPLATE.format(number=index + 1) for index in range(count)]
