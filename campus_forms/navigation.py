"""Section-by-section navigation for a form-taking session."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from campus_forms.definitions import FormDefinition, Section
from campus_forms.errors import SessionClosedError
from campus_forms.questions import CheckboxQuestion, MatrixQuestion, Question
from campus_forms.responses import ResponseStore
from campus_forms.validation import ErrorMap, validate_section
from campus_forms.visibility import visible_questions

logger = logging.getLogger(__name__)

EDITING_STATE = "editing"
PREVIEW_STATE = "preview"
SUBMITTED_STATE = "submitted"


class NavigationController:
    """Walks a form one section at a time.

    Moving forward requires the current section to validate; moving back never
    does. From the last section the user may enter a read-only preview before
    submitting. ``errors`` always belongs to the section at ``current_index``.
    """

    def __init__(
        self,
        definition: FormDefinition,
        responses: Optional[ResponseStore] = None,
        *,
        on_scroll_top: Optional[Callable[[], None]] = None,
    ) -> None:
        if not definition.sections:
            raise ValueError(f"Form '{definition.id}' has no sections.")
        self.definition = definition
        self.responses = responses if responses is not None else ResponseStore()
        self.current_index = 0
        self.errors: ErrorMap = {}
        self.in_preview = False
        self.submitted = False
        self._on_scroll_top = on_scroll_top

    @property
    def section_count(self) -> int:
        return len(self.definition.sections)

    @property
    def current_section(self) -> Section:
        return self.definition.sections[self.current_index]

    @property
    def is_first(self) -> bool:
        return self.current_index == 0

    @property
    def is_last(self) -> bool:
        return self.current_index == self.section_count - 1

    @property
    def state(self) -> str:
        if self.submitted:
            return SUBMITTED_STATE
        if self.in_preview:
            return PREVIEW_STATE
        return EDITING_STATE

    def _ensure_open(self) -> None:
        if self.submitted:
            raise SessionClosedError(f"Form '{self.definition.id}' was already submitted.")

    def _scroll_top(self) -> None:
        if self._on_scroll_top is not None:
            self._on_scroll_top()

    def _move_to(self, index: int) -> bool:
        target = max(0, min(index, self.section_count - 1))
        if target == self.current_index:
            return False
        self.current_index = target
        self.errors = {}
        self._scroll_top()
        return True

    def visible_questions(self) -> List[Question]:
        """Return the questions shown in the current section."""

        return visible_questions(self.current_section, self.responses, self.definition)

    def validate_current(self) -> ErrorMap:
        """Re-run validation for the current section, replacing ``errors``."""

        self.errors = validate_section(self.current_section, self.responses, self.definition)
        return self.errors

    def go_next(self) -> bool:
        """Advance one section if the current one validates.

        Returns ``True`` when the index changed.
        """

        self._ensure_open()
        if self.in_preview:
            return False
        if self.validate_current():
            logger.debug(
                "Blocked advance from section %s of form %s: %s",
                self.current_index,
                self.definition.id,
                sorted(self.errors),
            )
            return False
        return self._move_to(self.current_index + 1)

    def go_prev(self) -> bool:
        """Step back one section without validating."""

        self._ensure_open()
        if self.in_preview:
            return False
        return self._move_to(self.current_index - 1)

    def jump_to(self, index: int) -> bool:
        """Select a section directly, as the section tabs do."""

        self._ensure_open()
        self.in_preview = False
        return self._move_to(index)

    def progress(self) -> float:
        """Return the completion percentage shown by the progress bar."""

        return (self.current_index + 1) / self.section_count * 100

    def request_preview(self) -> bool:
        """Enter the read-only preview from the last section if it validates."""

        self._ensure_open()
        if self.in_preview:
            return True
        if not self.is_last:
            return False
        if self.validate_current():
            return False
        self.in_preview = True
        self._scroll_top()
        return True

    def back_to_edit(self) -> None:
        """Leave the preview and return to the last section."""

        self._ensure_open()
        self.in_preview = False
        self.current_index = self.section_count - 1

    def answer(self, key: str, value: Any) -> None:
        """Store a raw answer and drop the stale error for its key."""

        self._ensure_open()
        self.responses.set(key, value)
        self.errors.pop(key, None)

    def record(self, question: Question, value: Any) -> None:
        """Store a coerced answer for ``question``."""

        self._ensure_open()
        key = self.responses.record(question, value)
        self.errors.pop(key, None)

    def toggle_option(self, question: CheckboxQuestion, option: str, checked: bool) -> None:
        self._ensure_open()
        key = self.responses.toggle_option(question, option, checked)
        self.errors.pop(key, None)

    def rate_row(self, question: MatrixQuestion, row: str, value: Any) -> None:
        self._ensure_open()
        key = self.responses.rate_row(question, row, value)
        self.errors.pop(key, None)

    def show_errors(self, index: int, errors: ErrorMap) -> None:
        """Navigate to ``index`` and display ``errors`` for it."""

        self.in_preview = False
        self.current_index = max(0, min(index, self.section_count - 1))
        self.errors = dict(errors)

    def mark_submitted(self) -> None:
        self.in_preview = False
        self.submitted = True


__all__ = [
    "EDITING_STATE",
    "NavigationController",
    "PREVIEW_STATE",
    "SUBMITTED_STATE",
]
