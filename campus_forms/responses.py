"""In-memory answers for a single form-taking session."""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, Iterator, Mapping, Optional

from campus_forms.errors import InvalidAnswerError
from campus_forms.questions import (
    CheckboxQuestion,
    MatrixQuestion,
    Question,
    coerce_answer,
)


def is_empty_answer(value: Any) -> bool:
    """Return ``True`` when ``value`` does not count as an answer."""

    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


class ResponseStore:
    """Mapping of answer-key to value.

    Simple questions store under their id, matrix rows under
    ``{question id}-{row slug}``. Answers of hidden questions are kept so that
    they come back if the question is shown again.
    """

    def __init__(self, answers: Optional[Mapping[str, Any]] = None) -> None:
        self._answers: Dict[str, Any] = dict(answers or {})

    def __contains__(self, key: object) -> bool:
        return key in self._answers

    def __len__(self) -> int:
        return len(self._answers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._answers)

    def __repr__(self) -> str:
        return f"ResponseStore({self._answers!r})"

    def get(self, key: str, default: Any = None) -> Any:
        return self._answers.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._answers[key] = value

    def discard(self, key: str) -> None:
        self._answers.pop(key, None)

    def is_answered(self, key: str) -> bool:
        return not is_empty_answer(self._answers.get(key))

    def record(self, question: Question, value: Any) -> str:
        """Store a coerced answer for ``question`` and return its key."""

        self._answers[question.id] = coerce_answer(question, value)
        return question.id

    def toggle_option(self, question: CheckboxQuestion, option: str, checked: bool) -> str:
        """Add or remove ``option`` from a checkbox answer."""

        if option not in question.options:
            raise InvalidAnswerError(f"Unknown option for '{question.id}': {option!r}")
        current = self._answers.get(question.id)
        selected = list(current) if isinstance(current, list) else []
        if checked and option not in selected:
            selected.append(option)
        elif not checked:
            selected = [item for item in selected if item != option]
        return self.record(question, selected)

    def rate_row(self, question: MatrixQuestion, row: str, value: Any) -> str:
        """Store the rank for ``row``; ``value`` may be a rank or a column label."""

        if row not in question.rows:
            raise InvalidAnswerError(f"Unknown row for '{question.id}': {row!r}")
        key = question.row_key(row)
        self._answers[key] = question.rank_for(value)
        return key

    def as_dict(self) -> Dict[str, Any]:
        return deepcopy(self._answers)

    def clear(self) -> None:
        self._answers.clear()


__all__ = ["ResponseStore", "is_empty_answer"]
