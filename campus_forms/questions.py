"""Question variants, one frozen dataclass per question kind."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type

from campus_forms.errors import InvalidAnswerError
from campus_forms.schema_defaults import (
    DEFAULT_MATRIX_COLUMNS,
    DEFAULT_QUESTION_PROMPT,
    MATRIX_ROW_TEMPLATE,
    MIN_OPTIONS,
    OPTION_LABEL_TEMPLATE,
    RATING_SCALE,
    placeholder_options,
)

_WHITESPACE_RE = re.compile(r"\s+")


def slugify_row(row: str) -> str:
    """Return the key fragment used for a matrix ``row``."""

    return _WHITESPACE_RE.sub("-", row.lower())


@dataclass(frozen=True)
class Conditional:
    """Show a question only while ``depends_on`` is answered with ``equals``."""

    depends_on: str
    equals: Any


@dataclass(frozen=True)
class Question:
    """Fields shared by every question kind."""

    id: str
    prompt: str = DEFAULT_QUESTION_PROMPT
    required: bool = False
    help_text: Optional[str] = None
    conditional: Optional[Conditional] = None

    kind: ClassVar[str] = ""

    def answer_keys(self) -> List[str]:
        """Return the keys this question stores its answers under."""

        return [self.id]


@dataclass(frozen=True)
class RatingQuestion(Question):
    kind: ClassVar[str] = "rating"


@dataclass(frozen=True)
class TextQuestion(Question):
    kind: ClassVar[str] = "text"


@dataclass(frozen=True)
class ChoiceQuestion(Question):
    """Base for kinds answered from a fixed list of options."""

    options: Tuple[str, ...] = field(default_factory=lambda: tuple(placeholder_options()))

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", tuple(self.options))
        if len(self.options) < MIN_OPTIONS:
            raise ValueError(
                f"Question '{self.id}' needs at least {MIN_OPTIONS} options, got {len(self.options)}."
            )


@dataclass(frozen=True)
class RadioQuestion(ChoiceQuestion):
    kind: ClassVar[str] = "radio"


@dataclass(frozen=True)
class CheckboxQuestion(ChoiceQuestion):
    kind: ClassVar[str] = "checkbox"


@dataclass(frozen=True)
class SelectQuestion(ChoiceQuestion):
    kind: ClassVar[str] = "select"


@dataclass(frozen=True)
class MatrixQuestion(Question):
    """A grid of rows, each rated on the same column scale.

    Every row is answered independently under ``{id}-{row slug}`` and stores
    the 1-based column rank as a string.
    """

    rows: Tuple[str, ...] = ()
    columns: Tuple[str, ...] = DEFAULT_MATRIX_COLUMNS

    kind: ClassVar[str] = "matrix"

    def __post_init__(self) -> None:
        object.__setattr__(self, "rows", tuple(self.rows))
        object.__setattr__(self, "columns", tuple(self.columns))

    def row_key(self, row: str) -> str:
        return f"{self.id}-{slugify_row(row)}"

    def row_keys(self) -> List[str]:
        return [self.row_key(row) for row in self.rows]

    def answer_keys(self) -> List[str]:
        return self.row_keys()

    def scale(self) -> Tuple[str, ...]:
        """Return the column labels, defaulting to a numeric 1..5 scale."""

        if self.columns:
            return self.columns
        return tuple(str(value) for value in RATING_SCALE)

    def column_label(self, rank: Any) -> Optional[str]:
        """Translate a stored rank into its column label."""

        try:
            position = int(rank)
        except (TypeError, ValueError):
            return None
        labels = self.scale()
        if 1 <= position <= len(labels):
            return labels[position - 1]
        return None

    def rank_for(self, value: Any) -> str:
        """Return the stored rank for a column label or a rank value.

        Strings are matched against the column labels first, so numeric labels
        such as ``"0"``..``"10"`` resolve to their own column. Integers and
        strings that are not a label are read as 1-based ranks.
        """

        labels = self.scale()
        if isinstance(value, str) and value in labels:
            return str(labels.index(value) + 1)
        if isinstance(value, bool):
            raise InvalidAnswerError(f"Invalid rating for '{self.id}': {value!r}")
        if self.column_label(value) is None:
            raise InvalidAnswerError(f"Invalid rating for '{self.id}': {value!r}")
        return str(int(value))

    @property
    def is_renderable(self) -> bool:
        return bool(self.rows) and bool(self.scale())


QUESTION_TYPES: Dict[str, Type[Question]] = {
    cls.kind: cls
    for cls in (
        RatingQuestion,
        TextQuestion,
        RadioQuestion,
        CheckboxQuestion,
        SelectQuestion,
        MatrixQuestion,
    )
}

QUESTION_TYPE_LABELS = {
    "rating": "Rating Scale",
    "text": "Text Input",
    "radio": "Multiple Choice (Single)",
    "checkbox": "Multiple Choice (Multiple)",
    "select": "Dropdown",
    "matrix": "Rating Matrix",
}


def question_class(kind: str) -> Type[Question]:
    """Return the dataclass implementing ``kind``."""

    try:
        return QUESTION_TYPES[kind]
    except KeyError:
        raise ValueError(f"Unsupported question type: {kind}") from None


def has_options(kind: str) -> bool:
    return issubclass(question_class(kind), ChoiceQuestion)


def change_kind(question: Question, kind: str) -> Question:
    """Return ``question`` converted to ``kind``.

    Options survive a move between option kinds, are dropped when leaving
    them, and are seeded with two placeholders when entering them.
    """

    if question.kind == kind:
        return question

    target = question_class(kind)
    common: Dict[str, Any] = {
        "id": question.id,
        "prompt": question.prompt,
        "required": question.required,
        "help_text": question.help_text,
        "conditional": question.conditional,
    }
    if issubclass(target, ChoiceQuestion):
        if isinstance(question, ChoiceQuestion):
            options: Sequence[str] = question.options
        else:
            options = placeholder_options()
        return target(**common, options=tuple(options))
    if target is MatrixQuestion:
        return MatrixQuestion(
            **common,
            rows=(MATRIX_ROW_TEMPLATE.format(number=1),),
            columns=DEFAULT_MATRIX_COLUMNS,
        )
    return target(**common)


def coerce_answer(question: Question, value: Any) -> Any:
    """Return ``value`` in the stored shape for ``question``.

    Raises :class:`InvalidAnswerError` when the value cannot be an answer to
    the question.
    """

    if isinstance(question, RatingQuestion):
        if isinstance(value, bool):
            raise InvalidAnswerError(f"Invalid rating for '{question.id}': {value!r}")
        try:
            rating = int(value)
        except (TypeError, ValueError):
            raise InvalidAnswerError(f"Invalid rating for '{question.id}': {value!r}") from None
        if rating not in RATING_SCALE:
            raise InvalidAnswerError(
                f"Rating for '{question.id}' must be between {RATING_SCALE[0]} and {RATING_SCALE[-1]}."
            )
        return str(rating)

    if isinstance(question, CheckboxQuestion):
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            raise InvalidAnswerError(f"Question '{question.id}' expects a list of options.")
        unknown = [item for item in value if item not in question.options]
        if unknown:
            raise InvalidAnswerError(f"Unknown option(s) for '{question.id}': {unknown}")
        return [option for option in question.options if option in value]

    if isinstance(question, ChoiceQuestion):
        if value not in question.options:
            raise InvalidAnswerError(f"Unknown option for '{question.id}': {value!r}")
        return value

    if isinstance(question, MatrixQuestion):
        raise InvalidAnswerError(
            f"Matrix question '{question.id}' is answered row by row."
        )

    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _ensure_mapping(value: Any) -> Dict[str, Any]:
    """Return ``value`` if it is a mapping, otherwise an empty dict."""

    return dict(value) if isinstance(value, Mapping) else {}


def _ensure_strings(value: Any) -> List[str]:
    """Return the string items of ``value`` if it is a list."""

    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, (str, int, float))]


def _clean_text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if value is None:
        return ""
    return str(value).strip()


def conditional_from_dict(payload: Any) -> Optional[Conditional]:
    """Parse ``show_if`` (or the legacy ``conditional``) into a rule."""

    data = _ensure_mapping(payload)
    depends_on = _clean_text(data.get("question") or data.get("questionId"))
    if not depends_on:
        return None
    expected = data.get("equals", data.get("value"))
    return Conditional(depends_on=depends_on, equals=expected)


def conditional_to_dict(conditional: Conditional) -> Dict[str, Any]:
    return {"question": conditional.depends_on, "equals": conditional.equals}


def question_from_dict(payload: Any) -> Question:
    """Build a question from a stored mapping."""

    data = _ensure_mapping(payload)
    kind = _clean_text(data.get("type") or data.get("kind")).lower() or "text"
    cls = question_class(kind)

    identifier = _clean_text(data.get("id") or data.get("key"))
    if not identifier:
        raise ValueError("Question is missing an 'id'.")

    prompt = data.get("prompt", data.get("question", data.get("label")))
    help_text = _clean_text(data.get("help", data.get("helpText"))) or None
    common: Dict[str, Any] = {
        "id": identifier,
        "prompt": DEFAULT_QUESTION_PROMPT if prompt is None else str(prompt),
        "required": bool(data.get("required")),
        "help_text": help_text,
        "conditional": conditional_from_dict(data.get("show_if") or data.get("conditional")),
    }

    if issubclass(cls, ChoiceQuestion):
        options = _ensure_strings(data.get("options"))
        while len(options) < MIN_OPTIONS:
            options.append(OPTION_LABEL_TEMPLATE.format(number=len(options) + 1))
        return cls(**common, options=tuple(options))
    if cls is MatrixQuestion:
        columns = data.get("columns")
        return MatrixQuestion(
            **common,
            rows=tuple(_ensure_strings(data.get("rows"))),
            columns=tuple(_ensure_strings(columns)) if columns is not None else DEFAULT_MATRIX_COLUMNS,
        )
    return cls(**common)


def question_to_dict(question: Question) -> Dict[str, Any]:
    """Return the stored mapping for ``question``."""

    payload: Dict[str, Any] = {
        "id": question.id,
        "type": question.kind,
        "prompt": question.prompt,
        "required": question.required,
    }
    if question.help_text:
        payload["help"] = question.help_text
    if question.conditional is not None:
        payload["show_if"] = conditional_to_dict(question.conditional)
    if isinstance(question, ChoiceQuestion):
        payload["options"] = list(question.options)
    if isinstance(question, MatrixQuestion):
        payload["rows"] = list(question.rows)
        payload["columns"] = list(question.columns)
    return payload


__all__ = [
    "CheckboxQuestion",
    "ChoiceQuestion",
    "Conditional",
    "MatrixQuestion",
    "QUESTION_TYPES",
    "QUESTION_TYPE_LABELS",
    "Question",
    "RadioQuestion",
    "RatingQuestion",
    "SelectQuestion",
    "TextQuestion",
    "change_kind",
    "coerce_answer",
    "conditional_from_dict",
    "conditional_to_dict",
    "has_options",
    "question_class",
    "question_from_dict",
    "question_to_dict",
    "slugify_row",
]
