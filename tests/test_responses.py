"""Tests for the in-memory response store."""

from __future__ import annotations

import pytest

from campus_forms.errors import InvalidAnswerError
from campus_forms.questions import CheckboxQuestion, MatrixQuestion, RatingQuestion
from campus_forms.responses import ResponseStore, is_empty_answer


@pytest.mark.parametrize("value", [None, "", "   ", [], {}])
def test_empty_answers(value) -> None:
    """These values should count as unanswered."""

    assert is_empty_answer(value)


@pytest.mark.parametrize("value", ["x", ["A"], "0", 0])
def test_non_empty_answers(value) -> None:
    """These values should count as answered."""

    assert not is_empty_answer(value)


def test_record_coerces_and_returns_key() -> None:
    """Recording should coerce the value and return its key."""

    store = ResponseStore()

    assert store.record(RatingQuestion(id="q"), 2) == "q"
    assert store.get("q") == "2"
    assert store.is_answered("q")


def test_toggle_option_keeps_option_order() -> None:
    """Checked options should follow the question's order."""

    question = CheckboxQuestion(id="c", options=("Gym", "Cafe", "Labs"))
    store = ResponseStore()

    store.toggle_option(question, "Labs", True)
    store.toggle_option(question, "Gym", True)
    store.toggle_option(question, "Gym", True)
    assert store.get("c") == ["Gym", "Labs"]

    store.toggle_option(question, "Labs", False)
    assert store.get("c") == ["Gym"]

    with pytest.raises(InvalidAnswerError):
        store.toggle_option(question, "Pool", True)


def test_rate_row_stores_rank_under_row_key() -> None:
    """Row ratings should be stored as ranks under the row key."""

    question = MatrixQuestion(id="q-fac", rows=("Library", "Study Rooms"))
    store = ResponseStore()

    key = store.rate_row(question, "Study Rooms", "Very Good")

    assert key == "q-fac-study-rooms"
    assert store.get(key) == "4"
    with pytest.raises(InvalidAnswerError):
        store.rate_row(question, "Gym", "1")


def test_as_dict_returns_a_copy() -> None:
    """The answer snapshot should not share state with the store."""

    store = ResponseStore({"c": ["A"]})

    snapshot = store.as_dict()
    snapshot["c"].append("B")

    assert store.get("c") == ["A"]
    store.clear()
    assert len(store) == 0
