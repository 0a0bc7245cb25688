"""Tests for section-by-section navigation."""

from __future__ import annotations

import pytest

from campus_forms.errors import SessionClosedError
from campus_forms.navigation import (
    EDITING_STATE,
    PREVIEW_STATE,
    SUBMITTED_STATE,
    NavigationController,
)


def test_go_next_is_blocked_by_missing_required_answer(two_required_sections) -> None:
    """A missing required answer should keep the section open."""

    controller = NavigationController(two_required_sections)

    assert controller.go_next() is False
    assert controller.current_index == 0
    assert controller.errors == {"q1": "This field is required"}


def test_go_next_advances_and_clears_errors(two_required_sections) -> None:
    """A valid section should advance and clear errors."""

    scrolled = []
    controller = NavigationController(two_required_sections, on_scroll_top=lambda: scrolled.append(True))
    controller.go_next()

    controller.answer("q1", "done")
    assert controller.errors == {}
    assert controller.go_next() is True
    assert controller.current_index == 1
    assert controller.errors == {}
    assert scrolled == [True]


def test_go_next_on_last_section_stays_put(two_required_sections) -> None:
    """Next on the last section should not move."""

    controller = NavigationController(two_required_sections)
    controller.answer("q1", "a")
    controller.go_next()
    controller.answer("q2", "b")

    assert controller.go_next() is False
    assert controller.current_index == 1


def test_go_prev_never_validates(two_required_sections) -> None:
    """Going back should work with missing answers."""

    controller = NavigationController(two_required_sections)
    controller.answer("q1", "a")
    controller.go_next()

    assert controller.go_prev() is True
    assert controller.current_index == 0
    assert controller.go_prev() is False


def test_jump_to_skips_validation_and_clamps(two_required_sections) -> None:
    """Jumping should skip validation and stay in range."""

    controller = NavigationController(two_required_sections)

    assert controller.jump_to(5) is True
    assert controller.current_index == 1
    assert controller.jump_to(-3) is True
    assert controller.current_index == 0


def test_progress_counts_current_section(course_feedback) -> None:
    """Progress should include the current section."""

    controller = NavigationController(course_feedback)

    assert controller.progress() == 50
    controller.jump_to(1)
    assert controller.progress() == 100


def test_hidden_follow_up_does_not_block_navigation(course_feedback) -> None:
    """A hidden required question should not block next."""

    controller = NavigationController(course_feedback)
    controller.answer("q-overall", "5")
    controller.answer("q-attend", "Yes")

    assert [question.id for question in controller.visible_questions()] == ["q-overall", "q-attend"]
    assert controller.go_next() is True


def test_preview_only_from_valid_last_section(course_feedback) -> None:
    """Preview should open only from a valid last section."""

    controller = NavigationController(course_feedback)
    assert controller.request_preview() is False

    controller.jump_to(1)
    assert controller.request_preview() is False
    assert set(controller.errors) == {"q-fac-library", "q-fac-study-rooms"}

    question = course_feedback.find_question("q-fac")
    controller.rate_row(question, "Library", "Good")
    assert set(controller.errors) == {"q-fac-study-rooms"}
    controller.rate_row(question, "Study Rooms", "3")

    assert controller.request_preview() is True
    assert controller.state == PREVIEW_STATE
    assert controller.go_next() is False
    assert controller.go_prev() is False

    controller.back_to_edit()
    assert controller.state == EDITING_STATE
    assert controller.current_index == 1


def test_submitted_session_rejects_changes(two_required_sections) -> None:
    """A submitted session should refuse further changes."""

    controller = NavigationController(two_required_sections)
    controller.mark_submitted()

    assert controller.state == SUBMITTED_STATE
    with pytest.raises(SessionClosedError):
        controller.go_next()
    with pytest.raises(SessionClosedError):
        controller.answer("q1", "late")
