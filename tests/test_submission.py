"""Tests for assembling and storing submissions."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from campus_forms import submission
from campus_forms.definitions import FormDefinition, Section
from campus_forms.errors import (
    RequiredFieldMissing,
    SessionClosedError,
    SubmissionRejectedExternal,
)
from campus_forms.navigation import NavigationController
from campus_forms.questions import MatrixQuestion
from campus_forms.responses import ResponseStore
from campus_forms.submission import INVALID, SUBMITTED, assemble_payload, save_draft, submit


class DummyStore:
    def __init__(self, error=None) -> None:
        self.error = error
        self.submissions = []
        self.drafts = {}

    def insert_submission(self, record):
        if self.error is not None:
            raise self.error
        self.submissions.append(record)
        return record

    def save_draft(self, form_id, draft):
        if self.error is not None:
            raise self.error
        self.drafts[form_id] = draft
        return draft


def _answered(course_feedback) -> NavigationController:
    controller = NavigationController(course_feedback)
    controller.answer("q-overall", "4")
    controller.answer("q-attend", "Yes")
    controller.answer("q-why", "stale answer")
    matrix = course_feedback.find_question("q-fac")
    controller.rate_row(matrix, "Library", "3")
    controller.rate_row(matrix, "Study Rooms", "Excellent")
    return controller


def test_payload_maps_matrix_ranks_to_labels(course_feedback) -> None:
    """Matrix ranks should be reported as column labels."""

    controller = _answered(course_feedback)

    payload = assemble_payload(course_feedback, controller.responses)

    assert payload == {
        "q-overall": "4",
        "q-attend": "Yes",
        "q-fac": {"Library": "Good", "Study Rooms": "Excellent"},
    }


def test_payload_skips_hidden_and_unanswered_questions(course_feedback) -> None:
    """Hidden and unanswered questions should be left out."""

    controller = _answered(course_feedback)

    payload = assemble_payload(course_feedback, controller.responses)

    assert "q-why" not in payload
    assert "q-used" not in payload
    assert controller.responses.get("q-why") == "stale answer"


def test_payload_skips_out_of_range_ranks(course_feedback) -> None:
    """Stored ranks outside the scale should be skipped."""

    responses = ResponseStore(
        {
            "q-overall": "4",
            "q-attend": "Yes",
            "q-fac-library": "3",
            "q-fac-study-rooms": "9",
        }
    )

    assert assemble_payload(course_feedback, responses)["q-fac"] == {"Library": "Good"}


def test_payload_keeps_numeric_matrix_labels() -> None:
    """A 0..10 matrix should report the label that was picked."""

    matrix = MatrixQuestion(
        id="q-nps", rows=("Course",), columns=tuple(str(value) for value in range(11))
    )
    form = FormDefinition(id="nps", sections=(Section(id="section-1", title="Score", questions=(matrix,)),))
    controller = NavigationController(form)
    controller.rate_row(matrix, "Course", "7")

    assert controller.responses.get("q-nps-course") == "8"
    assert assemble_payload(form, controller.responses) == {"q-nps": {"Course": "7"}}


def test_assemble_payload_raises_for_first_invalid_section(two_required_sections) -> None:
    """Missing answers should point at the first invalid section."""

    with pytest.raises(RequiredFieldMissing) as excinfo:
        assemble_payload(two_required_sections, ResponseStore({"q2": "filled"}))

    assert excinfo.value.section_index == 0
    assert excinfo.value.errors == {"q1": "This field is required"}


def test_submit_navigates_to_first_invalid_section(two_required_sections) -> None:
    """A rejected submit should show the first invalid section."""

    controller = NavigationController(two_required_sections)
    controller.jump_to(1)
    controller.answer("q2", "filled")
    store = DummyStore()

    result = submit(controller, store)

    assert result.status == INVALID
    assert result.section_index == 0
    assert controller.current_index == 0
    assert controller.errors == {"q1": "This field is required"}
    assert controller.in_preview is False
    assert store.submissions == []


def test_submit_stores_record_and_closes_session(course_feedback, monkeypatch) -> None:
    """A valid submit should store the record and close the session."""

    controller = _answered(course_feedback)
    store = DummyStore()
    monkeypatch.setattr(submission.uuid, "uuid4", lambda: SimpleNamespace(hex="abc123"))

    result = submit(controller, store, submitted_by="student@example.edu")

    assert result.status == SUBMITTED
    assert result.ok
    assert result.submission_id == "abc123"
    record = store.submissions[0]
    assert record["id"] == "abc123"
    assert record["form_id"] == "course-feedback"
    assert record["submitted_by"] == "student@example.edu"
    assert record["answers"]["q-fac"] == {"Library": "Good", "Study Rooms": "Excellent"}
    assert len(controller.responses) == 0
    assert controller.submitted

    with pytest.raises(SessionClosedError):
        submit(controller, store)


def test_submit_keeps_answers_when_store_fails(course_feedback) -> None:
    """A store failure should keep the answers for a retry."""

    controller = _answered(course_feedback)
    before = controller.responses.as_dict()
    failure = RuntimeError("connection reset")

    with pytest.raises(SubmissionRejectedExternal) as excinfo:
        submit(controller, DummyStore(error=failure))

    assert excinfo.value.cause is failure
    assert str(excinfo.value) == "Something went wrong while submitting. Please try again."
    assert controller.responses.as_dict() == before
    assert not controller.submitted


def test_save_draft_keeps_unvalidated_answers(two_required_sections) -> None:
    """Drafts should be saved without validation."""

    controller = NavigationController(two_required_sections)
    controller.answer("q2", "partial")
    store = DummyStore()

    draft = save_draft(controller, store, saved_by="student")

    assert store.drafts["two-sections"] is draft
    assert draft["answers"] == {"q2": "partial"}
    assert draft["section_index"] == 0
    assert draft["saved_by"] == "student"

    with pytest.raises(SubmissionRejectedExternal):
        save_draft(controller, DummyStore(error=OSError("disk full")))
