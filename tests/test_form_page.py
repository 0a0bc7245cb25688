"""Tests for the form runner page helpers."""

from __future__ import annotations

import importlib

from campus_forms.navigation import NavigationController
from campus_forms.record_store import LocalRecordStore


def _load_page():
    return importlib.import_module("pages.01_Form")


class FailingStore:
    def insert_submission(self, record):
        raise ConnectionError("backend unavailable")


def test_store_submission_success(monkeypatch, tmp_path, two_required_sections):
    """Valid answers should be written through the configured store."""

    page = _load_page()
    monkeypatch.setattr(page, "get_record_store", lambda: LocalRecordStore(tmp_path))
    errors = []
    monkeypatch.setattr(page.st, "error", lambda message: errors.append(message))

    controller = NavigationController(two_required_sections)
    controller.answer("q1", "first")
    controller.answer("q2", "second")

    submission_id = page.store_submission(controller)

    assert submission_id
    assert (tmp_path / "submissions" / "two-sections" / f"{submission_id}.json").exists()
    assert controller.submitted
    assert errors == []


def test_store_submission_reports_store_failure(monkeypatch, two_required_sections):
    """A failing store should surface the retry message and keep the answers."""

    page = _load_page()
    monkeypatch.setattr(page, "get_record_store", lambda: FailingStore())
    errors = []
    monkeypatch.setattr(page.st, "error", lambda message: errors.append(message))

    controller = NavigationController(two_required_sections)
    controller.answer("q1", "first")
    controller.answer("q2", "second")

    assert page.store_submission(controller) is None
    assert errors == ["Something went wrong while submitting. Please try again."]
    assert controller.responses.get("q1") == "first"
    assert not controller.submitted


def test_store_submission_reports_missing_answers(monkeypatch, two_required_sections):
    """Missing required answers should move back to the offending section."""

    page = _load_page()
    monkeypatch.setattr(page, "get_record_store", lambda: FailingStore())
    errors = []
    monkeypatch.setattr(page.st, "error", lambda message: errors.append(message))

    controller = NavigationController(two_required_sections)
    controller.jump_to(1)
    controller.answer("q2", "second")

    assert page.store_submission(controller) is None
    assert errors == ["Please complete all required fields."]
    assert controller.current_index == 0
    assert controller.errors == {"q1": "This field is required"}
