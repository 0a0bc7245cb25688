"""Tests for the form builder page helpers."""

from __future__ import annotations

import contextlib
import importlib
from types import SimpleNamespace

import pytest

from campus_forms import builder
from campus_forms.form_store import load_local_form


def _load_page():
    return importlib.import_module("pages.02_Builder")


class Rerun(Exception):
    pass


class FakeStreamlit:
    """Stands in for ``st``; keyed widgets keep their first value like Streamlit does."""

    def __init__(self, clicks=()):
        self.session_state = {}
        self.clicks = set(clicks)
        self.disabled = set()
        self.errors = []

    def _widget(self, key, value):
        if key is None:
            return value
        return self.session_state.setdefault(key, value)

    def text_input(self, label, value="", key=None, **kwargs):
        return self._widget(key, value)

    def text_area(self, label, value="", key=None, **kwargs):
        return self._widget(key, value)

    def checkbox(self, label, value=False, key=None, **kwargs):
        return self._widget(key, value)

    def selectbox(self, label, options, index=0, key=None, **kwargs):
        options = list(options)
        return self._widget(key, None if index is None else options[index])

    def button(self, label, key=None, disabled=False, **kwargs):
        name = key.rsplit("__r", 1)[0] if key else label
        if disabled:
            self.disabled.add(name)
            return False
        return name in self.clicks

    def columns(self, layout):
        return [self] * (layout if isinstance(layout, int) else len(layout))

    def expander(self, *args, **kwargs):
        return contextlib.nullcontext()

    def error(self, message):
        self.errors.append(message)

    def _ignore(self, *args, **kwargs):
        return None

    subheader = caption = markdown = info = success = divider = _ignore


def _raise_rerun():
    raise Rerun()


@pytest.fixture
def page(monkeypatch):
    module = _load_page()
    monkeypatch.setattr(module, "st", FakeStreamlit())
    monkeypatch.setattr(module, "_rerun_app", _raise_rerun)
    return module


def _radio_form(options=3):
    form = builder.add_question(builder.new_form("f"), "section-1", "radio", question_id="q")
    for _ in range(options - 2):
        form = builder.add_option(form, "section-1", "q")
    return form


def _question(form):
    section = form.get_section("section-1")
    return section, section.get_question("q")


def test_apply_change_keeps_history(page):
    """A successful change should store the previous form for undo."""

    form = builder.new_form("f")
    page.st.session_state[page.FORM_STATE_KEY] = form

    assert page.apply_change(builder.update_form, title="Renamed")

    assert page.st.session_state[page.FORM_STATE_KEY].title == "Renamed"
    assert page.st.session_state[page.HISTORY_STATE_KEY] == [form]
    assert page.st.errors == []


def test_apply_change_reports_builder_errors(page):
    """Deleting the only section should show an error and keep the form."""

    form = builder.new_form("f")
    page.st.session_state[page.FORM_STATE_KEY] = form

    assert not page.apply_change(builder.delete_section, "section-1")

    assert page.st.session_state[page.FORM_STATE_KEY] is form
    assert page.st.session_state.get(page.HISTORY_STATE_KEY) is None
    assert len(page.st.errors) == 1


def test_apply_change_ignores_unchanged_form(page):
    """Removing one of the last two options should not add an undo step."""

    form = _radio_form(options=2)
    page.st.session_state[page.FORM_STATE_KEY] = form

    assert not page.apply_change(builder.delete_option, "section-1", "q", 0)
    assert page.st.session_state.get(page.HISTORY_STATE_KEY) is None


def test_history_is_capped(page):
    """Only the most recent snapshots should be kept."""

    page.st.session_state[page.FORM_STATE_KEY] = builder.new_form("f")
    for number in range(page.HISTORY_LIMIT + 5):
        page.apply_change(builder.update_form, title=f"Title {number}")

    assert len(page.st.session_state[page.HISTORY_STATE_KEY]) == page.HISTORY_LIMIT


def test_undo_restores_previous_form(page):
    """Undo should step back one change at a time."""

    form = builder.new_form("f")
    page.st.session_state[page.FORM_STATE_KEY] = form
    page.apply_change(builder.update_form, title="Renamed")

    assert page.undo()
    assert page.st.session_state[page.FORM_STATE_KEY] is form
    assert not page.undo()


def test_publish_blocked_by_definition_issues(page, monkeypatch, tmp_path):
    """Publishing an incomplete form should list the issues and write nothing."""

    monkeypatch.setattr(page, "SCHEMAS_ROOT", tmp_path)
    page.st.session_state[page.FORM_STATE_KEY] = builder.new_form("f")

    assert page.persist_form("active") is None

    assert len(page.st.errors) == 1
    assert "Please select a category for your form." in page.st.errors[0]
    assert not (tmp_path / "f").exists()
    assert page.st.session_state[page.FORM_STATE_KEY].status == "draft"


def test_save_draft_writes_form_file(page, monkeypatch, tmp_path):
    """Saving a draft should write the form and clear the cached form list."""

    cleared = []
    monkeypatch.setattr(page, "SCHEMAS_ROOT", tmp_path)
    monkeypatch.setattr(page, "load_forms", SimpleNamespace(clear=lambda: cleared.append(True)))
    page.st.session_state[page.FORM_STATE_KEY] = builder.new_form("f", title="Draft form")

    path = page.persist_form("draft")

    assert path == tmp_path / "f" / "form.json"
    assert load_local_form("f", tmp_path).title == "Draft form"
    assert cleared == [True]
    assert page.st.errors == []


def test_publish_marks_complete_form_active(page, monkeypatch, tmp_path, course_feedback):
    """A complete form should be saved with the active status."""

    monkeypatch.setattr(page, "SCHEMAS_ROOT", tmp_path)
    monkeypatch.setattr(page, "load_forms", SimpleNamespace(clear=lambda: None))
    page.st.session_state[page.FORM_STATE_KEY] = course_feedback

    assert page.persist_form("active") is not None
    assert load_local_form("course-feedback", tmp_path).status == "active"


def test_deleting_option_keeps_remaining_labels(page):
    """Inputs left over from before a delete should not rename the shifted options."""

    form = _radio_form()
    page.st.session_state[page.FORM_STATE_KEY] = form
    page.st.clicks = {"section-1_q_delete_option_0"}

    with pytest.raises(Rerun):
        page.render_options(*_question(form))

    page.st.clicks = set()
    page.render_options(*_question(page.st.session_state[page.FORM_STATE_KEY]))

    _, question = _question(page.st.session_state[page.FORM_STATE_KEY])
    assert question.options == ("Option 2", "Option 3")
    assert len(page.st.session_state[page.HISTORY_STATE_KEY]) == 1


def test_remove_option_disabled_at_two(page):
    """The remove button should be disabled once only two options remain."""

    form = _radio_form(options=2)
    page.st.session_state[page.FORM_STATE_KEY] = form
    page.st.clicks = {"section-1_q_delete_option_0"}

    page.render_options(*_question(form))

    assert page.st.disabled == {"section-1_q_delete_option_0", "section-1_q_delete_option_1"}
    assert page.st.session_state[page.FORM_STATE_KEY] is form


def test_undo_is_not_replayed_by_typed_text(page):
    """After undo the title input should show the restored title."""

    form = builder.new_form("f")
    page.st.session_state[page.FORM_STATE_KEY] = form
    page.st.session_state[page.widget_key("f_title")] = "Renamed"

    with pytest.raises(Rerun):
        page.render_form_details(form)
    assert page.st.session_state[page.FORM_STATE_KEY].title == "Renamed"

    assert page.undo()
    page.render_form_details(page.st.session_state[page.FORM_STATE_KEY])

    assert page.st.session_state[page.FORM_STATE_KEY].title == "Untitled form"
    assert page.st.session_state[page.HISTORY_STATE_KEY] == []
