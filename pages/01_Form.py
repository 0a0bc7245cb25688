"""Streamlit page that walks a user through a feedback form or survey."""

from __future__ import annotations

import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Optional

import requests
import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from Home import RUNNER_SELECTED_STATE_KEY, load_forms
from campus_forms.definitions import FormDefinition
from campus_forms.errors import FormNotFoundError, SubmissionRejectedExternal
from campus_forms.navigation import NavigationController
from campus_forms.preview import build_preview
from campus_forms.questions import (
    CheckboxQuestion,
    MatrixQuestion,
    Question,
    RadioQuestion,
    RatingQuestion,
    SelectQuestion,
)
from campus_forms.record_store import RecordStoreBackend
from campus_forms.schema_defaults import (
    DEFAULT_SUBMIT_LABEL,
    DEFAULT_SUBMIT_SUCCESS_MESSAGE,
    DEFAULT_VALIDATION_MESSAGE,
    RATING_LABELS,
    RATING_SCALE,
)
from campus_forms.settings import build_record_store, record_store_settings
from campus_forms.submission import save_draft, submit
from campus_forms.ui_theme import apply_app_theme, field_error, page_header, question_header

SESSIONS_STATE_KEY = "form_sessions"
LAST_SUBMISSION_STATE_KEY = "form_last_submission"
FORM_QUERY_PARAM = "form"


def _secrets_dict() -> Dict[str, Any]:
    """Return Streamlit secrets as a plain mapping."""

    try:
        return {key: st.secrets[key] for key in st.secrets.keys()}
    except FileNotFoundError:
        return {}


def get_record_store() -> Any:
    """Return the configured record store."""

    return build_record_store(record_store_settings(_secrets_dict()), PROJECT_ROOT)


def _rerun_app() -> None:
    """Trigger a Streamlit rerun using the available API."""

    if hasattr(st, "rerun"):
        st.rerun()
    elif hasattr(st, "experimental_rerun"):
        st.experimental_rerun()


def _get_query_param(name: str) -> Optional[str]:
    """Return the first query parameter value if present."""

    values = st.query_params.get(name)
    if not values:
        return None
    if isinstance(values, list):
        return next((str(value) for value in values if value is not None), None)
    return str(values)


def resolve_form(form_id: Optional[str], forms: Mapping[str, FormDefinition]) -> Optional[FormDefinition]:
    """Return the local form ``form_id`` or fetch it from the record store."""

    if not form_id:
        return None
    if form_id in forms:
        return forms[form_id]
    store = get_record_store()
    if not isinstance(store, RecordStoreBackend):
        return None
    try:
        return store.load_form(form_id)
    except FormNotFoundError:
        return None
    except requests.RequestException as exc:
        st.error(f"Unable to load form '{form_id}' right now: {exc}")
        return None


def get_controller(form: FormDefinition) -> NavigationController:
    """Return the session's controller for ``form``, creating it on first use."""

    sessions: Dict[str, NavigationController] = st.session_state.setdefault(SESSIONS_STATE_KEY, {})
    controller = sessions.get(form.id)
    if controller is None or controller.definition != form or controller.submitted:
        controller = NavigationController(form)
        sessions[form.id] = controller
    return controller


def discard_controller(form_id: str) -> None:
    sessions: Dict[str, NavigationController] = st.session_state.setdefault(SESSIONS_STATE_KEY, {})
    sessions.pop(form_id, None)


def store_submission(controller: NavigationController) -> Optional[str]:
    """Submit the form and report the outcome; return the submission id."""

    try:
        result = submit(controller, get_record_store())
    except SubmissionRejectedExternal as exc:
        st.error(str(exc))
        return None

    if not result.ok:
        st.error(DEFAULT_VALIDATION_MESSAGE)
        return None
    return result.submission_id


def _rating_label(value: int) -> str:
    label = RATING_LABELS.get(value)
    return f"{value} · {label}" if label else str(value)


def _index_of(options: list, value: Any) -> Optional[int]:
    return options.index(value) if value in options else None


def render_question(controller: NavigationController, question: Question) -> None:
    """Render the widget for ``question`` and copy its value into the controller."""

    form_id = controller.definition.id
    widget_key = f"{form_id}_{question.id}"
    stored = controller.responses.get(question.id)
    question_error = controller.errors.get(question.id)
    row_errors = (
        [controller.errors.get(key) for key in question.row_keys()]
        if isinstance(question, MatrixQuestion)
        else []
    )
    question_header(
        question.prompt,
        required=question.required,
        help_text=question.help_text,
        has_error=bool(question_error or any(row_errors)),
    )

    if isinstance(question, RatingQuestion):
        options = [str(value) for value in RATING_SCALE]
        selection = st.radio(
            question.prompt,
            options,
            index=_index_of(options, stored),
            key=widget_key,
            horizontal=True,
            format_func=lambda value: _rating_label(int(value)),
            label_visibility="collapsed",
        )
        if selection is not None and selection != stored:
            controller.record(question, selection)
    elif isinstance(question, RadioQuestion):
        options = list(question.options)
        selection = st.radio(
            question.prompt,
            options,
            index=_index_of(options, stored),
            key=widget_key,
            label_visibility="collapsed",
        )
        if selection is not None and selection != stored:
            controller.record(question, selection)
    elif isinstance(question, SelectQuestion):
        options = list(question.options)
        selection = st.selectbox(
            question.prompt,
            options,
            index=_index_of(options, stored),
            key=widget_key,
            placeholder="Select an option",
            label_visibility="collapsed",
        )
        if selection is not None and selection != stored:
            controller.record(question, selection)
    elif isinstance(question, CheckboxQuestion):
        selected = stored if isinstance(stored, list) else []
        for option in question.options:
            checked = st.checkbox(option, value=option in selected, key=f"{widget_key}_{option}")
            if checked != (option in selected):
                controller.toggle_option(question, option, checked)
                selected = controller.responses.get(question.id) or []
    elif isinstance(question, MatrixQuestion):
        scale = list(question.scale())
        for row, row_error in zip(question.rows, row_errors):
            row_key = question.row_key(row)
            current = question.column_label(controller.responses.get(row_key))
            selection = st.radio(
                row,
                scale,
                index=_index_of(scale, current),
                key=f"{form_id}_{row_key}",
                horizontal=True,
            )
            if selection is not None and selection != current:
                controller.rate_row(question, row, selection)
            field_error(row_error)
    else:
        text = st.text_area(
            question.prompt,
            value=stored if isinstance(stored, str) else "",
            key=widget_key,
            placeholder="Enter your response here...",
            label_visibility="collapsed",
        )
        if text != (stored or ""):
            controller.record(question, text)

    field_error(question_error)


def render_preview(controller: NavigationController) -> None:
    """Render every section's answers read-only."""

    st.markdown(
        "<div class='campus-preview'>Please review your responses before submitting. "
        "You can go back to make changes if needed.</div>",
        unsafe_allow_html=True,
    )
    for section in build_preview(controller.definition, controller.responses):
        with st.expander(section.title or section.section_id, expanded=True):
            for item in section.items:
                st.markdown(f"**{item.prompt}**")
                for line in item.lines:
                    st.markdown(f"- {line}" if item.answered else f"_{line}_")


def render_navigation(controller: NavigationController) -> None:
    """Render the Previous / Next / Review / Submit controls."""

    back_col, draft_col, forward_col = st.columns(3)
    with back_col:
        if controller.in_preview:
            if st.button("Back to Edit", use_container_width=True):
                controller.back_to_edit()
                _rerun_app()
        elif not controller.is_first and st.button("Previous", use_container_width=True):
            controller.go_prev()
            _rerun_app()

    with draft_col:
        if st.button("Save Draft", use_container_width=True):
            try:
                save_draft(controller, get_record_store())
            except SubmissionRejectedExternal as exc:
                st.error(str(exc))
            else:
                st.success("Draft saved.")

    with forward_col:
        if controller.in_preview:
            if st.button(DEFAULT_SUBMIT_LABEL, type="primary", use_container_width=True):
                submission_id = store_submission(controller)
                if submission_id:
                    st.session_state[LAST_SUBMISSION_STATE_KEY] = submission_id
                    discard_controller(controller.definition.id)
                _rerun_app()
        elif not controller.is_last:
            if st.button("Next", type="primary", use_container_width=True):
                if controller.go_next():
                    _rerun_app()
        elif st.button("Review", type="primary", use_container_width=True):
            if controller.request_preview():
                _rerun_app()


def main() -> None:
    """Render the form runner."""

    apply_app_theme(page_title="Form", page_icon="📝")

    last_submission = st.session_state.pop(LAST_SUBMISSION_STATE_KEY, None)
    if last_submission:
        st.success(DEFAULT_SUBMIT_SUCCESS_MESSAGE)
        st.info(f"Submission saved with ID `{last_submission}`.")

    forms = load_forms()
    form_id = _get_query_param(FORM_QUERY_PARAM) or st.session_state.get(RUNNER_SELECTED_STATE_KEY)
    if not form_id and forms:
        form_id = next(iter(forms))
    form = resolve_form(form_id, forms)
    if form is None:
        page_header("Form", "No form selected.", icon="📝")
        st.error("The requested form could not be found.")
        return

    st.session_state[RUNNER_SELECTED_STATE_KEY] = form.id
    controller = get_controller(form)
    page_header(form.title, form.description or None, icon="📝")
    if form.instructions:
        st.caption(form.instructions)

    if controller.in_preview:
        st.markdown("**Preview**")
        render_preview(controller)
        render_navigation(controller)
        if controller.errors:
            st.error(DEFAULT_VALIDATION_MESSAGE)
        return

    unit = "Section" if form.form_type == "feedback" else "Page"
    st.caption(f"{unit} {controller.current_index + 1} of {controller.section_count}")
    st.progress(int(controller.progress()), text=f"Progress {round(controller.progress())}%")

    if form.form_type == "feedback" and controller.section_count > 1:
        titles = [section.title or section.id for section in form.sections]
        choice = st.radio(
            "Sections",
            range(len(titles)),
            index=controller.current_index,
            format_func=lambda index: titles[index],
            horizontal=True,
            label_visibility="collapsed",
        )
        if choice != controller.current_index:
            controller.jump_to(choice)
            _rerun_app()

    section = controller.current_section
    st.subheader(section.title or unit)
    if section.description:
        st.caption(section.description)

    for question in controller.visible_questions():
        render_question(controller, question)

    if controller.errors:
        st.error(DEFAULT_VALIDATION_MESSAGE)
    render_navigation(controller)


if __name__ == "__main__":
    main()
