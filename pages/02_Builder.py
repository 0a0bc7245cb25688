"""Streamlit page for designing feedback forms and surveys."""

from __future__ import annotations

import hashlib
import hmac
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from Home import BUILDER_SELECTED_STATE_KEY, load_forms
from campus_forms import builder
from campus_forms.definitions import FormDefinition, Section
from campus_forms.errors import BuilderError
from campus_forms.form_store import SCHEMAS_ROOT, save_local_form
from campus_forms.questions import (
    QUESTION_TYPE_LABELS,
    QUESTION_TYPES,
    ChoiceQuestion,
    Conditional,
    MatrixQuestion,
    Question,
)
from campus_forms.schema_defaults import FORM_CATEGORIES, FORM_TYPES, MIN_OPTIONS
from campus_forms.ui_theme import apply_app_theme, page_header
from campus_forms.validation import validate_definition

FORM_STATE_KEY = "builder_form"
HISTORY_STATE_KEY = "builder_history"
NOTICE_STATE_KEY = "builder_notice"
REVISION_STATE_KEY = "builder_revision"
HISTORY_LIMIT = 25
NO_CONDITION = "(always show)"


def _rerun_app() -> None:
    """Trigger a Streamlit rerun using the available API."""

    if hasattr(st, "rerun"):
        st.rerun()
    elif hasattr(st, "experimental_rerun"):
        st.experimental_rerun()


def verify_password(password: str) -> bool:
    """Validate a plaintext password against the configured hash."""

    stored_hash = st.secrets.get("builder_password_hash", "")
    if not stored_hash:
        return False

    digest = hashlib.sha256(password.encode("utf-8")).hexdigest()
    return hmac.compare_digest(digest, stored_hash)


def require_authentication() -> None:
    """Ask for the builder password when one is configured."""

    if st.session_state.get("auth"):
        return

    try:
        stored_hash = st.secrets.get("builder_password_hash", "")
    except FileNotFoundError:
        stored_hash = ""
    if not stored_hash:
        return

    password = st.text_input("Password", type="password")
    if not password:
        st.stop()

    if verify_password(password):
        st.session_state.auth = True
        return

    st.error("Incorrect password.")
    st.stop()


def widget_key(name: str) -> str:
    """Return the key for an editor widget at the current form revision.

    Every change to the edited form bumps the revision, so inputs are rebuilt
    from the form instead of replaying text typed before the change.
    """

    return f"{name}__r{st.session_state.get(REVISION_STATE_KEY, 0)}"


def _bump_revision() -> None:
    st.session_state[REVISION_STATE_KEY] = st.session_state.get(REVISION_STATE_KEY, 0) + 1


def get_form() -> FormDefinition:
    """Return the form being edited, loading the selected one on first use."""

    form = st.session_state.get(FORM_STATE_KEY)
    selected = st.session_state.get(BUILDER_SELECTED_STATE_KEY)
    if form is not None and (not selected or form.id == selected):
        return form

    forms = load_forms()
    form = forms.get(selected) if selected else None
    if form is None:
        form = builder.new_form()
    st.session_state[FORM_STATE_KEY] = form
    st.session_state[BUILDER_SELECTED_STATE_KEY] = form.id
    st.session_state[HISTORY_STATE_KEY] = []
    _bump_revision()
    return form


def apply_change(operation: Callable[..., FormDefinition], *args: Any, **kwargs: Any) -> bool:
    """Run a builder operation on the edited form and keep an undo snapshot.

    Returns ``True`` when the form changed.
    """

    form = st.session_state[FORM_STATE_KEY]
    try:
        updated = operation(form, *args, **kwargs)
    except BuilderError as exc:
        st.error(str(exc))
        return False
    except (ValueError, KeyError, IndexError) as exc:
        st.error(f"Unable to apply change: {exc}")
        return False

    if updated == form:
        return False
    history: List[FormDefinition] = st.session_state.setdefault(HISTORY_STATE_KEY, [])
    history.append(form)
    del history[:-HISTORY_LIMIT]
    st.session_state[FORM_STATE_KEY] = updated
    _bump_revision()
    return True


def undo() -> bool:
    history: List[FormDefinition] = st.session_state.setdefault(HISTORY_STATE_KEY, [])
    if not history:
        return False
    st.session_state[FORM_STATE_KEY] = history.pop()
    _bump_revision()
    return True


def persist_form(status: str) -> Optional[Path]:
    """Write the edited form with ``status``; publishing requires a clean check."""

    form = builder.update_form(st.session_state[FORM_STATE_KEY], status=status)
    if status == "active":
        issues = validate_definition(form)
        if issues:
            st.error("Fix these issues before publishing:\n\n" + "\n".join(f"- {issue}" for issue in issues))
            return None

    try:
        path = save_local_form(form, SCHEMAS_ROOT)
    except OSError as exc:
        st.error(f"Failed to save form: {exc}")
        return None

    st.session_state[FORM_STATE_KEY] = form
    load_forms.clear()
    return path


def render_form_details(form: FormDefinition) -> None:
    """Edit the form-level fields."""

    st.subheader("Form details")
    title = st.text_input("Title", value=form.title, key=widget_key(f"{form.id}_title"))
    description = st.text_area("Description", value=form.description, key=widget_key(f"{form.id}_description"))
    type_col, category_col = st.columns(2)
    form_type = type_col.selectbox(
        "Type",
        FORM_TYPES,
        index=FORM_TYPES.index(form.form_type),
        format_func=str.title,
        key=widget_key(f"{form.id}_type"),
    )
    categories = list(FORM_CATEGORIES)
    category = category_col.selectbox(
        "Category",
        categories,
        index=categories.index(form.category) if form.category in categories else None,
        placeholder="Select a category",
        key=widget_key(f"{form.id}_category"),
    )
    instructions = st.text_area(
        "Instructions",
        value=form.instructions,
        help="Shown to respondents above the first section.",
        key=widget_key(f"{form.id}_instructions"),
    )

    changes: Dict[str, Any] = {}
    for field, value in (
        ("title", title),
        ("description", description),
        ("form_type", form_type),
        ("category", category or ""),
        ("instructions", instructions),
    ):
        if value != getattr(form, field):
            changes[field] = value
    if changes and apply_change(builder.update_form, **changes):
        _rerun_app()


def render_options(section: Section, question: ChoiceQuestion) -> None:
    base_key = f"{section.id}_{question.id}"
    st.caption("Options")
    for index, option in enumerate(question.options):
        option_col, delete_col = st.columns([5, 1])
        value = option_col.text_input(
            f"Option {index + 1}",
            value=option,
            key=widget_key(f"{base_key}_option_{index}"),
            label_visibility="collapsed",
        )
        if value != option and apply_change(builder.update_option, section.id, question.id, index, value):
            _rerun_app()
        if delete_col.button(
            "✕",
            key=widget_key(f"{base_key}_delete_option_{index}"),
            disabled=len(question.options) <= MIN_OPTIONS,
            help="Remove option",
        ):
            if apply_change(builder.delete_option, section.id, question.id, index):
                _rerun_app()
    if st.button("Add option", key=widget_key(f"{base_key}_add_option")):
        if apply_change(builder.add_option, section.id, question.id):
            _rerun_app()


def _lines(raw: str) -> List[str]:
    return [line.strip() for line in raw.splitlines() if line.strip()]


def render_matrix(section: Section, question: MatrixQuestion) -> None:
    base_key = f"{section.id}_{question.id}"
    rows_col, columns_col = st.columns(2)
    rows_raw = rows_col.text_area(
        "Rows (one per line)",
        value="\n".join(question.rows),
        key=widget_key(f"{base_key}_rows"),
    )
    columns_raw = columns_col.text_area(
        "Columns (one per line, lowest rating first)",
        value="\n".join(question.columns),
        key=widget_key(f"{base_key}_columns"),
    )
    rows = _lines(rows_raw)
    if tuple(rows) != question.rows and apply_change(builder.set_matrix_rows, section.id, question.id, rows):
        _rerun_app()
    columns = _lines(columns_raw)
    if tuple(columns) != question.columns and apply_change(
        builder.set_matrix_columns, section.id, question.id, columns
    ):
        _rerun_app()
    if not question.rows:
        st.info("Add at least one row so respondents can answer this matrix.")


def render_conditional(form: FormDefinition, section: Section, question: Question) -> None:
    """Choose which earlier answer controls whether the question is shown."""

    base_key = f"{section.id}_{question.id}"
    candidates = [other for _, other in form.iter_questions() if other.id != question.id]
    labels = {other.id: other.prompt or other.id for other in candidates}
    choices = [NO_CONDITION] + [other.id for other in candidates]
    current = question.conditional.depends_on if question.conditional else NO_CONDITION
    depends_on = st.selectbox(
        "Show only when",
        choices,
        index=choices.index(current) if current in choices else 0,
        format_func=lambda value: labels.get(value, value),
        key=widget_key(f"{base_key}_depends_on"),
    )
    if depends_on == NO_CONDITION:
        if question.conditional is not None and apply_change(
            builder.set_conditional, section.id, question.id, None
        ):
            _rerun_app()
        return

    equals = st.text_input(
        "equals",
        value="" if question.conditional is None else str(question.conditional.equals),
        key=widget_key(f"{base_key}_equals"),
    )
    if question.conditional != Conditional(depends_on=depends_on, equals=equals):
        if apply_change(builder.set_conditional, section.id, question.id, depends_on, equals):
            _rerun_app()


def render_question_editor(
    form: FormDefinition, section: Section, index: int, question: Question
) -> None:
    """Edit one question with inline move and delete actions."""

    base_key = f"{section.id}_{question.id}"
    header_cols = st.columns([0.5, 4, 0.8, 0.8, 0.8])
    header_cols[0].markdown(f"**{index + 1}**")
    header_cols[1].markdown(f"**{question.prompt or '—'}**\n\n`{question.id}`")
    if header_cols[2].button("▲", key=widget_key(f"{base_key}_up"), disabled=index == 0, help="Move question up"):
        if apply_change(builder.move_question, section.id, question.id, "up"):
            _rerun_app()
    if header_cols[3].button(
        "▼",
        key=widget_key(f"{base_key}_down"),
        disabled=index == len(section.questions) - 1,
        help="Move question down",
    ):
        if apply_change(builder.move_question, section.id, question.id, "down"):
            _rerun_app()
    if header_cols[4].button("🗑", key=widget_key(f"{base_key}_delete"), help="Delete question"):
        if apply_change(builder.delete_question, section.id, question.id):
            _rerun_app()

    prompt = st.text_input("Question", value=question.prompt, key=widget_key(f"{base_key}_prompt"))
    kinds = list(QUESTION_TYPES)
    kind_col, required_col = st.columns([3, 1])
    kind = kind_col.selectbox(
        "Type",
        kinds,
        index=kinds.index(question.kind),
        format_func=lambda value: QUESTION_TYPE_LABELS.get(value, value),
        key=widget_key(f"{base_key}_kind"),
    )
    required = required_col.checkbox("Required", value=question.required, key=widget_key(f"{base_key}_required"))
    help_text = st.text_input("Help text", value=question.help_text or "", key=widget_key(f"{base_key}_help"))

    if kind != question.kind:
        if apply_change(builder.change_question_kind, section.id, question.id, kind):
            _rerun_app()
        return

    changes: Dict[str, Any] = {}
    if prompt != question.prompt:
        changes["prompt"] = prompt
    if required != question.required:
        changes["required"] = required
    if (help_text or None) != question.help_text:
        changes["help_text"] = help_text or None
    if changes and apply_change(builder.update_question, section.id, question.id, **changes):
        _rerun_app()

    if isinstance(question, ChoiceQuestion):
        render_options(section, question)
    elif isinstance(question, MatrixQuestion):
        render_matrix(section, question)
    render_conditional(form, section, question)
    st.divider()


def render_section(form: FormDefinition, position: int, section: Section) -> None:
    label = f"{position + 1}. {section.title or section.id} ({len(section.questions)} questions)"
    with st.expander(label, expanded=position == 0):
        title = st.text_input("Section title", value=section.title, key=widget_key(f"{section.id}_title"))
        description = st.text_area(
            "Section description", value=section.description, key=widget_key(f"{section.id}_description")
        )
        if (title, description) != (section.title, section.description):
            if apply_change(builder.update_section, section.id, title=title, description=description):
                _rerun_app()

        for index, question in enumerate(section.questions):
            render_question_editor(form, section, index, question)

        add_col, delete_col = st.columns(2)
        if add_col.button("Add question", key=widget_key(f"{section.id}_add_question"), use_container_width=True):
            if apply_change(builder.add_question, section.id):
                _rerun_app()
        if delete_col.button("Delete section", key=widget_key(f"{section.id}_delete"), use_container_width=True):
            if apply_change(builder.delete_section, section.id):
                _rerun_app()


def render_toolbar() -> None:
    undo_col, draft_col, publish_col = st.columns(3)
    history = st.session_state.get(HISTORY_STATE_KEY) or []
    if undo_col.button("Undo", disabled=not history, use_container_width=True):
        if undo():
            _rerun_app()
    if draft_col.button("Save draft", use_container_width=True):
        path = persist_form("draft")
        if path is not None:
            st.session_state[NOTICE_STATE_KEY] = f"Draft saved to `{path}`."
            _rerun_app()
    if publish_col.button("Publish", type="primary", use_container_width=True):
        path = persist_form("active")
        if path is not None:
            st.session_state[NOTICE_STATE_KEY] = f"Form published to `{path}`."
            _rerun_app()


def main() -> None:
    """Render the form builder."""

    apply_app_theme(page_title="Form builder", page_icon="🛠️")
    page_header("Form builder", "Design sections and questions for a form.", icon="🛠️")
    require_authentication()

    forms = load_forms()
    choices = ["__new__"] + list(forms)
    selected = st.session_state.get(BUILDER_SELECTED_STATE_KEY)
    picked = st.selectbox(
        "Edit form",
        choices,
        index=choices.index(selected) if selected in choices else 0,
        format_func=lambda value: "New form" if value == "__new__" else forms[value].title,
    )
    if picked == "__new__" and selected in forms:
        st.session_state[BUILDER_SELECTED_STATE_KEY] = None
        st.session_state.pop(FORM_STATE_KEY, None)
    elif picked != "__new__" and picked != selected:
        st.session_state[BUILDER_SELECTED_STATE_KEY] = picked

    notice = st.session_state.pop(NOTICE_STATE_KEY, None)
    if notice:
        st.success(notice)

    form = get_form()
    st.caption(f"Form ID `{form.id}` · {form.status.title()}")
    render_form_details(form)

    st.subheader("Sections")
    for position, section in enumerate(form.sections):
        render_section(form, position, section)
    if st.button("Add section"):
        if apply_change(builder.add_section):
            _rerun_app()

    st.divider()
    render_toolbar()


if __name__ == "__main__":
    main()
