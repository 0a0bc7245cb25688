"""Streamlit home screen listing the available feedback forms and surveys."""

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd
import streamlit as st

from campus_forms.definitions import FormDefinition
from campus_forms.form_store import SCHEMAS_ROOT, load_local_forms
from campus_forms.ui_theme import apply_app_theme, page_header

RUNNER_SELECTED_STATE_KEY = "runner_selected_form"
BUILDER_SELECTED_STATE_KEY = "builder_selected_form"
TABLE_COLUMNS = ("Form ID", "Title", "Type", "Category", "Status", "Sections", "Questions")


# ``pages/01_Form.py`` and ``pages/02_Builder.py`` import ``load_forms`` from
# this module.
@st.cache_data(show_spinner=False)
def load_forms() -> Dict[str, FormDefinition]:
    """Load every form definition stored under ``form_schemas``."""

    forms, problems = load_local_forms(SCHEMAS_ROOT)
    for form_id, reason in problems.items():
        st.warning(f"Skipping form '{form_id}': {reason}")
    return forms


def forms_table_rows(forms: Dict[str, FormDefinition]) -> List[Dict[str, Any]]:
    """Return one summary row per form, active forms first."""

    rows = [
        {
            "Form ID": form.id,
            "Title": form.title,
            "Type": form.form_type.title(),
            "Category": form.category or "—",
            "Status": form.status.title(),
            "Sections": len(form.sections),
            "Questions": form.question_count,
        }
        for form in forms.values()
    ]
    rows.sort(key=lambda row: (row["Status"] != "Active", row["Title"].lower()))
    return rows


def _switch_to(page: str, state_key: str, form_id: str) -> None:
    """Open ``page`` with ``form_id`` preselected."""

    st.session_state[state_key] = form_id
    if hasattr(st, "switch_page"):
        st.switch_page(page)
    else:
        st.info("Use the navigation menu to open the page.")


def main() -> None:
    """Render the home screen."""

    apply_app_theme(page_title="Campus forms", page_icon="🎓")
    page_header(
        "Campus forms",
        "Fill in course feedback and student surveys, or design new ones.",
        icon="🎓",
    )

    forms = load_forms()
    if not forms:
        st.info("No forms yet. Open the builder to create the first one.")
        st.page_link("pages/02_Builder.py", label="Open builder", icon="🛠️")
        return

    rows = forms_table_rows(forms)
    table_df = pd.DataFrame(rows, columns=list(TABLE_COLUMNS))
    active_count = int((table_df["Status"] == "Active").sum())

    metric_col1, metric_col2, metric_col3 = st.columns(3)
    metric_col1.metric("Forms", len(table_df))
    metric_col2.metric("Active", active_count)
    metric_col3.metric("Questions", int(table_df["Questions"].sum()))

    st.dataframe(table_df, hide_index=True, use_container_width=True)

    form_ids = [row["Form ID"] for row in rows]
    selected = st.selectbox(
        "Form",
        options=form_ids,
        format_func=lambda form_id: forms[form_id].title,
    )
    open_col, edit_col = st.columns(2)
    with open_col:
        if st.button("Fill in form", type="primary", use_container_width=True):
            _switch_to("pages/01_Form.py", RUNNER_SELECTED_STATE_KEY, selected)
    with edit_col:
        if st.button("Edit in builder", use_container_width=True):
            _switch_to("pages/02_Builder.py", BUILDER_SELECTED_STATE_KEY, selected)


if __name__ == "__main__":
    main()
