"""Shared look and feel for the Streamlit screens."""

from __future__ import annotations

from html import escape as html_escape
from typing import Any, Optional

import streamlit as st


_THEME_CSS = """
<style>
:root {
    --campus-accent: #1D4ED8;
    --campus-accent-soft: #DBEAFE;
    --campus-surface: #FFFFFF;
    --campus-border: rgba(29, 78, 216, 0.16);
    --campus-text: #0F172A;
    --campus-muted: #475569;
    --campus-error: #DC2626;
}

[data-testid="stAppViewContainer"] {
    background: linear-gradient(180deg, #F1F5F9 0%, #FFFFFF 60%);
}

.block-container {
    padding-top: 2rem;
    padding-bottom: 3rem;
    max-width: 960px;
}

.campus-header {
    display: flex;
    align-items: center;
    gap: 1.25rem;
    padding: 1.5rem 1.75rem;
    background: var(--campus-surface);
    border: 1px solid var(--campus-border);
    border-radius: 1rem;
    margin-bottom: 1.5rem;
}

.campus-header__icon {
    font-size: 2.25rem;
}

.campus-header__title {
    margin: 0;
    font-size: 1.9rem;
    color: var(--campus-text);
}

.campus-header__subtitle {
    margin: 0.25rem 0 0 0;
    color: var(--campus-muted);
}

.campus-question {
    margin-top: 1rem;
    padding: 1rem 1.25rem 0.25rem 1.25rem;
    border-radius: 0.75rem;
    border: 1px solid var(--campus-border);
    background: var(--campus-surface);
}

.campus-question--error {
    border-color: var(--campus-error);
}

.campus-question__title {
    margin: 0;
    font-size: 1.05rem;
    font-weight: 600;
    color: var(--campus-text);
}

.campus-question__title sup {
    color: var(--campus-error);
}

.campus-question__help {
    margin: 0.2rem 0 0 0;
    font-size: 0.9rem;
    color: var(--campus-muted);
}

.campus-error {
    color: var(--campus-error);
    font-size: 0.88rem;
    margin: 0.2rem 0 0.5rem 0;
}

.campus-preview {
    padding: 1rem 1.25rem;
    border-radius: 0.75rem;
    background: var(--campus-accent-soft);
    margin-bottom: 1rem;
}
</style>
"""


def apply_app_theme(page_title: str, page_icon: Optional[str] = None) -> None:
    """Set up page configuration and inject the shared CSS."""

    st.set_page_config(page_title=page_title, page_icon=page_icon, layout="centered")
    st.markdown(_THEME_CSS, unsafe_allow_html=True)


def page_header(
    title: str,
    subtitle: Optional[str] = None,
    icon: Optional[str] = None,
    *,
    container: Optional[Any] = None,
) -> None:
    """Render the page title block."""

    icon_markup = f"<span class='campus-header__icon'>{icon}</span>" if icon else ""
    subtitle_markup = (
        f"<p class='campus-header__subtitle'>{html_escape(subtitle)}</p>" if subtitle else ""
    )
    target = container.markdown if container is not None else st.markdown
    target(
        f"""
        <div class="campus-header">
            {icon_markup}
            <div>
                <h1 class="campus-header__title">{html_escape(title)}</h1>
                {subtitle_markup}
            </div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def question_header(
    prompt: str,
    *,
    required: bool = False,
    help_text: Optional[str] = None,
    has_error: bool = False,
) -> None:
    """Render the prompt, required marker and help text of a question."""

    classes = "campus-question campus-question--error" if has_error else "campus-question"
    marker = "<sup>*</sup>" if required else ""
    help_markup = (
        f"<p class='campus-question__help'>{html_escape(help_text)}</p>" if help_text else ""
    )
    st.markdown(
        f"<div class='{classes}'><p class='campus-question__title'>"
        f"{html_escape(prompt)}{marker}</p>{help_markup}</div>",
        unsafe_allow_html=True,
    )


def field_error(message: Optional[str]) -> None:
    """Render an inline validation message if there is one."""

    if message:
        st.markdown(f"<p class='campus-error'>{html_escape(message)}</p>", unsafe_allow_html=True)
