"""Streamlit entrypoint delegating to the Home page."""

import logging
from importlib import import_module

import streamlit as st

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def main() -> None:
    """Render the Home page when the app entrypoint is loaded."""

    try:
        home_module = import_module("Home")
    except ModuleNotFoundError:
        st.error("Home page module not found.")
        return

    home_module.main()


if __name__ == "__main__":
    main()
