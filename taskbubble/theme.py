import os

import streamlit as st

THEME_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "assets", "taskbubble.css")


def set_theme(
    page_title: str = "TaskBubble",
    page_icon: str = "🫧",
    layout: str = "wide",
    initial_sidebar_state: str = "expanded",
):
    """Configure the Streamlit page and inject the board CSS.

    Safe to call at the top of every page: Streamlit only honours the first
    set_page_config per run, the CSS is injected each time.
    """
    try:
        st.set_page_config(
            page_title=page_title,
            page_icon=page_icon,
            layout=layout,
            initial_sidebar_state=initial_sidebar_state,
        )
    except Exception:
        # set_page_config can only be called once; ignore if already set.
        pass

    try:
        with open(THEME_FILE, "r", encoding="utf-8") as f:
            st.markdown(f"<style>{f.read()}</style>", unsafe_allow_html=True)
    except FileNotFoundError:
        st.error(f"Theme file not found at {THEME_FILE}.")
