import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from taskbubble import tasks_repo
from taskbubble.config import get_config
from taskbubble.logging_setup import setup_logging
from taskbubble.theme import set_theme

set_theme()

cfg = get_config()
setup_logging(log_dir=cfg.log_dir, console_level=cfg.log_level)

STORE_ERRORS = (SQLAlchemyError, tasks_repo.TaskValidationError)

st.markdown(
    """
    <div class="tb-hero">
      <h1>TaskBubble</h1>
      <p>Your team's work, floating. The sooner something is due, the bigger and warmer its bubble
      and the closer it drifts to the middle of the board.</p>
    </div>
    """,
    unsafe_allow_html=True,
)

try:
    tasks_repo.init_db()
    workspaces = tasks_repo.list_workspaces()
    open_count = sum(
        1
        for ws in workspaces
        for t in tasks_repo.list_workspace_tasks(ws["id"], include_archived=False)
        if t["status"] != "done"
    )
except STORE_ERRORS as exc:
    st.error(f"Could not reach the task store: {exc}")
    if st.button("Retry"):
        st.rerun()
    st.stop()

c1, c2 = st.columns(2)
with c1:
    st.metric("Workspaces", len(workspaces))
with c2:
    st.metric("Open tasks", open_count)

b1, b2 = st.columns(2)
with b1:
    if st.button("Open the board 🫧"):
        st.switch_page("pages/1_Board.py")
with b2:
    if st.button("Open the calendar 📅"):
        st.switch_page("pages/2_Calendar.py")
