import html
from datetime import date

import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from taskbubble import tasks_repo
from taskbubble.calendar_view import (
    STATUS_LABELS,
    asap_tasks,
    calendar_tasks,
    month_grid,
    month_title,
    shift_month,
    tasks_by_date,
    weeks,
)
from taskbubble.config import get_config
from taskbubble.logging_setup import setup_logging
from taskbubble.theme import set_theme

set_theme(page_title="TaskBubble · Calendar")

cfg = get_config()
setup_logging(log_dir=cfg.log_dir, console_level=cfg.log_level)

STORE_ERRORS = (SQLAlchemyError, tasks_repo.TaskValidationError)
WEEKDAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

# ----- Initialize session state -----
today = date.today()
if "tb_cal_month" not in st.session_state:
    st.session_state.tb_cal_month = (today.year, today.month)
if "tb_cal_task" not in st.session_state:
    st.session_state.tb_cal_task = None

try:
    tasks_repo.init_db()
    workspaces = tasks_repo.list_workspaces()
    tasks = calendar_tasks(workspaces, tasks_repo.list_workspace_tasks)
except STORE_ERRORS as exc:
    st.error(f"Could not load the calendar: {exc}")
    if st.button("Retry", key="tb-cal-retry"):
        st.rerun()
    st.stop()

by_date = tasks_by_date(tasks)
asap = asap_tasks(tasks)
tasks_by_id = {t["id"]: t for t in tasks}

year, month = st.session_state.tb_cal_month

# ----- Header -----
head, nav = st.columns([3, 2])
with head:
    st.title(month_title(year, month))
    st.caption(f"{len(tasks)} tasks · {len(asap)} ASAP")
with nav:
    n1, n2, n3 = st.columns(3)
    if n1.button("‹ Prev", use_container_width=True):
        st.session_state.tb_cal_month = shift_month(year, month, -1)
        st.rerun()
    if n2.button("Today", use_container_width=True):
        st.session_state.tb_cal_month = (today.year, today.month)
        st.rerun()
    if n3.button("Next ›", use_container_width=True):
        st.session_state.tb_cal_month = shift_month(year, month, 1)
        st.rerun()

grid_col, side_col = st.columns([3, 1.2])

with grid_col:
    if asap:
        st.markdown("**ASAP**")
        lane = st.columns(min(len(asap), 4))
        for i, t in enumerate(asap):
            if lane[i % len(lane)].button(f"⚡ {t['title']}", key=f"tb-cal-asap-{t['id']}"):
                st.session_state.tb_cal_task = t["id"]

    header = st.columns(7)
    for col, name in zip(header, WEEKDAYS):
        col.markdown(f'<div class="tb-cal-head">{name}</div>', unsafe_allow_html=True)

    for week in weeks(month_grid(year, month, today)):
        cols = st.columns(7)
        for col, day in zip(cols, week):
            with col:
                cls = "tb-cal-day" + ("" if day.in_month else " other") + (" today" if day.is_today else "")
                st.markdown(f'<span class="{cls}">{day.day}</span>', unsafe_allow_html=True)
                for t in by_date.get(day.date, []):
                    done = " done" if t["status"] == "done" else ""
                    title = html.escape(t["title"])
                    tip = html.escape(f"{t['title']} ({t['workspace_name']})")
                    st.markdown(f'<div class="tb-cal-task{done}" title="{tip}">{title}</div>', unsafe_allow_html=True)

with side_col:
    st.markdown('<div class="tb-side-card"><div class="tb-side-title">Task</div>', unsafe_allow_html=True)
    month_ids = [t["id"] for d in month_grid(year, month, today) for t in by_date.get(d.date, [])]
    options = [None] + list(dict.fromkeys([t["id"] for t in asap] + month_ids))
    if st.session_state.tb_cal_task not in options:
        st.session_state.tb_cal_task = None
    st.selectbox(
        "Task",
        options=options,
        format_func=lambda tid: "Pick a task…" if tid is None else tasks_by_id[tid]["title"],
        key="tb_cal_task",
        label_visibility="collapsed",
    )
    selected = tasks_by_id.get(st.session_state.tb_cal_task)
    if selected:
        due_text = "ASAP" if selected["is_asap"] or not selected["due_date"] else f"Due {selected['due_date']}"
        meta = [due_text, selected["workspace_name"]] + [v for v in (selected.get("company"), selected.get("responsible")) if v]
        st.markdown(f"**{selected['title']}**")
        st.caption(" · ".join(meta))
        st.write(STATUS_LABELS.get(selected["status"], selected["status"]))
        if st.button("Open in workspace", type="primary"):
            st.session_state.tb_workspace_next = selected["workspace_id"]
            st.session_state.tb_selected_next = selected["id"]
            st.switch_page("pages/1_Board.py")
    st.markdown("</div>", unsafe_allow_html=True)
