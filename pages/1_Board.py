import time
from datetime import date

import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from taskbubble import tasks_repo
from taskbubble.board_view import build_bubble_figure, task_option_label, tasks_to_df
from taskbubble.bubbles import Frame, FrameLoop, LayoutConfig, LayoutConfigError, LayoutEngine, Viewport, build_visible_items
from taskbubble.config import get_config
from taskbubble.logging_setup import setup_logging
from taskbubble.theme import set_theme

set_theme(page_title="TaskBubble · Board")

cfg = get_config()
setup_logging(log_dir=cfg.log_dir, console_level=cfg.log_level)

STORE_ERRORS = (SQLAlchemyError, tasks_repo.TaskValidationError)


def _fail(message: str) -> None:
    """Show the error with a retry button and stop this run."""
    st.error(message)
    if st.button("Retry", key="tb-retry"):
        st.rerun()
    st.stop()


try:
    layout_cfg = LayoutConfig.from_env()
except LayoutConfigError as exc:
    _fail(f"Invalid bubble settings: {exc}")

VIEWPORT = Viewport(cfg.board_width, cfg.board_height)

# ----- Initialize session state -----
if "tb_loops" not in st.session_state:
    st.session_state.tb_loops = {}
if "tb_completing" not in st.session_state:
    st.session_state.tb_completing = {}
if "tb_selected" not in st.session_state:
    st.session_state.tb_selected = None
if "username" not in st.session_state:
    st.session_state.username = "Me"

try:
    tasks_repo.init_db()
    workspaces = tasks_repo.list_workspaces()
    if not workspaces:
        workspaces = [tasks_repo.create_workspace(cfg.default_workspace)]
except STORE_ERRORS as exc:
    _fail(f"Could not load workspaces: {exc}")

# ----- Sidebar: workspace picker -----
with st.sidebar:
    st.text_input("You are", key="username")
    ws_by_id = {w["id"]: w for w in workspaces}
    # Widgets below cannot set the selectbox key directly once it exists.
    pending_ws = st.session_state.pop("tb_workspace_next", None)
    if pending_ws in ws_by_id:
        st.session_state.tb_workspace = pending_ws
    if st.session_state.get("tb_workspace") not in ws_by_id:
        st.session_state.tb_workspace = workspaces[0]["id"]
    st.selectbox(
        "Workspace",
        options=list(ws_by_id),
        format_func=lambda wid: ws_by_id[wid]["name"],
        key="tb_workspace",
    )
    with st.expander("New / join workspace"):
        new_name = st.text_input("Name", key="tb_new_ws")
        if st.button("Create workspace") and new_name.strip():
            try:
                created = tasks_repo.create_workspace(new_name)
            except STORE_ERRORS as exc:
                st.error(str(exc))
            else:
                st.session_state.tb_workspace_next = created["id"]
                st.rerun()
        code = st.text_input("Join code", key="tb_join_code")
        if st.button("Join") and code.strip():
            try:
                found = tasks_repo.find_workspace_by_join_code(code)
            except STORE_ERRORS as exc:
                st.error(f"Could not look up the join code: {exc}")
            else:
                if found:
                    st.session_state.tb_workspace_next = found["id"]
                    st.rerun()
                else:
                    st.warning("No workspace with that code.")
    animate = st.toggle("Animate bubbles", value=cfg.animate)
    resettle = st.button("Re-settle bubbles", help="Drop the current motion and respawn every bubble at its slot")

workspace = ws_by_id[st.session_state.tb_workspace]
workspace_id = workspace["id"]

try:
    st.session_state.tb_tasks = tasks_repo.list_workspace_tasks(workspace_id)
except STORE_ERRORS as exc:
    _fail(f"Could not load tasks: {exc}")


def _get_loop(ws_id: str) -> FrameLoop:
    loops = st.session_state.tb_loops
    loop = loops.get(ws_id)
    if loop is None:
        engine = LayoutEngine(layout_cfg, context=ws_id)
        loop = FrameLoop(engine, lambda: VIEWPORT, max_substeps=max(layout_cfg.max_substeps, 4))
        loops[ws_id] = loop
    return loop


# Only the board in view keeps ticking; the others resume where they left off.
for wid in [w for w in st.session_state.tb_loops if w not in ws_by_id]:
    st.session_state.tb_loops.pop(wid).engine.reset()
for wid, other in st.session_state.tb_loops.items():
    if wid != workspace_id:
        other.pause()
current_loop = _get_loop(workspace_id)
if resettle:
    current_loop.engine.reset()
if animate:
    current_loop.resume()
else:
    current_loop.pause()


def _completing_ids() -> set:
    now = time.monotonic()
    pending = st.session_state.tb_completing
    for tid in [t for t, deadline in pending.items() if deadline <= now]:
        del pending[tid]
    return set(pending)


# ----- Layout -----
st.markdown(f'<div class="tb-board-title">Workspace · join code {workspace["join_code"]}</div>', unsafe_allow_html=True)
st.title(workspace["name"])

board_col, side_col = st.columns([3, 1.2])


@st.fragment(run_every=cfg.refresh_seconds)
def bubble_board(ws_id: str):
    completing = _completing_ids()
    items = build_visible_items(st.session_state.tb_tasks, date.today(), layout_cfg, completing)
    loop = _get_loop(ws_id)
    if items != loop.engine.items:
        loop.update_items(items)
    frame = loop.tick()
    if frame is None:
        # Paused: show where the bubbles stopped.
        frame = Frame(positions=loop.engine.positions())

    fig = build_bubble_figure(
        items,
        frame,
        VIEWPORT,
        selected_id=st.session_state.tb_selected,
        completing=completing,
    )
    st.plotly_chart(fig, use_container_width=False, config={"displayModeBar": False}, key=f"tb-board-{ws_id}")
    if not items:
        st.markdown('<div class="tb-empty"><b>No tasks yet</b><br>Create a task and watch it float.</div>', unsafe_allow_html=True)


with board_col:
    board_tab, table_tab = st.tabs(["🫧 Board", "📋 Table"])
    with board_tab:
        bubble_board(workspace_id)
    with table_tab:
        st.dataframe(tasks_to_df(st.session_state.tb_tasks, date.today(), layout_cfg), use_container_width=True, hide_index=True)

with side_col:
    tasks_by_id = {t["id"]: t for t in st.session_state.tb_tasks}
    visible = [t for t in st.session_state.tb_tasks if t["status"] not in ("done", "archived")]

    st.markdown('<div class="tb-side-card"><div class="tb-side-title">Details</div>', unsafe_allow_html=True)
    options = [None] + [t["id"] for t in visible]
    pending_task = st.session_state.pop("tb_selected_next", None)
    if pending_task in options:
        st.session_state.tb_selected = pending_task
    if st.session_state.tb_selected not in options:
        st.session_state.tb_selected = None
    st.selectbox(
        "Task",
        options=options,
        format_func=lambda tid: task_option_label(tasks_by_id.get(tid)),
        key="tb_selected",
        help="Hover a bubble to see its title, then pick it here.",
    )
    selected = tasks_by_id.get(st.session_state.tb_selected)
    if selected:
        due_text = "ASAP" if selected["is_asap"] else f"Due {selected['due_date']}"
        st.markdown(f"**{selected['title']}**  \n<span class='tb-muted'>{due_text}</span>", unsafe_allow_html=True)
        meta = [v for v in (selected.get("company"), selected.get("responsible")) if v]
        if meta:
            st.caption(" · ".join(meta))
        st.write(selected["description"] or "—")
        b1, b2 = st.columns(2)
        with b1:
            if st.button("✔ Done", key="tb-done"):
                try:
                    tasks_repo.update_task_status(selected["id"], "done", by=st.session_state.username)
                except STORE_ERRORS as exc:
                    st.error(str(exc))
                else:
                    st.session_state.tb_completing[selected["id"]] = time.monotonic() + cfg.completion_linger_seconds
                    st.toast("Nice work!", icon="✅")
                    st.rerun()
        with b2:
            if st.button("🗑 Delete", key="tb-delete"):
                try:
                    tasks_repo.delete_task(selected["id"])
                except STORE_ERRORS as exc:
                    st.error(str(exc))
                else:
                    st.rerun()
    st.markdown("</div>", unsafe_allow_html=True)

    st.markdown('<div class="tb-side-card"><div class="tb-side-title">Create a task</div>', unsafe_allow_html=True)
    with st.form("tb-create", clear_on_submit=True):
        title = st.text_input("Title", placeholder="Ship the new landing page")
        asap = st.checkbox("ASAP")
        due = st.date_input("Due date", value=date.today())
        company = st.text_input("Company (optional)")
        responsible = st.text_input("Responsible (optional)")
        description = st.text_area("Description", height=100)
        submitted = st.form_submit_button("Add bubble")
    if submitted:
        try:
            tasks_repo.create_task(
                workspace_id,
                title=title,
                description=description,
                due_date=None if asap else due,
                is_asap=asap,
                created_by=st.session_state.username,
                company=company,
                responsible=responsible,
            )
        except STORE_ERRORS as exc:
            st.error(str(exc))
        else:
            st.rerun()
    st.markdown("</div>", unsafe_allow_html=True)

    done_tasks = [t for t in st.session_state.tb_tasks if t["status"] == "done"]
    if done_tasks:
        with st.expander(f"Completed ({len(done_tasks)})"):
            for t in done_tasks:
                c1, c2 = st.columns([3, 1])
                c1.write(t["title"])
                if c2.button("↺", key=f"tb-reopen-{t['id']}", help="Reopen"):
                    try:
                        tasks_repo.update_task_status(t["id"], "open", by=st.session_state.username)
                    except STORE_ERRORS as exc:
                        st.error(str(exc))
                    else:
                        st.rerun()
