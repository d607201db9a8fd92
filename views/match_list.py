"""
Match records page: search box, stats dashboard and the list of matches.

Admins additionally get per-match delete and a multi-select bulk delete.
"""

import streamlit as st

from common.errors import DataFetchError
from common.navigation import OpenPlayerStats, OpenReport, StartAIEntry, StartNewEntry
from common.search import SearchMode
from common.utils import safe_rerun
from controllers.data_controller import delete_matches, load_records
from controllers.stats_controller import list_view_data
from models.match_model import AggregateStats
from views.context import AppContext

RESULT_ICONS = {"win": "🟢", "draw": "⚪", "loss": "🔴"}
ROW_DELETE_KEY = "confirm_row_delete"


def _confirm_row_delete(ctx: AppContext, match_id: str) -> None:
    st.warning("Delete this match permanently?")
    yes, no = st.columns(2)
    if yes.button("Yes, delete", key=f"del_yes_{match_id}", type="primary"):
        st.session_state.pop(ROW_DELETE_KEY, None)
        try:
            delete_matches(ctx.store, [match_id])
        except DataFetchError as exc:
            ctx.toast.error(str(exc))
        else:
            ctx.toast.success("Match deleted.")
        safe_rerun()
    if no.button("Cancel", key=f"del_no_{match_id}"):
        st.session_state.pop(ROW_DELETE_KEY, None)
        safe_rerun()


def _dashboard(ctx: AppContext, stats: AggregateStats) -> None:
    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Record", f"{stats.wins}W {stats.draws}D {stats.losses}L")
    c2.metric("Goals", stats.total_goals)
    c3.metric("Win rate", f"{stats.win_rate}%")
    c4.metric("Matches", stats.total_matches)
    with c5:
        if stats.top_scorer is None:
            st.metric("Top scorer", "—")
        else:
            st.metric("Top scorer", stats.top_scorer.name, f"{stats.top_scorer.goals} goals", delta_color="off")
            if st.button("Profile", key="top_scorer_profile"):
                ctx.go(OpenPlayerStats(stats.top_scorer.name))


def render(ctx: AppContext) -> None:
    admin = ctx.session.is_authenticated()
    st.header("Match records")

    if admin:
        a, b, _ = st.columns([1, 1, 4])
        if a.button("➕ New entry", use_container_width=True):
            ctx.go(StartNewEntry())
        if b.button("✨ AI entry", use_container_width=True):
            ctx.go(StartAIEntry())

    try:
        with st.spinner("Loading matches..."):
            records = load_records(ctx.store)
    except DataFetchError as exc:
        ctx.toast.error(str(exc))
        st.warning("Match records are unavailable right now.")
        return

    q_col, m_col, v_col = st.columns([3, 2, 2])
    query = q_col.text_input("Search", key="list_query", placeholder="Opponent or scorer (regex allowed)")
    mode = m_col.radio(
        "Search by", [SearchMode.OPPONENT, SearchMode.SCORER], key="list_mode", horizontal=True,
        format_func=lambda m: "Opponent" if m == SearchMode.OPPONENT else "Scorer",
    )
    layout = v_col.radio("View", ["Cards", "Table"], key="list_layout", horizontal=True)

    filtered, stats, table = list_view_data(records, query, mode)
    if stats is None:
        st.info("No matches found.")
        return
    _dashboard(ctx, stats)
    st.divider()

    selected = []
    if layout == "Table":
        st.dataframe(table.drop(columns=["MatchId"]), use_container_width=True, hide_index=True)
        label_to_id = {
            f'{i + 1}. {r["Date"]} vs {r["Opponent"]} ({r["Score"]})': r["MatchId"]
            for i, r in enumerate(table.to_dict(orient="records"))
        }
        pick = st.selectbox("Open report", list(label_to_id.keys()), index=None, placeholder="Choose a match")
        if pick:
            ctx.go(OpenReport(label_to_id[pick]))
        if admin:
            chosen = st.multiselect("Select for deletion", list(label_to_id.keys()), key="bulk_select")
            selected = [label_to_id[c] for c in chosen]
    else:
        for m in filtered:
            with st.container(border=True):
                left, mid, right = st.columns([4, 2, 2])
                left.markdown(
                    f"{RESULT_ICONS[m.outcome]} **vs {m.opponent}** · {m.date}  \n"
                    f"{m.stadium} · scorers: {', '.join(s.name for s in m.scorers) or '—'}"
                )
                mid.markdown(f"### {m.our_score} : {m.opponent_score}")
                if right.button("Report", key=f"open_{m.id}", use_container_width=True):
                    ctx.go(OpenReport(m.id))
                if admin:
                    if right.checkbox("Select", key=f"sel_{m.id}"):
                        selected.append(m.id)
                    if right.button("🗑️ Delete", key=f"del_{m.id}", use_container_width=True):
                        st.session_state[ROW_DELETE_KEY] = m.id
                if admin and st.session_state.get(ROW_DELETE_KEY) == m.id:
                    _confirm_row_delete(ctx, m.id)

    if admin and selected:
        st.warning(f"{len(selected)} match(es) selected.")
        confirm = st.checkbox("I understand this cannot be undone", key="bulk_confirm")
        if st.button("🗑️ Delete selected", disabled=not confirm, type="primary"):
            try:
                delete_matches(ctx.store, selected)
            except DataFetchError as exc:
                ctx.toast.error(str(exc))
            else:
                ctx.toast.success(f"Deleted {len(selected)} match(es).")
            safe_rerun()
