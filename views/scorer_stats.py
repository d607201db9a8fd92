"""
Player stats page, opened from a scorer link or a `?scorer=<name>` deep link.

Shows career goals, matches scored in, goals per match and tier, then the
scoring matches (each opens its report). Name matching is exact.
"""

import streamlit as st

from common.errors import DataFetchError
from common.navigation import GoToList, OpenReport
from controllers.data_controller import load_records
from controllers.stats_controller import player_view_data
from views.context import AppContext


def render(ctx: AppContext) -> None:
    name = ctx.nav.state.scorer_name
    if st.button("← Back to records"):
        ctx.go(GoToList())

    try:
        records = ctx.nav.guarded(name, lambda: load_records(ctx.store))
    except DataFetchError as exc:
        ctx.toast.error(str(exc))
        st.warning("Player data is unavailable right now.")
        return
    if records is None:
        return

    stats, table = player_view_data(records, name)
    st.header(f"👟 {name}")
    if stats.match_count == 0:
        st.info("No matches found for this player.")
        return

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Goals", stats.total_goals)
    c2.metric("Matches scored in", stats.match_count)
    c3.metric("Goals per match", stats.average_goals)
    c4.metric("Tier", stats.tier)

    st.subheader("Scoring matches")
    st.dataframe(table.drop(columns=["MatchId"]), use_container_width=True, hide_index=True)
    for m in stats.matches:
        if st.button(f"{m.date} vs {m.opponent} · {m.goals_for(name)} goal(s)", key=f"player_match_{m.id}"):
            ctx.go(OpenReport(m.id))
