"""
Landing page: team summary over every recorded match and the two ways in
(browse the records, or log in as admin).
"""

import streamlit as st

from common.constants import TEAM_NAME
from common.errors import DataFetchError
from common.metrics import compute_team_stats
from common.navigation import GoToList, RequestLogin
from controllers.data_controller import load_records
from views.context import AppContext


def render(ctx: AppContext) -> None:
    st.title(f"🏆 {TEAM_NAME}")
    st.caption("Official match records of the club. Results, scorers and reports in one place.")

    try:
        stats = compute_team_stats(load_records(ctx.store))
    except DataFetchError as exc:
        ctx.toast.error(str(exc))
        stats = None

    if stats is not None:
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Matches", stats.total_matches)
        c2.metric("Record", f"{stats.wins}W {stats.draws}D {stats.losses}L")
        c3.metric("Goals", stats.total_goals)
        c4.metric("Win rate", f"{stats.win_rate}%")

    left, right = st.columns(2)
    if left.button("Browse match records", type="primary", use_container_width=True):
        ctx.go(GoToList())
    if not ctx.session.is_authenticated() and right.button("Admin login", use_container_width=True):
        ctx.go(RequestLogin())
