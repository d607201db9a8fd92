"""
Match report page.

Shows one match (selected by `reportId`), lets anyone copy the deep link or
download the report as a JPG, and lets admins edit or delete the match.
"""

from urllib.parse import urljoin

import streamlit as st

from common.errors import DataFetchError, ExportError
from common.navigation import Edit, GoToList, OpenPlayerStats
from common.report_canvas import ReportCanvas
from common.snapshot import SnapshotExporter
from controllers.data_controller import delete_matches, load_record
from models.match_model import MatchRecord
from views.context import AppContext

OUTCOME_BADGES = {"win": ("VICTORY", "green"), "draw": ("DRAW", "gray"), "loss": ("DEFEAT", "red")}
EXPORT_KEY = "report_export"


def _export(ctx: AppContext, match: MatchRecord) -> None:
    exporter = SnapshotExporter(page_url=ctx.nav.current_url)
    try:
        with st.spinner("Generating JPG..."):
            result = exporter.export(ReportCanvas(match), match)
    except ExportError:
        ctx.toast.error("JPG export failed. Please use a screenshot instead.")
        return
    st.session_state[EXPORT_KEY] = (match.id, result)
    ctx.toast.success("JPG report is ready.")


def _actions(ctx: AppContext, match: MatchRecord) -> None:
    cols = st.columns(5 if ctx.session.is_authenticated() else 3)
    if cols[0].button("← Back to records"):
        ctx.go(GoToList())
    if cols[1].button("🔗 Copy link"):
        st.session_state["show_share"] = match.id
        ctx.toast.success("Report link is ready to copy.")
    if cols[2].button("🖼️ Make JPG"):
        _export(ctx, match)
    if ctx.session.is_authenticated():
        if cols[3].button("✏️ Edit"):
            ctx.go(Edit(match))
        if cols[4].button("🗑️ Delete"):
            st.session_state["confirm_delete"] = match.id

    if st.session_state.get("show_share") == match.id:
        st.code(ctx.nav.share_url(), language=None)

    ready = st.session_state.get(EXPORT_KEY)
    if ready and ready[0] == match.id:
        result = ready[1]
        st.download_button("⬇️ Download JPG", data=result.data, file_name=result.file_name, mime=result.mime)

    if st.session_state.get("confirm_delete") == match.id:
        st.warning("Delete this match permanently?")
        yes, no = st.columns(2)
        if yes.button("Yes, delete", type="primary"):
            st.session_state.pop("confirm_delete", None)
            try:
                delete_matches(ctx.store, [match.id])
            except DataFetchError:
                ctx.toast.error("Deleting the match failed.")
                return
            ctx.toast.success("Match deleted.")
            ctx.go(GoToList())
        if no.button("Cancel"):
            st.session_state.pop("confirm_delete", None)


def render(ctx: AppContext) -> None:
    match_id = ctx.nav.state.match_id
    try:
        with st.spinner("Loading match..."):
            match = ctx.nav.guarded(match_id, lambda: load_record(ctx.store, match_id))
    except DataFetchError as exc:
        ctx.toast.error(str(exc))
        st.warning("The match could not be loaded.")
        return
    if match is None:
        st.info("Match not found.")
        if st.button("← Back to records"):
            ctx.go(GoToList())
        return

    _actions(ctx, match)

    label, color = OUTCOME_BADGES[match.outcome]
    st.markdown(f"#### :{color}[{label}]")
    st.title(f"vs {match.opponent}")
    st.markdown(f"## {match.our_score} : {match.opponent_score}")
    c1, c2, c3 = st.columns(3)
    c1.markdown(f"📅 **{match.date}**")
    c2.markdown(f"📍 **{match.stadium or '—'}**")
    c3.markdown(f"👥 **{match.player_count if match.player_count is not None else '—'}** players")

    st.subheader("Scorers")
    if not match.scorers:
        st.caption("No goals recorded.")
    for i, s in enumerate(match.scorers):
        if st.button(f"⚽ {s.name} × {s.goals}", key=f"scorer_{i}_{s.name}"):
            ctx.go(OpenPlayerStats(s.name))

    if match.image_urls:
        st.subheader("Photos")
        cols = st.columns(3)
        for i, url in enumerate(match.image_urls):
            # stored photo URLs may be relative to the app root
            cols[i % 3].image(urljoin(ctx.nav.current_url, url), use_container_width=True)
