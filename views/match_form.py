"""
Create / edit form for a match record.

The form is pre-filled from the record being edited or from a pending AI
draft. Whatever the source, the submitted values go through
`normalize_draft` and `validate_draft` before anything is saved.
"""

from datetime import date

import pandas as pd
import streamlit as st

from common.constants import ALLOWED_PHOTO_TYPES, MAX_PHOTOS
from common.errors import DataFetchError, ValidationError
from common.navigation import CancelAuthoring, SubmitSuccess
from controllers.data_controller import check_photos, save_match
from models.match_model import MatchDraft, normalize_draft
from views.context import AppContext


def _initial(ctx: AppContext) -> MatchDraft:
    state = ctx.nav.state
    if state.editing is not None:
        return MatchDraft.from_record(state.editing)
    if state.ai_draft is not None:
        return state.ai_draft
    return normalize_draft({})


def _as_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        return date.today()


def render(ctx: AppContext) -> None:
    state = ctx.nav.state
    editing = state.editing
    init = _initial(ctx)
    # Widget keys are scoped per record so switching targets resets the form
    scope = editing.id if editing is not None else ("ai" if state.ai_draft is not None else "new")

    st.header("Edit match" if editing is not None else "New match")
    if state.ai_draft is not None:
        st.info("Pre-filled from the AI analysis. Please check every field before saving.")

    with st.form(f"match_form_{scope}"):
        c1, c2 = st.columns(2)
        opponent = c1.text_input("Opponent *", value=init.opponent)
        stadium = c2.text_input("Stadium *", value=init.stadium)
        c3, c4, c5 = st.columns(3)
        our = c3.number_input("Our score", min_value=0, step=1, value=init.our_score)
        opp = c4.number_input("Opponent score", min_value=0, step=1, value=init.opponent_score)
        players = c5.number_input("Players attended", min_value=0, step=1, value=init.player_count or 0)
        match_date = st.date_input("Date", value=_as_date(init.date))

        st.markdown("**Scorers**")
        scorers_df = st.data_editor(
            pd.DataFrame([s.to_dict() for s in init.scorers], columns=["name", "goals"]),
            num_rows="dynamic",
            use_container_width=True,
            column_config={
                "name": st.column_config.TextColumn("Name"),
                "goals": st.column_config.NumberColumn("Goals", min_value=1, step=1, default=1),
            },
            key=f"scorers_{scope}",
        )

        keep_urls = list(init.image_urls)
        if init.image_urls:
            keep_urls = st.multiselect("Keep photos", list(init.image_urls), default=list(init.image_urls))
        uploads = st.file_uploader(
            f"Add photos (max {MAX_PHOTOS} in total, 5 MB each)",
            type=[t.split("/")[1] for t in ALLOWED_PHOTO_TYPES] + ["jpg"],
            accept_multiple_files=True,
        )

        submitted = st.form_submit_button("💾 Save", type="primary")

    if st.button("Cancel"):
        ctx.go(CancelAuthoring())

    if not submitted:
        return

    files = uploads or []
    try:
        keep = check_photos(len(keep_urls), [(f.name, f.size, f.type) for f in files])
        draft = normalize_draft({
            "opponent": opponent,
            "stadium": stadium,
            "ourScore": our,
            "opponentScore": opp,
            "playerCount": players,
            "date": match_date.isoformat() if match_date else "",
            "scorers": scorers_df.fillna({"name": "", "goals": 1}).to_dict(orient="records"),
            "imageUrls": keep_urls,
        })
        with st.spinner("Saving..."):
            save_match(
                ctx.store, ctx.photos, draft,
                uploads=[(files[i].name, files[i].getvalue(), files[i].type) for i in keep],
                editing_id=editing.id if editing is not None else None,
            )
    except ValidationError as exc:
        for msg in exc.messages:
            st.error(msg)
        return
    except DataFetchError as exc:
        st.error(str(exc))
        return

    ctx.toast.success("Match saved.")
    ctx.go(SubmitSuccess())
