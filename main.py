"""
Main application entry for the club match records Streamlit app.

This module is the single page users open. It handles:
    - application configuration (`st.set_page_config`),
    - environment variable loading via `python-dotenv` and logging setup,
    - building the admin session, record/photo stores and the navigator
        for the current run,
    - drawing the header and routing to the view chosen by the navigator's
        `ViewState` (see `common.navigation`).

The views live under `views/`; this file only composes them. Which view is
shown is decided exclusively by the navigator, which also keeps the address
bar (`?reportId=...` / `?scorer=...`) in sync so every report and player page
can be shared as a link.

Run with:

    streamlit run main.py
"""

# Import libraries
import streamlit as st
from dotenv import load_dotenv

# Load `.env` before the project modules read their settings at import time
load_dotenv(override=False)

from common.navigation import View
from common.ui import header, notifier, render_toast
from common.utils import configure_logging, current_page_url
from controllers.auth_controller import admin_session
from controllers.data_controller import get_photo_store, get_record_store
from controllers.nav_controller import Navigator
from views import ai_input, home, login, match_form, match_list, match_report, scorer_stats
from views.context import AppContext

st.set_page_config(page_title="Mapo 70s · Match Records", page_icon="⚽", layout="wide")
configure_logging()

RENDERERS = {
    View.LANDING: home.render,
    View.LIST: match_list.render,
    View.LOGIN: login.render,
    View.AUTHORING_NEW: match_form.render,
    View.AUTHORING_AI: ai_input.render,
    View.REPORT: match_report.render,
    View.PLAYER_STATS: scorer_stats.render,
}


def main():
    session = admin_session()
    nav = Navigator(st.session_state, st.query_params, session, current_page_url())
    ctx = AppContext(
        nav=nav,
        session=session,
        store=get_record_store(),
        photos=get_photo_store(),
        toast=notifier(),
    )

    header(session.is_authenticated(), ctx.go)
    RENDERERS[nav.render_view](ctx)
    render_toast(ctx.toast)


if __name__ == "__main__":
    main()
