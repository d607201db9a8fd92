"""Admin login form. A correct password sets the admin flag and opens the match list."""

import streamlit as st

from common.navigation import LoginSuccess
from views.context import AppContext


def render(ctx: AppContext) -> None:
    st.markdown("## Admin login")
    with st.form("login_form", clear_on_submit=False):
        pwd = st.text_input("Password", type="password")
        ok = st.form_submit_button("Login")

    if ok:
        if ctx.session.login(pwd):
            ctx.toast.success("Logged in.")
            ctx.go(LoginSuccess())
        else:
            st.error("Wrong password.")
