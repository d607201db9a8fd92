"""
Admin session flag for the Streamlit app.

There is a single shared admin password. A successful login sets a flag that
is kept in two places:
    - `st.session_state["authenticated"]` for the current browser session,
    - a long-lived browser cookie (via `extra_streamlit_components`) so the
        admin stays logged in across visits.

Key pieces:
    - `AdminSession`: `is_authenticated()`, `login(secret)`, `logout()`. It
        never renders anything; views call it and the navigator consults
        `is_authenticated()` to gate the authoring views.
    - `admin_session()`: builds an `AdminSession` bound to the real session
        state and cookie component for the current run.

Implementation notes:
    - Cookie operations may fail in some environments (component not yet
        mounted, older component versions). Such failures are logged and the
        flag in session_state still applies for the current session.
    - After logout a temporary `force_logout` flag prevents the very next run
        from logging back in from a cookie the browser has not dropped yet.
"""

# Import libraries
from __future__ import annotations
import hmac
import logging
import os
from datetime import datetime, timedelta
from typing import Any, MutableMapping, Optional

import extra_streamlit_components as stx
import streamlit as st

from common.utils import get_admin_secret

logger = logging.getLogger(__name__)

# ----- Config (env or defaults) -----
COOKIE_NAME  = os.getenv("ADMIN_COOKIE_NAME", "mapo_admin")
COOKIE_DAYS  = int(os.getenv("ADMIN_COOKIE_DAYS", "30"))
COOKIE_VALUE = "true"

# Unique key for the cookie component (must not collide in one run)
CM_KEY = "mapo_cookie_component"

AUTH_KEY         = "authenticated"
FORCE_LOGOUT_KEY = "force_logout"


class AdminSession:
    def __init__(self, state: MutableMapping[str, Any], secret: str, cookies: Optional[Any] = None):
        self.state = state
        self.secret = secret
        self.cookies = cookies
        self._restore_from_cookie()

    def _restore_from_cookie(self) -> None:
        if self.state.get(AUTH_KEY) or self.cookies is None:
            return
        if self.state.pop(FORCE_LOGOUT_KEY, False):
            return
        try:
            value = self.cookies.get(COOKIE_NAME)
        except Exception:
            logger.warning("reading the admin cookie failed", exc_info=True)
            return
        if value == COOKIE_VALUE:
            self.state[AUTH_KEY] = True

    def is_authenticated(self) -> bool:
        return bool(self.state.get(AUTH_KEY))

    def login(self, secret: str) -> bool:
        if not secret or not hmac.compare_digest(str(secret), self.secret):
            return False
        self.state[AUTH_KEY] = True
        if self.cookies is not None:
            try:
                self.cookies.set(
                    COOKIE_NAME,
                    COOKIE_VALUE,
                    expires_at=datetime.now() + timedelta(days=COOKIE_DAYS),
                    key="admin_cookie_set",
                )
            except Exception:
                logger.warning("persisting the admin cookie failed", exc_info=True)
        return True

    def logout(self) -> None:
        self.state.pop(AUTH_KEY, None)
        self.state[FORCE_LOGOUT_KEY] = True
        if self.cookies is not None:
            try:
                self.cookies.delete(COOKIE_NAME, key="admin_cookie_delete")
            except Exception:
                logger.warning("deleting the admin cookie failed", exc_info=True)


def admin_session() -> AdminSession:
    cm = stx.CookieManager(key=CM_KEY)
    return AdminSession(st.session_state, get_admin_secret(), cookies=cm)
