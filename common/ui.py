# common/ui.py
from __future__ import annotations
import time
from dataclasses import dataclass
from typing import Any, Callable, MutableMapping, Optional

import streamlit as st

from common.constants import TEAM_NAME, TOAST_DURATION_SEC
from common.navigation import GoHome, GoToList, Logout, RequestLogin, StartNewEntry

TOAST_KEY = "toast"


@dataclass(frozen=True)
class Toast:
    message: str
    kind: str
    expires_at: float


class Notifier:
    """
    Single-slot, auto-expiring notification. A newer toast replaces the
    older one; nothing is queued.
    """

    def __init__(self, store: MutableMapping[str, Any], duration: float = TOAST_DURATION_SEC,
                 clock: Callable[[], float] = time.time):
        self.store = store
        self.duration = duration
        self.clock = clock

    def notify(self, message: str, kind: str = "success") -> Toast:
        toast = Toast(message, kind, self.clock() + self.duration)
        self.store[TOAST_KEY] = toast
        return toast

    def success(self, message: str) -> Toast:
        return self.notify(message, "success")

    def error(self, message: str) -> Toast:
        return self.notify(message, "error")

    def info(self, message: str) -> Toast:
        return self.notify(message, "info")

    def take(self) -> Optional[Toast]:
        """Return the live toast and empty the slot; each toast is shown once."""
        toast = self.current()
        self.store.pop(TOAST_KEY, None)
        return toast

    def current(self) -> Optional[Toast]:
        toast = self.store.get(TOAST_KEY)
        if toast is None:
            return None
        if self.clock() >= toast.expires_at:
            self.store.pop(TOAST_KEY, None)
            return None
        return toast


def notifier() -> Notifier:
    return Notifier(st.session_state)


def render_toast(n: Optional[Notifier] = None, toaster: Optional[Callable[..., Any]] = None) -> None:
    """Hand the pending toast, if any, to `st.toast`, which dismisses itself in the browser."""
    toast = (n or notifier()).take()
    if toast is None:
        return
    icon = {"success": "✅", "error": "⚠️"}.get(toast.kind, "ℹ️")
    (toaster or st.toast)(toast.message, icon=icon)


def header(authenticated: bool, on_event: Callable[[Any], None]) -> None:
    """Top navigation: links depend on whether the admin flag is set."""
    st.markdown(
        "<style>[data-testid='stSidebarNav']{display:none !important;}</style>",
        unsafe_allow_html=True,
    )
    left, right = st.columns([3, 2])
    with left:
        st.markdown(f"### ⚽ {TEAM_NAME}")
    with right:
        cols = st.columns(4 if authenticated else 3)
        if cols[0].button("Home", key="nav_home", use_container_width=True):
            on_event(GoHome())
        if cols[1].button("Records", key="nav_list", use_container_width=True):
            on_event(GoToList())
        if authenticated:
            if cols[2].button("New", key="nav_new", use_container_width=True):
                on_event(StartNewEntry())
            if cols[3].button("Logout", key="nav_logout", use_container_width=True):
                on_event(Logout())
        elif cols[2].button("Login", key="nav_login", use_container_width=True):
            on_event(RequestLogin())
    st.divider()
