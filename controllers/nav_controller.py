"""
Navigator: owner of the current `ViewState` and of the address bar sync.

The pure transitions live in `common.navigation`. This module adds the two
side-effecting boundaries around them:

    - URL -> state: on the first run (and whenever the address bar no longer
        matches what we last wrote, e.g. the browser's back button) the state
        is rebuilt from the query string,
    - state -> URL: after the reducer has settled, `dispatch` writes or clears
        the query parameters, guarded by `can_write_url`. A rejected write is
        logged and otherwise ignored.

The state is kept in a session-state mapping (`st.session_state` in the app,
a plain dict in tests) so it survives Streamlit reruns.

It also provides the stale-response guard used by the views: `guarded()`
discards a loader result when the selection it was loaded for is no longer
the one on screen.
"""

from __future__ import annotations
import logging
from typing import Any, Callable, Dict, MutableMapping, Optional, Protocol, TypeVar
from urllib.parse import urlsplit, urlunsplit

from common.constants import APP_BASE_URL
from common.navigation import (
    Event, Logout, UrlEffect, ViewState, View,
    can_write_url, reduce, resolve_render_view, state_from_query,
    state_to_query, state_to_query_string, url_effect,
)

logger = logging.getLogger(__name__)

STATE_KEY = "view_state"
URL_KEY   = "view_state_url"

T = TypeVar("T")


class SessionFlag(Protocol):
    def is_authenticated(self) -> bool: ...
    def logout(self) -> None: ...


def _normalize_params(params: Any) -> Dict[str, str]:
    out: Dict[str, str] = {}
    try:
        for k in list(params.keys()):
            v = params.get(k)
            if isinstance(v, (list, tuple)):
                v = v[0] if v else ""
            out[str(k)] = str(v)
    except (AttributeError, TypeError):
        logger.warning("unreadable query parameters %r", params, exc_info=True)
    return out


def _page_url(url: str) -> str:
    """`url` without query string and fragment."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", "", ""))


class Navigator:
    def __init__(
        self,
        store: MutableMapping[str, Any],
        query_params: MutableMapping[str, Any],
        session: SessionFlag,
        current_url: str,
        base_url: str = APP_BASE_URL,
    ):
        self.store = store
        self.query_params = query_params
        self.session = session
        self.current_url = current_url
        self.base_url = base_url
        self.sync_from_url()

    # ----- state -----
    @property
    def state(self) -> ViewState:
        return self.store[STATE_KEY]

    @state.setter
    def state(self, value: ViewState) -> None:
        self.store[STATE_KEY] = value

    @property
    def render_view(self) -> View:
        return resolve_render_view(self.state, self.session.is_authenticated())

    def sync_from_url(self) -> None:
        """Rebuild the state from the address bar if it changed behind our back."""
        params = _normalize_params(self.query_params)
        if STATE_KEY in self.store and self.store.get(URL_KEY) == params:
            return
        self.state = state_from_query(params)
        self.store[URL_KEY] = params

    def dispatch(self, event: Event) -> ViewState:
        prev = self.state
        nxt = reduce(prev, event, self.session.is_authenticated())
        if isinstance(event, Logout):
            self.session.logout()
        self.state = nxt
        # URL side effects only after the reducer has settled
        self._write_url(url_effect(prev, event, nxt), nxt)
        return nxt

    # ----- state -> URL -----
    def share_url(self, state: Optional[ViewState] = None) -> str:
        state = state or self.state
        return _page_url(self.base_url or self.current_url) + state_to_query_string(state)

    def _write_url(self, effect: UrlEffect, state: ViewState) -> None:
        if effect is UrlEffect.NONE:
            return
        target = state_to_query(state) if effect is UrlEffect.SET else {}
        target_url = self.share_url(state) if effect is UrlEffect.SET else _page_url(self.base_url or self.current_url)
        if not can_write_url(self.current_url, target_url):
            logger.warning("skipped address bar update: %s -> %s", self.current_url, target_url)
            return
        try:
            self.query_params.clear()
            self.query_params.update(target)
        except Exception:
            logger.warning("address bar update failed", exc_info=True)
            return
        self.store[URL_KEY] = dict(target)

    # ----- stale-response guard -----
    def is_current(self, selection: Any) -> bool:
        return self.state.selection == selection

    def guarded(self, selection: Any, loader: Callable[[], T]) -> Optional[T]:
        """
        Run `loader` for `selection` and return its result only if that
        selection is still the one on screen; otherwise discard it.
        """
        result = loader()
        if not self.is_current(selection):
            logger.warning("discarded stale result for %r (now showing %r)", selection, self.state.selection)
            return None
        return result
