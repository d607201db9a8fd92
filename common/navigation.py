"""
View navigation state machine.

The app shows exactly one view at a time. Which one, and the selection it is
showing (a match id, a player name, or the record being edited), is held in a
single immutable `ViewState` value. Navigation is a pure reducer:

    reduce(state, event, authenticated) -> new state

The reducer never touches the address bar. Keeping the URL in sync is a
separate step (`url_effect` + `state_to_query`) that the navigator runs after
the reducer has settled; see `controllers.nav_controller`.

Deep links use two query parameters:
    - `reportId=<id>` opens the match report,
    - `scorer=<percent-encoded name>` opens the player stats page.
When both are present `reportId` wins. Anything unparseable means landing.
"""

from __future__ import annotations
import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import parse_qs, quote, urlencode, urlsplit

from models.match_model import MatchDraft, MatchRecord

logger = logging.getLogger(__name__)

REPORT_PARAM = "reportId"
SCORER_PARAM = "scorer"

NAVIGABLE_SCHEMES = ("http", "https")
_DEFAULT_PORTS = {"http": 80, "https": 443}


class View(str, enum.Enum):
    LANDING = "landing"
    LIST = "list"
    LOGIN = "login"
    AUTHORING_NEW = "authoring_new"
    AUTHORING_AI = "authoring_ai"
    REPORT = "report"
    PLAYER_STATS = "player_stats"


AUTHORING_VIEWS = (View.AUTHORING_NEW, View.AUTHORING_AI)


@dataclass(frozen=True)
class ViewState:
    view: View = View.LANDING
    match_id: Optional[str] = None
    scorer_name: Optional[str] = None
    editing: Optional[MatchRecord] = None
    ai_draft: Optional[MatchDraft] = None

    @property
    def selection(self) -> Any:
        if self.view is View.REPORT:
            return self.match_id
        if self.view is View.PLAYER_STATS:
            return self.scorer_name
        if self.view is View.AUTHORING_NEW:
            return self.editing
        return None


# ---------- Events ----------
@dataclass(frozen=True)
class GoHome:
    pass


@dataclass(frozen=True)
class GoToList:
    pass


@dataclass(frozen=True)
class OpenReport:
    match_id: str


@dataclass(frozen=True)
class OpenPlayerStats:
    name: str


@dataclass(frozen=True)
class RequestLogin:
    pass


@dataclass(frozen=True)
class LoginSuccess:
    pass


@dataclass(frozen=True)
class Logout:
    pass


@dataclass(frozen=True)
class StartNewEntry:
    pass


@dataclass(frozen=True)
class StartAIEntry:
    pass


@dataclass(frozen=True)
class AIDataExtracted:
    draft: MatchDraft


@dataclass(frozen=True)
class Edit:
    record: MatchRecord


@dataclass(frozen=True)
class CancelAuthoring:
    pass


@dataclass(frozen=True)
class SubmitSuccess:
    pass


Event = Union[
    GoHome, GoToList, OpenReport, OpenPlayerStats, RequestLogin, LoginSuccess, Logout,
    StartNewEntry, StartAIEntry, AIDataExtracted, Edit, CancelAuthoring, SubmitSuccess,
]

# Events that enter an authoring view and therefore require the admin flag
_AUTH_GATED = (StartNewEntry, StartAIEntry, AIDataExtracted, Edit)


def reduce(state: ViewState, event: Event, authenticated: bool) -> ViewState:
    """
    Return the state after `event`. A rejected event returns `state` itself
    (the same object), which is how callers tell a no-op from a transition.
    """
    if isinstance(event, _AUTH_GATED) and not authenticated:
        logger.info("rejected %s: not authenticated", type(event).__name__)
        return state

    if isinstance(event, (GoHome, Logout)):
        return ViewState(View.LANDING)
    if isinstance(event, GoToList):
        return ViewState(View.LIST)
    if isinstance(event, OpenReport):
        if not event.match_id:
            return state
        return ViewState(View.REPORT, match_id=str(event.match_id))
    if isinstance(event, OpenPlayerStats):
        if not event.name:
            return state
        return ViewState(View.PLAYER_STATS, scorer_name=str(event.name))
    if isinstance(event, RequestLogin):
        return ViewState(View.LIST) if authenticated else ViewState(View.LOGIN)
    if isinstance(event, LoginSuccess):
        return ViewState(View.LIST) if state.view is View.LOGIN else state
    if isinstance(event, StartNewEntry):
        return ViewState(View.AUTHORING_NEW)
    if isinstance(event, StartAIEntry):
        return ViewState(View.AUTHORING_AI)
    if isinstance(event, AIDataExtracted):
        if state.view is not View.AUTHORING_AI:
            return state
        return ViewState(View.AUTHORING_NEW, ai_draft=event.draft)
    if isinstance(event, Edit):
        return ViewState(View.AUTHORING_NEW, editing=event.record)
    if isinstance(event, CancelAuthoring):
        if state.view not in AUTHORING_VIEWS:
            return state
        if state.view is View.AUTHORING_NEW and state.ai_draft is not None:
            return ViewState(View.AUTHORING_AI)
        return ViewState(View.LIST)
    if isinstance(event, SubmitSuccess):
        return ViewState(View.LIST) if state.view in AUTHORING_VIEWS else state

    logger.warning("unknown navigation event %r", event)
    return state


def resolve_render_view(state: ViewState, authenticated: bool = True) -> View:
    """
    The view to actually draw. Report and player states without a selection,
    and authoring states once the admin flag is gone, fall back to the list.
    """
    if state.view in AUTHORING_VIEWS and not authenticated:
        return View.LIST
    if state.view is View.REPORT and not state.match_id:
        return View.LIST
    if state.view is View.PLAYER_STATS and not state.scorer_name:
        return View.LIST
    return state.view


# ---------- URL codec ----------
class UrlEffect(str, enum.Enum):
    NONE = "none"
    SET = "set"
    CLEAR = "clear"


def url_effect(prev: ViewState, event: Event, nxt: ViewState) -> UrlEffect:
    if nxt is prev:
        return UrlEffect.NONE
    if isinstance(event, (OpenReport, OpenPlayerStats)):
        return UrlEffect.SET
    if isinstance(event, (GoHome, GoToList, SubmitSuccess, Logout)):
        return UrlEffect.CLEAR
    if isinstance(event, CancelAuthoring):
        return UrlEffect.NONE if nxt.view is View.AUTHORING_AI else UrlEffect.CLEAR
    return UrlEffect.NONE


def state_to_query(state: ViewState) -> Dict[str, str]:
    """Query parameters for `state`; an empty dict means a clean URL."""
    if state.view is View.REPORT and state.match_id:
        return {REPORT_PARAM: state.match_id}
    if state.view is View.PLAYER_STATS and state.scorer_name:
        return {SCORER_PARAM: state.scorer_name}
    return {}


def state_to_query_string(state: ViewState) -> str:
    params = state_to_query(state)
    if not params:
        return ""
    return "?" + urlencode(params, quote_via=quote)


def _first_value(val: Any) -> Optional[str]:
    if isinstance(val, (list, tuple)):
        val = val[0] if val else None
    if val is None:
        return None
    s = str(val).strip()
    return s or None


def state_from_query(params: Union[str, Mapping[str, Any], None]) -> ViewState:
    """
    Initial state from the address bar. Accepts a raw query string (with or
    without the leading '?') or a mapping such as `st.query_params`.
    Malformed input is treated like an empty query: landing.
    """
    try:
        if params is None:
            return ViewState(View.LANDING)
        if isinstance(params, str):
            params = parse_qs(params.lstrip("?"), keep_blank_values=False)
        report_id = _first_value(params.get(REPORT_PARAM))
        if report_id:
            return ViewState(View.REPORT, match_id=report_id)
        scorer = _first_value(params.get(SCORER_PARAM))
        if scorer:
            return ViewState(View.PLAYER_STATS, scorer_name=scorer)
    except (AttributeError, TypeError, ValueError, UnicodeError):
        logger.warning("could not parse query parameters %r", params, exc_info=True)
    return ViewState(View.LANDING)


# ---------- URL write guard ----------
def _origin(url: str):
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    port = parts.port or _DEFAULT_PORTS.get(scheme)
    return scheme, host, port


def can_write_url(current_url: str, target_url: str) -> bool:
    """
    True when the address bar may be rewritten from `current_url` to
    `target_url`: both on the same http(s) origin. Sandboxed previews
    (`about:`, `blob:`, `data:`, `file:` or an opaque 'null' origin) fail.
    """
    try:
        cur, tgt = _origin(current_url), _origin(target_url)
    except ValueError:
        return False
    if cur[0] not in NAVIGABLE_SCHEMES or not cur[1] or cur[1] == "null":
        return False
    return cur == tgt
