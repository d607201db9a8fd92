from common.navigation import GoToList, Logout, OpenPlayerStats, OpenReport, StartNewEntry, View, ViewState
from controllers.nav_controller import STATE_KEY, Navigator


class FakeSession:
    def __init__(self, authenticated=False):
        self.authenticated = authenticated
        self.logouts = 0

    def is_authenticated(self):
        return self.authenticated

    def logout(self):
        self.logouts += 1
        self.authenticated = False


def _nav(params=None, session=None, current="http://localhost:8501/", base=""):
    store = {}
    return Navigator(store, dict(params or {}), session or FakeSession(), current, base_url=base), store


def test_initial_state_comes_from_url():
    nav, store = _nav({"reportId": "abc"})
    assert nav.state == ViewState(View.REPORT, match_id="abc")
    assert store[STATE_KEY] is nav.state


def test_open_report_writes_query_and_list_clears_it():
    nav, _ = _nav()
    nav.dispatch(OpenReport("abc"))
    assert nav.query_params == {"reportId": "abc"}
    assert nav.share_url() == "http://localhost:8501/?reportId=abc"
    nav.dispatch(GoToList())
    assert nav.query_params == {}
    assert nav.render_view is View.LIST


def test_state_survives_rerun_with_unchanged_url():
    nav, store = _nav()
    nav.dispatch(OpenPlayerStats("Kim Min"))
    again = Navigator(store, nav.query_params, nav.session, nav.current_url, base_url="")
    assert again.state == ViewState(View.PLAYER_STATS, scorer_name="Kim Min")


def test_changed_url_rebuilds_state():
    nav, store = _nav()
    nav.dispatch(OpenReport("abc"))
    # browser back button: address bar no longer matches what was written
    again = Navigator(store, {}, nav.session, nav.current_url, base_url="")
    assert again.state == ViewState(View.LANDING)


def test_guard_rejection_keeps_state_change_but_not_url():
    nav, _ = _nav(current="null")
    nav.dispatch(OpenReport("abc"))
    assert nav.state.match_id == "abc"
    assert nav.query_params == {}


def test_query_param_failure_is_logged_not_raised(caplog):
    class Broken(dict):
        def clear(self):
            raise RuntimeError("component not mounted")

    nav = Navigator({}, Broken(), FakeSession(), "http://localhost:8501/", base_url="")
    nav.dispatch(OpenReport("abc"))
    assert nav.state.match_id == "abc"
    assert "address bar update failed" in caplog.text


def test_authoring_rejected_without_admin():
    nav, _ = _nav()
    before = nav.state
    assert nav.dispatch(StartNewEntry()) is before


def test_logout_clears_session():
    session = FakeSession(authenticated=True)
    nav, _ = _nav({"reportId": "abc"}, session=session)
    nav.dispatch(Logout())
    assert session.logouts == 1
    assert nav.state.view is View.LANDING
    assert nav.query_params == {}


def test_stale_result_is_discarded():
    nav, _ = _nav()
    nav.dispatch(OpenReport("a"))

    def slow_load():
        # the user navigated on while the load was in flight
        nav.dispatch(OpenReport("b"))
        return "record a"

    assert nav.guarded("a", slow_load) is None
    assert nav.guarded("b", lambda: "record b") == "record b"


def test_share_url_prefers_base_url():
    nav, _ = _nav(base="https://club.example/app?x=1")
    nav.dispatch(OpenPlayerStats("Kim"))
    assert nav.share_url() == "https://club.example/app?scorer=Kim"
