from controllers.auth_controller import AUTH_KEY, COOKIE_NAME, COOKIE_VALUE, AdminSession


class FakeCookies:
    def __init__(self, jar=None, broken=False):
        self.jar = dict(jar or {})
        self.broken = broken

    def get(self, name):
        if self.broken:
            raise RuntimeError("component not mounted")
        return self.jar.get(name)

    def set(self, name, value, expires_at=None, key=None):
        if self.broken:
            raise RuntimeError("component not mounted")
        self.jar[name] = value

    def delete(self, name, key=None):
        if self.broken:
            raise RuntimeError("component not mounted")
        self.jar.pop(name, None)


def test_login_with_wrong_password_fails():
    session = AdminSession({}, "secret", FakeCookies())
    assert session.login("nope") is False
    assert session.login("") is False
    assert not session.is_authenticated()


def test_login_sets_flag_and_cookie():
    state, cookies = {}, FakeCookies()
    session = AdminSession(state, "secret", cookies)
    assert session.login("secret") is True
    assert state[AUTH_KEY] is True
    assert cookies.jar[COOKIE_NAME] == COOKIE_VALUE


def test_cookie_restores_session():
    session = AdminSession({}, "secret", FakeCookies({COOKIE_NAME: COOKIE_VALUE}))
    assert session.is_authenticated()


def test_logout_is_not_undone_by_stale_cookie():
    state = {}
    session = AdminSession(state, "secret", FakeCookies())
    session.login("secret")
    session.logout()
    assert not session.is_authenticated()
    # next run: the browser still sends the old cookie once
    stale = AdminSession(state, "secret", FakeCookies({COOKIE_NAME: COOKIE_VALUE}))
    assert not stale.is_authenticated()


def test_cookie_failures_do_not_break_login():
    session = AdminSession({}, "secret", FakeCookies(broken=True))
    assert session.login("secret") is True
    assert session.is_authenticated()
    session.logout()
    assert not session.is_authenticated()
