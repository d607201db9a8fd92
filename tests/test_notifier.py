from common.ui import TOAST_KEY, Notifier, render_toast


class Clock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_newer_toast_replaces_older():
    store, clock = {}, Clock()
    n = Notifier(store, duration=3.0, clock=clock)
    n.success("Saved.")
    n.error("Delete failed.")
    toast = n.current()
    assert (toast.message, toast.kind) == ("Delete failed.", "error")


def test_toast_expires():
    store, clock = {}, Clock()
    n = Notifier(store, duration=3.0, clock=clock)
    n.info("Link copied.")
    clock.now += 2.9
    assert n.current() is not None
    clock.now += 0.2
    assert n.current() is None
    assert TOAST_KEY not in store


def test_render_toast_shows_each_toast_once():
    shown = []

    def toaster(msg, icon=None):
        shown.append((msg, icon))

    store = {}
    n = Notifier(store, clock=Clock())
    render_toast(n, toaster)
    assert shown == []

    n.error("Export failed.")
    render_toast(n, toaster)
    assert shown == [("Export failed.", "⚠️")]
    assert TOAST_KEY not in store

    render_toast(n, toaster)
    assert len(shown) == 1


def test_expired_toast_is_never_shown():
    shown, clock = [], Clock()
    n = Notifier({}, duration=3.0, clock=clock)
    n.success("Saved.")
    clock.now += 5
    render_toast(n, lambda msg, icon=None: shown.append(msg))
    assert shown == []
