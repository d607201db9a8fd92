"""Per-run bundle of navigator, admin session, stores and notifier handed to every view."""

from __future__ import annotations
from dataclasses import dataclass

from common.navigation import Event
from common.ui import Notifier
from common.utils import safe_rerun
from controllers.auth_controller import AdminSession
from controllers.data_controller import PhotoStore, RecordStore
from controllers.nav_controller import Navigator


@dataclass
class AppContext:
    """Everything a view needs for one script run."""
    nav: Navigator
    session: AdminSession
    store: RecordStore
    photos: PhotoStore
    toast: Notifier

    def go(self, event: Event) -> None:
        """Dispatch a navigation event and redraw with the new view."""
        self.nav.dispatch(event)
        safe_rerun()
