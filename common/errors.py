"""
Exception types shared by the controllers and views.

Every failure coming out of an external collaborator (record store, photo
store, image fetches, the AI extractor) is converted into one of these at the
call site, so the navigation layer and the views only ever deal with this
small hierarchy.
"""

from __future__ import annotations
from typing import Iterable


class AppError(Exception):
    """Base class for errors the UI knows how to report."""


class DataFetchError(AppError):
    """The record store was unreachable or returned malformed rows."""


class ValidationError(AppError):
    def __init__(self, messages: Iterable[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class ExportError(AppError):
    """Rasterizing or encoding the report snapshot failed."""


class ExtractionError(AppError):
    """The AI extractor failed or returned something that is not JSON."""
