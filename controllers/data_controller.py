"""
Data controller helpers that glue the record and photo stores to the views.

This module exposes:
    - `RecordStore` / `PhotoStore`: the interfaces the app consumes,
    - `SqliteRecordStore` / `LocalPhotoStore`: the concrete stores used when
        running the app locally (a SQLite file and a static-files folder),
    - `load_records`, `load_record`, `save_match`, `delete_matches`: wrappers
        used by the views. They catch store failures at the call site and turn
        them into `DataFetchError`, so no raw `sqlite3`/`OSError` ever reaches
        the navigator or the render code.

Records are reloaded in full on every view; there is no client-side cache of
the record set.
"""

from __future__ import annotations
import json
import logging
import sqlite3
import time
import uuid
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple

import pandas as pd
import streamlit as st

from common.constants import ALLOWED_PHOTO_TYPES, DB_PATH, MAX_PHOTO_BYTES, MAX_PHOTOS, PHOTO_BASE_URL, PHOTO_DIR
from common.errors import DataFetchError, ValidationError
from models.match_model import MatchDraft, MatchRecord, validate_draft

logger = logging.getLogger(__name__)

# camelCase field -> column
_COLUMNS = {
    "opponent": "opponent",
    "ourScore": "our_score",
    "opponentScore": "opponent_score",
    "stadium": "stadium",
    "date": "date",
    "scorers": "scorers",
    "playerCount": "player_count",
    "imageUrls": "image_urls",
}
_JSON_FIELDS = ("scorers", "imageUrls")

SCHEMA = """
CREATE TABLE IF NOT EXISTS matches (
    id             TEXT PRIMARY KEY,
    opponent       TEXT NOT NULL,
    our_score      INTEGER NOT NULL,
    opponent_score INTEGER NOT NULL,
    stadium        TEXT NOT NULL DEFAULT '',
    date           TEXT NOT NULL,
    scorers        TEXT NOT NULL DEFAULT '[]',
    player_count   INTEGER,
    image_urls     TEXT NOT NULL DEFAULT '[]',
    created_at     INTEGER NOT NULL,
    updated_at     INTEGER
)
"""


def _now_ms() -> int:
    return int(time.time() * 1000)


class RecordStore(Protocol):
    def list_records(self) -> List[MatchRecord]: ...
    def get(self, match_id: str) -> Optional[MatchRecord]: ...
    def create(self, draft: MatchDraft) -> str: ...
    def update(self, match_id: str, fields: Mapping[str, Any]) -> None: ...
    def delete(self, match_id: str) -> None: ...
    def delete_many(self, match_ids: Iterable[str]) -> None: ...


class PhotoStore(Protocol):
    def upload(self, name: str, data: bytes, mime: str) -> str: ...


# -------------------- SQLite record store --------------------
class SqliteRecordStore:
    def __init__(self, db_path: str = DB_PATH):
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        con = self._connect()
        try:
            with con:
                con.execute(SCHEMA)
        finally:
            con.close()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    @staticmethod
    def _row_to_record(row: Mapping[str, Any]) -> MatchRecord:
        pc, upd = row["player_count"], row["updated_at"]
        return MatchRecord.from_dict({
            "id": row["id"],
            "opponent": row["opponent"],
            "ourScore": row["our_score"],
            "opponentScore": row["opponent_score"],
            "stadium": row["stadium"],
            "date": row["date"],
            "scorers": row["scorers"],
            "playerCount": None if pd.isna(pc) else pc,
            "imageUrls": row["image_urls"],
            "createdAt": row["created_at"],
            "updatedAt": None if pd.isna(upd) else upd,
        })

    def list_records(self) -> List[MatchRecord]:
        """All records, newest match date first; same-day matches in creation order."""
        con = self._connect()
        try:
            df = pd.read_sql_query(
                "SELECT * FROM matches ORDER BY date DESC, created_at ASC, rowid ASC",
                con,
            )
        finally:
            con.close()
        df = df.astype(object)
        return [self._row_to_record(row) for row in df.to_dict(orient="records")]

    def get(self, match_id: str) -> Optional[MatchRecord]:
        con = self._connect()
        con.row_factory = sqlite3.Row
        try:
            row = con.execute("SELECT * FROM matches WHERE id = ?", (match_id,)).fetchone()
        finally:
            con.close()
        return self._row_to_record(dict(row)) if row is not None else None

    def create(self, draft: MatchDraft) -> str:
        match_id = uuid.uuid4().hex[:20]
        fields = draft.to_fields()
        con = self._connect()
        try:
            with con:
                con.execute(
                    "INSERT INTO matches (id, opponent, our_score, opponent_score, stadium, date, "
                    "scorers, player_count, image_urls, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        match_id, fields["opponent"], fields["ourScore"], fields["opponentScore"],
                        fields["stadium"], fields["date"], json.dumps(fields["scorers"], ensure_ascii=False),
                        fields["playerCount"], json.dumps(fields["imageUrls"]), _now_ms(),
                    ),
                )
        finally:
            con.close()
        return match_id

    def update(self, match_id: str, fields: Mapping[str, Any]) -> None:
        sets, values = [], []
        for key, val in fields.items():
            col = _COLUMNS.get(key)
            if col is None:
                continue
            if key in _JSON_FIELDS:
                val = json.dumps(val, ensure_ascii=False)
            sets.append(f"{col} = ?")
            values.append(val)
        sets.append("updated_at = ?")
        values.append(_now_ms())

        con = self._connect()
        try:
            with con:
                cur = con.execute(f"UPDATE matches SET {', '.join(sets)} WHERE id = ?", (*values, match_id))
                if cur.rowcount == 0:
                    raise KeyError(match_id)
        finally:
            con.close()

    def delete(self, match_id: str) -> None:
        con = self._connect()
        try:
            with con:
                con.execute("DELETE FROM matches WHERE id = ?", (match_id,))
        finally:
            con.close()

    def delete_many(self, match_ids: Iterable[str]) -> None:
        """Delete every id in one transaction: all rows go or none do."""
        ids = list(match_ids)
        con = self._connect()
        try:
            with con:
                con.executemany("DELETE FROM matches WHERE id = ?", [(i,) for i in ids])
        finally:
            con.close()


# -------------------- Local photo store --------------------
class LocalPhotoStore:
    def __init__(self, directory: str = PHOTO_DIR, base_url: str = PHOTO_BASE_URL):
        self.directory = Path(directory)
        self.base_url = base_url

    def upload(self, name: str, data: bytes, mime: str) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        safe = "_".join(Path(name).name.split())
        file_name = f"{_now_ms()}_{uuid.uuid4().hex[:6]}_{safe}"
        (self.directory / file_name).write_bytes(data)
        return f"{self.base_url.rstrip('/')}/{file_name}"


@st.cache_resource(show_spinner=False)
def get_record_store(db_path: str = DB_PATH) -> SqliteRecordStore:
    return SqliteRecordStore(db_path)


@st.cache_resource(show_spinner=False)
def get_photo_store() -> LocalPhotoStore:
    return LocalPhotoStore()


# -------------------- Call-site wrappers used by the views --------------------
def load_records(store: RecordStore) -> List[MatchRecord]:
    try:
        return store.list_records()
    except (sqlite3.Error, OSError, KeyError, ValueError, TypeError) as exc:
        logger.warning("loading match records failed", exc_info=True)
        raise DataFetchError("Could not load match records.") from exc


def load_record(store: RecordStore, match_id: str) -> Optional[MatchRecord]:
    try:
        return store.get(match_id)
    except (sqlite3.Error, OSError, KeyError, ValueError, TypeError) as exc:
        logger.warning("loading match %s failed", match_id, exc_info=True)
        raise DataFetchError("Could not load the match.") from exc


def check_photos(existing: int, uploads: Sequence[Tuple[str, int, str]]) -> List[int]:
    """
    Indexes of the uploads that may be kept. Each upload is (name, size, mime);
    wrong types and files over the size limit are skipped. Raises
    `ValidationError` when the total would exceed the photo limit.
    """
    keep = [
        i for i, (_, size, mime) in enumerate(uploads)
        if mime in ALLOWED_PHOTO_TYPES and size <= MAX_PHOTO_BYTES
    ]
    if existing + len(keep) > MAX_PHOTOS:
        raise ValidationError([f"At most {MAX_PHOTOS} photos can be kept."])
    return keep


def save_match(
    store: RecordStore,
    photos: PhotoStore,
    draft: MatchDraft,
    uploads: Sequence[Tuple[str, bytes, str]] = (),
    editing_id: Optional[str] = None,
) -> str:
    """
    Validate, upload new photos, then create or update. Returns the match id.
    `ValidationError` propagates untouched so the form can show it inline.
    """
    validate_draft(draft)
    if len(draft.image_urls) + len(uploads) > MAX_PHOTOS:
        raise ValidationError([f"At most {MAX_PHOTOS} photos can be kept."])
    try:
        urls = list(draft.image_urls)
        for name, data, mime in uploads:
            urls.append(photos.upload(name, data, mime))
        final = draft.with_images(urls)
        if editing_id:
            store.update(editing_id, final.to_fields())
            return editing_id
        return store.create(final)
    except (sqlite3.Error, OSError, KeyError, ValueError, TypeError) as exc:
        logger.warning("saving match failed", exc_info=True)
        raise DataFetchError("Saving the match failed.") from exc


def delete_matches(store: RecordStore, match_ids: Sequence[str]) -> None:
    try:
        if len(match_ids) == 1:
            store.delete(match_ids[0])
        else:
            store.delete_many(match_ids)
    except (sqlite3.Error, OSError) as exc:
        logger.warning("deleting %d match(es) failed", len(match_ids), exc_info=True)
        raise DataFetchError("Deleting failed.") from exc
