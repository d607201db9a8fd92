"""
Data model for match records and the statistics derived from them.

`MatchRecord` and `Scorer` mirror the rows kept by the record store. They are
frozen (immutable) so a fetched record set can be passed through the search
and aggregation helpers as a snapshot without accidental modification.

`AggregateStats` and `PlayerStats` are derived values; they are never
persisted and are recomputed from scratch every time the input set changes.

`normalize_draft` / `validate_draft` form the single default + validation
pass used for both manual form entry and AI-extracted payloads:
    - `normalize_draft` accepts any loosely typed mapping (every key optional)
        and returns a typed `MatchDraft` with defaults filled in,
    - `validate_draft` raises `ValidationError` when required fields are
        missing, which blocks the submission.
"""

from __future__ import annotations
import json
import re
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple

from common.constants import MAX_PHOTOS
from common.errors import ValidationError

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class Scorer:
    name: str
    goals: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "goals": self.goals}


@dataclass(frozen=True)
class MatchRecord:
    opponent: str
    our_score: int
    opponent_score: int
    stadium: str
    date: str
    scorers: Tuple[Scorer, ...] = ()
    player_count: Optional[int] = None
    image_urls: Tuple[str, ...] = ()
    created_at: int = 0
    updated_at: Optional[int] = None
    id: Optional[str] = None

    @property
    def outcome(self) -> str:
        if self.our_score > self.opponent_score:
            return "win"
        if self.our_score == self.opponent_score:
            return "draw"
        return "loss"

    def goals_for(self, name: str) -> int:
        """Sum of every scorer entry for `name` in this match (exact match)."""
        return sum(s.goals for s in self.scorers if s.name == name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "opponent": self.opponent,
            "ourScore": self.our_score,
            "opponentScore": self.opponent_score,
            "stadium": self.stadium,
            "date": self.date,
            "scorers": [s.to_dict() for s in self.scorers],
            "playerCount": self.player_count,
            "imageUrls": list(self.image_urls),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MatchRecord":
        """Build a record from a storage row. Raises KeyError/ValueError/TypeError on malformed rows."""
        scorers = data.get("scorers") or []
        if isinstance(scorers, str):
            scorers = json.loads(scorers)
        urls = data.get("imageUrls") or []
        if isinstance(urls, str):
            urls = json.loads(urls)
        pc = data.get("playerCount")
        upd = data.get("updatedAt")
        return cls(
            id=None if data.get("id") is None else str(data["id"]),
            opponent=str(data["opponent"]),
            our_score=int(data["ourScore"]),
            opponent_score=int(data["opponentScore"]),
            stadium=str(data.get("stadium", "") or ""),
            date=str(data["date"]),
            scorers=tuple(Scorer(str(s["name"]), int(s["goals"])) for s in scorers),
            player_count=None if pc is None else int(pc),
            image_urls=tuple(str(u) for u in urls),
            created_at=int(data.get("createdAt") or 0),
            updated_at=None if upd is None else int(upd),
        )


@dataclass(frozen=True)
class MatchDraft:
    """A record not yet persisted: no id and no timestamps."""
    opponent: str = ""
    our_score: int = 0
    opponent_score: int = 0
    stadium: str = ""
    date: str = ""
    scorers: Tuple[Scorer, ...] = ()
    player_count: Optional[int] = None
    image_urls: Tuple[str, ...] = ()

    def with_images(self, urls: List[str]) -> "MatchDraft":
        return replace(self, image_urls=tuple(urls))

    def to_fields(self) -> Dict[str, Any]:
        return {
            "opponent": self.opponent,
            "ourScore": self.our_score,
            "opponentScore": self.opponent_score,
            "stadium": self.stadium,
            "date": self.date,
            "scorers": [s.to_dict() for s in self.scorers],
            "playerCount": self.player_count,
            "imageUrls": list(self.image_urls),
        }

    @classmethod
    def from_record(cls, record: MatchRecord) -> "MatchDraft":
        return cls(
            opponent=record.opponent,
            our_score=record.our_score,
            opponent_score=record.opponent_score,
            stadium=record.stadium,
            date=record.date,
            scorers=record.scorers,
            player_count=record.player_count,
            image_urls=record.image_urls,
        )


@dataclass(frozen=True)
class AggregateStats:
    wins: int
    draws: int
    losses: int
    total_goals: int
    top_scorer: Optional[Scorer]
    win_rate: str
    total_matches: int


@dataclass(frozen=True)
class PlayerStats:
    name: str
    matches: List[MatchRecord] = field(default_factory=list)
    total_goals: int = 0
    average_goals: str = "0.00"
    match_count: int = 0
    tier: str = ""


# ---------- Draft normalization ----------
def _non_negative_int(val: Any, default: int = 0) -> int:
    try:
        n = int(float(val))
    except (TypeError, ValueError):
        return default
    return max(n, 0)


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in data and data[k] is not None:
            return data[k]
    return None


def normalize_draft(data: Optional[Mapping[str, Any]], today: Optional[date] = None) -> MatchDraft:
    """
    Turn a partial, untrusted payload into a `MatchDraft`.

    Accepts both camelCase keys (as produced by the extractor and the store)
    and snake_case keys (as produced by the form). Unknown or invalid values
    fall back to empty string / zero / today's date.
    """
    data = data or {}
    today = today or date.today()

    raw_date = str(_first(data, "date") or "").strip()
    match_date = raw_date if DATE_RE.match(raw_date) else today.isoformat()

    scorers: List[Scorer] = []
    raw_scorers = _first(data, "scorers") or []
    if isinstance(raw_scorers, list):
        for s in raw_scorers:
            if isinstance(s, Scorer):
                name, goals = s.name, s.goals
            elif isinstance(s, Mapping):
                name, goals = s.get("name"), s.get("goals")
            else:
                continue
            name = str(name or "").strip()
            if not name:
                continue
            scorers.append(Scorer(name, max(_non_negative_int(goals, 1), 1)))

    pc = _first(data, "playerCount", "player_count")
    player_count = _non_negative_int(pc) if pc not in (None, "") else None

    urls = _first(data, "imageUrls", "image_urls") or []
    urls = [str(u) for u in urls if u] if isinstance(urls, (list, tuple)) else []

    return MatchDraft(
        opponent=str(_first(data, "opponent") or "").strip(),
        our_score=_non_negative_int(_first(data, "ourScore", "our_score")),
        opponent_score=_non_negative_int(_first(data, "opponentScore", "opponent_score")),
        stadium=str(_first(data, "stadium") or "").strip(),
        date=match_date,
        scorers=tuple(scorers),
        player_count=player_count,
        image_urls=tuple(urls),
    )


def validate_draft(draft: MatchDraft) -> MatchDraft:
    errors = []
    if not draft.opponent or not draft.stadium:
        errors.append("Opponent name and stadium are required.")
    if not DATE_RE.match(draft.date or ""):
        errors.append("Match date must be YYYY-MM-DD.")
    else:
        try:
            date.fromisoformat(draft.date)
        except ValueError:
            errors.append("Match date must be YYYY-MM-DD.")
    if len(draft.image_urls) > MAX_PHOTOS:
        errors.append(f"At most {MAX_PHOTOS} photos can be kept.")
    if any(s.goals < 1 for s in draft.scorers):
        errors.append("Scorer goal counts must be positive.")
    if errors:
        raise ValidationError(errors)
    return draft
