"""
Aggregation helpers that turn a list of match records into team- and
player-level statistics.

This module provides:
    - `compute_team_stats`: win/draw/loss record, goals scored, top scorer and
        win rate over an (already filtered) record set,
    - `compute_player_stats`: one player's career numbers over the records in
        which they scored,
    - pandas helpers that shape the same data into tables for the views.

Function notes:
    - All functions are pure: the input sequence is treated as an immutable
        snapshot and a full fold is done on every call (no incremental state).
    - The top-scorer tie-break relies on `dict` preserving insertion order:
        on equal totals the player seen first in the record sequence wins.
"""

#Import libraries
from __future__ import annotations
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence

import pandas as pd

from common.constants import NOTABLE_GOALS_THRESHOLD
from models.match_model import AggregateStats, MatchRecord, PlayerStats, Scorer

TIER_NOTABLE  = "Elite"
TIER_STANDARD = "Legend"


# ---------- Small helpers ----------
def goals_by_scorer(records: Sequence[MatchRecord]) -> Dict[str, int]:
    """Return {scorer name -> summed goals}, keys in first-seen order."""
    totals: Dict[str, int] = {}
    for m in records:
        for s in m.scorers:
            totals[s.name] = totals.get(s.name, 0) + s.goals
    return totals


def _top_entry(totals: Dict[str, int]) -> Optional[Scorer]:
    # strict '>' keeps the first-seen name on ties
    best: Optional[Scorer] = None
    for name, goals in totals.items():
        if best is None or goals > best.goals:
            best = Scorer(name, goals)
    return best


def to_fixed(value: float, places: int) -> str:
    """Format with `places` decimals, exact halves rounded up (6.25 -> "6.3")."""
    # Decimal(float) is the exact binary value, so 0.1-style inputs are not pushed over a half
    step = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(step, rounding=ROUND_HALF_UP))


def player_tier(total_goals: int, threshold: int = NOTABLE_GOALS_THRESHOLD) -> str:
    return TIER_NOTABLE if total_goals > threshold else TIER_STANDARD


# ---------- Team / player statistics ----------
def compute_team_stats(records: Sequence[MatchRecord]) -> Optional[AggregateStats]:
    """
    Fold a record set into team statistics.

    Returns None for an empty set so callers can render a "no data" state.
    Win rate is wins / total * 100 formatted to one decimal place, halves rounded up.
    """
    if not records:
        return None

    wins = draws = losses = 0
    total_goals = 0
    for m in records:
        outcome = m.outcome
        if outcome == "win":
            wins += 1
        elif outcome == "draw":
            draws += 1
        else:
            losses += 1
        total_goals += m.our_score

    total = len(records)
    return AggregateStats(
        wins=wins,
        draws=draws,
        losses=losses,
        total_goals=total_goals,
        top_scorer=_top_entry(goals_by_scorer(records)),
        win_rate=to_fixed(wins / total * 100, 1),
        total_matches=total,
    )


def compute_player_stats(records: Sequence[MatchRecord], name: str) -> PlayerStats:
    """
    Career numbers for `name` (exact, case-sensitive match on scorer names).

    A player listed more than once on the same match has every entry summed.
    """
    matches = [m for m in records if any(s.name == name for s in m.scorers)]
    total_goals = sum(m.goals_for(name) for m in matches)
    average = to_fixed(total_goals / len(matches), 2) if matches else "0.00"
    return PlayerStats(
        name=name,
        matches=matches,
        total_goals=total_goals,
        average_goals=average,
        match_count=len(matches),
        tier=player_tier(total_goals),
    )


def scorer_leaderboard(records: Sequence[MatchRecord], top_n: int = 5) -> List[Scorer]:
    """Top-N scorers by summed goals; ties keep first-seen order (stable sort)."""
    totals = goals_by_scorer(records)
    ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
    return [Scorer(n, g) for n, g in ranked[:top_n]]


# ---------- Tables for the views ----------
def records_frame(records: Sequence[MatchRecord]) -> pd.DataFrame:
    """Flat table of the records, one row per match, in input order."""
    rows = []
    for m in records:
        rows.append({
            "MatchId": m.id or "",
            "Date": m.date,
            "Opponent": m.opponent,
            "Score": f"{m.our_score} : {m.opponent_score}",
            "Result": m.outcome.upper(),
            "Stadium": m.stadium,
            "Scorers": ", ".join(
                f"{s.name} ({s.goals})" if s.goals > 1 else s.name for s in m.scorers
            ),
            "Players": m.player_count if m.player_count is not None else pd.NA,
        })
    columns = ["MatchId", "Date", "Opponent", "Score", "Result", "Stadium", "Scorers", "Players"]
    return pd.DataFrame(rows, columns=columns)


def outcome_counts_frame(records: Sequence[MatchRecord]) -> pd.DataFrame:
    """Count of wins / draws / losses as a two-column table (Result, Matches)."""
    order = ["win", "draw", "loss"]
    counts = pd.Series([m.outcome for m in records], dtype="object").value_counts()
    counts = counts.reindex(order, fill_value=0)
    return pd.DataFrame({"Result": [o.upper() for o in order], "Matches": counts.astype(int).tolist()})
