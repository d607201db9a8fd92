"""
Stats glue used by the list and player views: search first, then aggregate.
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from common.metrics import compute_player_stats, compute_team_stats, records_frame
from common.search import SearchMode, filter_records
from models.match_model import AggregateStats, MatchRecord, PlayerStats


def list_view_data(
    records: Sequence[MatchRecord], query: str, mode: SearchMode
) -> Tuple[List[MatchRecord], Optional[AggregateStats], pd.DataFrame]:
    filtered = filter_records(records, query, mode)
    return filtered, compute_team_stats(filtered), records_frame(filtered)


def player_view_data(records: Sequence[MatchRecord], name: str) -> Tuple[PlayerStats, pd.DataFrame]:
    stats = compute_player_stats(records, name)
    table = records_frame(stats.matches)
    table.insert(4, "Goals", [m.goals_for(name) for m in stats.matches])
    return stats, table
