"""
Search filter for the match list.

`filter_records` narrows a record set by opponent name or by scorer name.
The query is used as a case-insensitive regular expression so users can type
things like `fc|united`; a query that is not a valid pattern is matched as a
plain substring instead of raising.
"""

from __future__ import annotations
import enum
import logging
import re
from typing import List, Pattern, Sequence

from models.match_model import MatchRecord

logger = logging.getLogger(__name__)


class SearchMode(str, enum.Enum):
    OPPONENT = "opponent"
    SCORER = "scorer"


def compile_query(query: str) -> Pattern[str]:
    q = query.strip()
    try:
        return re.compile(q, flags=re.IGNORECASE)
    except re.error:
        logger.debug("invalid search pattern %r, falling back to literal match", q)
        return re.compile(re.escape(q), flags=re.IGNORECASE)


def filter_records(records: Sequence[MatchRecord], query: str, mode: SearchMode = SearchMode.OPPONENT) -> List[MatchRecord]:
    if not query or not query.strip():
        return list(records)

    rx = compile_query(query)
    mode = SearchMode(mode)
    if mode is SearchMode.OPPONENT:
        return [m for m in records if rx.search(m.opponent)]
    return [m for m in records if any(rx.search(s.name) for s in m.scorers)]
