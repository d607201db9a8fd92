from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_configure() -> None:
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


@pytest.fixture
def make_match():
    from models.match_model import MatchRecord, Scorer

    def _make(opponent="Yongsan FC", our=1, opp=0, scorers=(), date="2024-05-04", **kwargs):
        return MatchRecord(
            opponent=opponent,
            our_score=our,
            opponent_score=opp,
            stadium=kwargs.pop("stadium", "Mapo Stadium"),
            date=date,
            scorers=tuple(Scorer(n, g) for n, g in scorers),
            **kwargs,
        )

    return _make
