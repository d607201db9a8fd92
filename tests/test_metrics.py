import pandas as pd

from common.metrics import (
    TIER_NOTABLE, TIER_STANDARD, compute_player_stats, compute_team_stats,
    outcome_counts_frame, records_frame, scorer_leaderboard,
)


def test_empty_record_set_has_no_stats():
    assert compute_team_stats([]) is None


def test_three_way_scenario(make_match):
    records = [make_match(our=2, opp=1), make_match(our=0, opp=0), make_match(our=1, opp=3)]
    stats = compute_team_stats(records)
    assert (stats.wins, stats.draws, stats.losses) == (1, 1, 1)
    assert stats.total_goals == 3
    assert stats.win_rate == "33.3"
    assert stats.total_matches == 3


def test_outcomes_always_sum_to_total(make_match):
    scores = [(3, 0), (1, 1), (0, 2), (4, 4), (2, 1), (0, 0), (1, 5)]
    stats = compute_team_stats([make_match(our=a, opp=b) for a, b in scores])
    assert stats.wins + stats.draws + stats.losses == len(scores)


def test_win_rate_rounds_to_one_decimal(make_match):
    records = [make_match(our=1, opp=0)] * 3 + [make_match(our=0, opp=1)] * 4
    assert compute_team_stats(records).win_rate == "42.9"


def test_win_rate_rounds_exact_half_up(make_match):
    records = [make_match(our=1, opp=0)] + [make_match(our=0, opp=1)] * 15
    assert compute_team_stats(records).win_rate == "6.3"


def test_full_win_rate(make_match):
    assert compute_team_stats([make_match(our=1, opp=0)]).win_rate == "100.0"


def test_top_scorer_tie_keeps_first_seen(make_match):
    stats = compute_team_stats([make_match(our=4, scorers=[("A", 2), ("B", 2)])])
    assert stats.top_scorer.name == "A"
    assert stats.top_scorer.goals == 2


def test_top_scorer_sums_across_matches(make_match):
    records = [
        make_match(our=2, scorers=[("A", 2)]),
        make_match(our=1, scorers=[("B", 1)]),
        make_match(our=2, scorers=[("B", 2)]),
    ]
    assert compute_team_stats(records).top_scorer.name == "B"


def test_no_scorers_means_no_top_scorer(make_match):
    assert compute_team_stats([make_match(our=0, opp=0)]).top_scorer is None


def test_player_average_is_two_decimals(make_match):
    records = [
        make_match(scorers=[("Kim", 2)]),
        make_match(scorers=[("Lee", 1)]),
        make_match(scorers=[("Kim", 1), ("Lee", 1)]),
    ]
    stats = compute_player_stats(records, "Kim")
    assert stats.match_count == 2
    assert stats.total_goals == 3
    assert stats.average_goals == "1.50"
    assert stats.tier == TIER_STANDARD


def test_player_average_rounds_exact_half_up(make_match):
    records = [make_match(scorers=[("Kim", 2)])] + [make_match(scorers=[("Kim", 1)])] * 7
    assert compute_player_stats(records, "Kim").average_goals == "1.13"


def test_absent_player_has_zero_average(make_match):
    stats = compute_player_stats([make_match(scorers=[("Kim", 1)])], "Park")
    assert stats.match_count == 0
    assert stats.matches == []
    assert stats.average_goals == "0.00"


def test_player_name_match_is_exact(make_match):
    stats = compute_player_stats([make_match(scorers=[("kim", 3)])], "Kim")
    assert stats.match_count == 0


def test_duplicate_entries_in_one_match_are_summed(make_match):
    stats = compute_player_stats([make_match(scorers=[("Kim", 1), ("Kim", 2)])], "Kim")
    assert stats.total_goals == 3
    assert stats.match_count == 1


def test_player_tier_above_threshold(make_match):
    stats = compute_player_stats([make_match(scorers=[("Kim", 11)])], "Kim")
    assert stats.tier == TIER_NOTABLE


def test_leaderboard_order(make_match):
    records = [make_match(scorers=[("A", 1), ("B", 3), ("C", 1)])]
    assert [s.name for s in scorer_leaderboard(records, top_n=2)] == ["B", "A"]


def test_records_frame_keeps_input_order(make_match):
    records = [make_match(opponent="X", id="1", scorers=[("Kim", 2)]), make_match(opponent="Y", id="2")]
    df = records_frame(records)
    assert df["Opponent"].tolist() == ["X", "Y"]
    assert df.loc[0, "Scorers"] == "Kim (2)"
    assert pd.isna(df.loc[1, "Players"])


def test_outcome_counts_frame(make_match):
    df = outcome_counts_frame([make_match(our=1, opp=0), make_match(our=1, opp=0), make_match(our=0, opp=0)])
    assert df["Result"].tolist() == ["WIN", "DRAW", "LOSS"]
    assert df["Matches"].tolist() == [2, 1, 0]
