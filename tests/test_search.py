from common.search import SearchMode, filter_records


def _records(make_match):
    return [
        make_match(opponent="Yongsan FC", scorers=[("Kim Min", 1)]),
        make_match(opponent="Seoul United", scorers=[("Lee", 2)]),
        make_match(opponent="Mapo (B)", scorers=[]),
    ]


def test_blank_query_is_identity(make_match):
    records = _records(make_match)
    for mode in SearchMode:
        assert filter_records(records, "", mode) == records
        assert filter_records(records, "   ", mode) == records


def test_opponent_match_ignores_case(make_match):
    out = filter_records(_records(make_match), "fc", SearchMode.OPPONENT)
    assert [m.opponent for m in out] == ["Yongsan FC"]


def test_pattern_query(make_match):
    out = filter_records(_records(make_match), "fc|united", SearchMode.OPPONENT)
    assert [m.opponent for m in out] == ["Yongsan FC", "Seoul United"]


def test_invalid_pattern_falls_back_to_literal(make_match):
    out = filter_records(_records(make_match), "(", SearchMode.OPPONENT)
    assert [m.opponent for m in out] == ["Mapo (B)"]


def test_scorer_mode_matches_any_scorer(make_match):
    out = filter_records(_records(make_match), "kim", SearchMode.SCORER)
    assert [m.opponent for m in out] == ["Yongsan FC"]


def test_mode_accepts_plain_string(make_match):
    out = filter_records(_records(make_match), "lee", "scorer")
    assert [m.opponent for m in out] == ["Seoul United"]


def test_input_is_not_mutated(make_match):
    records = _records(make_match)
    before = list(records)
    filter_records(records, "seoul", SearchMode.OPPONENT)
    assert records == before
