from datetime import date

import pytest

from common.errors import ValidationError
from models.match_model import MatchDraft, MatchRecord, Scorer, normalize_draft, validate_draft

TODAY = date(2024, 6, 1)


def test_outcome_classification(make_match):
    assert make_match(our=2, opp=1).outcome == "win"
    assert make_match(our=1, opp=1).outcome == "draw"
    assert make_match(our=0, opp=1).outcome == "loss"


def test_from_dict_accepts_json_columns():
    rec = MatchRecord.from_dict({
        "id": 7,
        "opponent": "Yongsan FC",
        "ourScore": "3",
        "opponentScore": 1,
        "stadium": "Mapo Stadium",
        "date": "2024-05-04",
        "scorers": '[{"name": "Kim", "goals": 2}]',
        "imageUrls": '["https://cdn.example/a.png"]',
        "createdAt": 1700000000000,
    })
    assert rec.id == "7"
    assert rec.our_score == 3
    assert rec.scorers == (Scorer("Kim", 2),)
    assert rec.image_urls == ("https://cdn.example/a.png",)
    assert rec.player_count is None and rec.updated_at is None


def test_from_dict_rejects_missing_fields():
    with pytest.raises(KeyError):
        MatchRecord.from_dict({"opponent": "X"})


def test_normalize_fills_defaults():
    draft = normalize_draft({}, today=TODAY)
    assert draft == MatchDraft(date="2024-06-01")


def test_normalize_untrusted_payload():
    draft = normalize_draft({
        "opponent": "  Yongsan FC ",
        "ourScore": "2",
        "opponentScore": -1,
        "stadium": "Mapo",
        "date": "last sunday",
        "playerCount": 14.0,
        "scorers": [{"name": "Kim", "goals": 0}, {"name": " ", "goals": 3}, "junk", {"name": "Lee"}],
    }, today=TODAY)
    assert draft.opponent == "Yongsan FC"
    assert (draft.our_score, draft.opponent_score) == (2, 0)
    assert draft.date == "2024-06-01"
    assert draft.player_count == 14
    assert draft.scorers == (Scorer("Kim", 1), Scorer("Lee", 1))


def test_normalize_accepts_snake_case():
    draft = normalize_draft({"our_score": 4, "player_count": 9, "image_urls": ["a", ""]}, today=TODAY)
    assert draft.our_score == 4
    assert draft.player_count == 9
    assert draft.image_urls == ("a",)


def test_validate_requires_opponent_and_stadium():
    with pytest.raises(ValidationError) as exc:
        validate_draft(normalize_draft({"opponent": "X"}, today=TODAY))
    assert exc.value.messages == ["Opponent name and stadium are required."]


def test_validate_rejects_impossible_date():
    with pytest.raises(ValidationError):
        validate_draft(MatchDraft(opponent="X", stadium="Y", date="2024-02-30"))


def test_validate_photo_limit():
    draft = MatchDraft(opponent="X", stadium="Y", date="2024-05-04", image_urls=tuple("abcdefg"))
    with pytest.raises(ValidationError):
        validate_draft(draft)
    assert validate_draft(draft.with_images(list("abcdef"))).image_urls == tuple("abcdef")


def test_draft_from_record_round_trip(make_match):
    rec = make_match(scorers=[("Kim", 1)], id="m1", created_at=5)
    fields = MatchDraft.from_record(rec).to_fields()
    assert fields["opponent"] == rec.opponent
    assert fields["scorers"] == [{"name": "Kim", "goals": 1}]
    assert "id" not in fields
