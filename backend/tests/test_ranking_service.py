import pytest

from discovery.config import Settings
from discovery.errors import MissingRankingInput, UpstreamQueryFailure
from discovery.services.contracts import RadiusCandidate
from discovery.services.ranking_service import (
    RankingWeights,
    distance_factor,
    quality_factor,
    rank_candidates,
    score_candidate,
    subscription_factor,
)

from conftest import make_record

WEIGHTS = RankingWeights()


def test_distance_factor_is_clamped():
    assert distance_factor(0, 1000) == 100
    assert distance_factor(500, 1000) == 50
    assert distance_factor(1000, 1000) == 0
    assert distance_factor(1500, 1000) == 0


def test_quality_factor_caps_review_count():
    assert quality_factor(5.0, 200, 200) == 100
    assert quality_factor(5.0, 10_000, 200) == 100
    assert quality_factor(2.5, 100, 200) == 50
    assert quality_factor(0.0, 0, 200) == 0


def test_subscription_factor_uses_tier_boosts():
    assert subscription_factor("premium", WEIGHTS) == 50
    assert subscription_factor("standard", WEIGHTS) == 35
    assert subscription_factor("basic", WEIGHTS) == 15
    assert subscription_factor("free", WEIGHTS) == 0


def test_score_candidate_matches_weighted_formula():
    record = make_record(1, 0, 0, average_rating=4.0, review_count=100, subscription_tier="premium")
    expected = 0.35 * 75 + 0.40 * (40 + 25) + 0.25 * 50
    assert score_candidate(record, 250, 1000, WEIGHTS) == pytest.approx(expected)


def test_score_decreases_with_distance_when_other_inputs_equal():
    record = make_record(1, 0, 0, average_rating=4.5, review_count=120, subscription_tier="standard")
    scores = [score_candidate(record, distance, 3000, WEIGHTS) for distance in (0, 250, 1200, 2750, 3000)]
    assert scores == sorted(scores, reverse=True)
    assert len(set(scores)) == len(scores)


def test_missing_ranking_input_is_an_upstream_failure():
    record = make_record(1, 0, 0, average_rating=None)
    with pytest.raises(MissingRankingInput) as exc_info:
        score_candidate(record, 10, 1000, WEIGHTS)
    assert isinstance(exc_info.value, UpstreamQueryFailure)
    assert "average_rating" in exc_info.value.message


def test_unknown_tier_is_missing_ranking_input():
    record = make_record(1, 0, 0, subscription_tier="featured")
    with pytest.raises(MissingRankingInput):
        score_candidate(record, 10, 1000, WEIGHTS)


def test_rank_candidates_breaks_ties_by_id():
    twins = [make_record(index, 500, 90, name="Twin") for index in (3, 1, 2)]
    ranked = rank_candidates([RadiusCandidate(record=r, distance_m=500.0) for r in twins], 1000, WEIGHTS)
    assert [item.record.id.int for item in ranked] == [1, 2, 3]


def test_weights_come_from_settings():
    config = Settings(
        ranking_distance_weight=1.0,
        ranking_quality_weight=0.0,
        ranking_subscription_weight=0.0,
        ranking_tier_boosts={"free": 0, "basic": 1, "standard": 2, "premium": 3},
    )
    weights = RankingWeights.from_settings(config)
    record = make_record(1, 0, 0)
    assert score_candidate(record, 250, 1000, weights) == pytest.approx(75.0)
    assert weights.fingerprint() != WEIGHTS.fingerprint()


def test_settings_reject_incomplete_tier_map():
    with pytest.raises(ValueError):
        Settings(ranking_tier_boosts={"free": 0, "premium": 50})
