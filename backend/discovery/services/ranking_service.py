from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ..config import Settings
from ..errors import MissingRankingInput
from ..telemetry import instrument_stage
from .contracts import RadiusCandidate, RankedCandidate, EstablishmentRecord

MAX_RATING = 5.0
FACTOR_CEILING = 100.0

_DEFAULT_TIER_BOOSTS = {"premium": 50.0, "standard": 35.0, "basic": 15.0, "free": 0.0}


@dataclass(frozen=True)
class RankingWeights:
    distance: float = 0.35
    quality: float = 0.40
    subscription: float = 0.25
    review_count_cap: int = 200
    tier_boosts: Mapping[str, float] = field(default_factory=lambda: MappingProxyType(dict(_DEFAULT_TIER_BOOSTS)))

    @classmethod
    def from_settings(cls, settings: Settings) -> "RankingWeights":
        return cls(
            distance=settings.ranking_distance_weight,
            quality=settings.ranking_quality_weight,
            subscription=settings.ranking_subscription_weight,
            review_count_cap=settings.ranking_review_count_cap,
            tier_boosts=MappingProxyType(dict(settings.ranking_tier_boosts)),
        )

    def fingerprint(self) -> str:
        payload = {
            "distance": self.distance,
            "quality": self.quality,
            "subscription": self.subscription,
            "review_count_cap": self.review_count_cap,
            "tier_boosts": dict(sorted(self.tier_boosts.items())),
        }
        raw = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]


def _clamp(value: float, low: float = 0.0, high: float = FACTOR_CEILING) -> float:
    return max(low, min(high, value))


def distance_factor(distance_m: float, radius_m: float) -> float:
    # 100 at the origin, 0 at (or beyond) the radius edge.
    if radius_m <= 0:
        return 0.0
    return _clamp(100.0 * (1.0 - distance_m / radius_m))


def quality_factor(average_rating: float, review_count: int, review_count_cap: int) -> float:
    rating = _clamp(float(average_rating), 0.0, MAX_RATING)
    capped_reviews = min(max(0, int(review_count)), review_count_cap)
    return (rating / MAX_RATING * 50.0) + (capped_reviews / float(review_count_cap) * 50.0)


def subscription_factor(tier: str, weights: RankingWeights) -> float:
    try:
        return float(weights.tier_boosts[tier])
    except KeyError:
        raise MissingRankingInput(f"Unknown subscription tier {tier!r}") from None


def score_candidate(
    record: EstablishmentRecord,
    distance_m: float,
    radius_m: float,
    weights: RankingWeights,
) -> float:
    missing = [
        name
        for name, value in (
            ("average_rating", record.average_rating),
            ("review_count", record.review_count),
            ("subscription_tier", record.subscription_tier),
        )
        if value is None
    ]
    if missing:
        raise MissingRankingInput(f"Establishment {record.id} is missing ranking input(s): {', '.join(missing)}")

    return (
        weights.distance * distance_factor(distance_m, radius_m)
        + weights.quality * quality_factor(record.average_rating, record.review_count, weights.review_count_cap)
        + weights.subscription * subscription_factor(record.subscription_tier, weights)
    )


@instrument_stage("ranking")
def rank_candidates(
    candidates: Iterable[RadiusCandidate],
    radius_m: float,
    weights: RankingWeights,
) -> list[RankedCandidate]:
    ranked = [
        RankedCandidate(
            record=candidate.record,
            distance_m=candidate.distance_m,
            score=score_candidate(candidate.record, candidate.distance_m, radius_m, weights),
        )
        for candidate in candidates
    ]
    ranked.sort(key=lambda item: item.sort_key)
    return ranked
