"""Score, filter, order and truncate hotel candidates."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Sequence

from stay_advisor.hotels.models import (
    CanonicalHotelRecord,
    ProviderOutcome,
    Recommendation,
    RecommendationResult,
)

from .aggregator import FallbackFactory
from .fallback import synthesize_fallback_hotels
from .geo import AreaMatcher
from .preferences import SearchPreferences
from .scoring import DEFAULT_WEIGHTS, ScoringWeights, score_hotel

logger = logging.getLogger(__name__)

DEFAULT_RESULT_LIMIT = 20


def order_recommendations(
    recommendations: Iterable[Recommendation], limit: Optional[int] = None
) -> List[Recommendation]:
    """Sort by relevance, highest first; ties keep their incoming order."""
    ordered = sorted(recommendations, key=lambda item: item.relevance_score, reverse=True)
    if limit is not None:
        return ordered[:limit]
    return ordered


class Ranker:
    """Turns deduplicated candidates into a capped, ordered result.

    Candidates are accepted against ``threshold``; if nothing survives, a
    second pass uses ``relaxed_threshold``. If that still leaves nothing the
    fallback hotels are scored and ranked instead.
    """

    def __init__(
        self,
        *,
        limit: int = DEFAULT_RESULT_LIMIT,
        threshold: float = 0.0,
        relaxed_threshold: float = 0.0,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        area_matcher: Optional[AreaMatcher] = None,
        fallback: FallbackFactory = synthesize_fallback_hotels,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if limit <= 0:
            raise ValueError("limit must be positive")
        self.limit = limit
        self.threshold = threshold
        self.relaxed_threshold = relaxed_threshold
        self.weights = weights
        self.area_matcher = area_matcher
        self._fallback = fallback
        self._clock = clock

    def _now(self) -> datetime:
        return self._clock() if self._clock else datetime.now(timezone.utc)

    def score(
        self, candidates: Iterable[CanonicalHotelRecord], preferences: SearchPreferences
    ) -> List[Recommendation]:
        scored: List[Recommendation] = []
        for hotel in candidates:
            breakdown = score_hotel(
                hotel,
                preferences,
                weights=self.weights,
                area_matcher=self.area_matcher,
            )
            if not scored:
                logger.debug("Sample scoring for '%s': %s", hotel.name, breakdown.to_dict())
            scored.append(Recommendation(hotel=hotel, scores=breakdown))
        return scored

    @staticmethod
    def _accept(scored: Sequence[Recommendation], threshold: float) -> List[Recommendation]:
        return [item for item in scored if item.relevance_score >= threshold]

    def rank(
        self,
        candidates: Sequence[CanonicalHotelRecord],
        preferences: SearchPreferences,
        *,
        limit: Optional[int] = None,
        used_fallback: bool = False,
        outcomes: Optional[List[ProviderOutcome]] = None,
    ) -> RecommendationResult:
        limit = self.limit if limit is None else limit
        if limit <= 0:
            raise ValueError("limit must be positive")
        total = len(candidates)
        scored = self.score(candidates, preferences)
        accepted = self._accept(scored, self.threshold)

        if not accepted and scored:
            logger.warning(
                "All %s candidates fell below %.2f; retrying at %.2f",
                len(scored),
                self.threshold,
                self.relaxed_threshold,
            )
            accepted = self._accept(scored, self.relaxed_threshold)

        if not accepted:
            logger.warning("Nothing left to rank; scoring fallback hotels")
            fallback_hotels = self._fallback(preferences, now=self._now())
            total += len(fallback_hotels)
            accepted = self.score(fallback_hotels, preferences)
            used_fallback = True

        ranked = order_recommendations(accepted, limit)
        logger.info(
            "Ranked %s of %s candidates (%s accepted, limit %s)",
            len(ranked),
            total,
            len(accepted),
            limit,
        )
        return RecommendationResult(
            recommendations=ranked,
            total_candidates=total,
            filtered_count=len(accepted),
            generated_at=self._now(),
            used_fallback=used_fallback,
            provider_outcomes=list(outcomes or []),
        )


__all__ = ["DEFAULT_RESULT_LIMIT", "Ranker", "order_recommendations"]
