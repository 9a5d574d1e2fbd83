"""Composite relevance scoring for hotel candidates."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from stay_advisor.hotels.models import (
    CanonicalHotelRecord,
    ConferenceProximity,
    LocationMatch,
    ScoreBreakdown,
)

from .geo import AreaMatcher, score_conference_proximity, score_location
from .preferences import SearchPreferences

NEUTRAL_SCORE = 50.0
STAR_MATCH_SCORE = 100.0
STAR_MISS_SCORE = 50.0


@dataclass(frozen=True, slots=True)
class ScoringWeights:
    price: float = 0.25
    amenities: float = 0.25
    star_rating: float = 0.15
    location: float = 0.15
    conference: float = 0.20
    location_without_conference: float = 0.25

    @classmethod
    def from_settings(cls, settings) -> "ScoringWeights":
        return cls(
            price=settings.weight_price,
            amenities=settings.weight_amenities,
            star_rating=settings.weight_star_rating,
            location=settings.weight_location,
            conference=settings.weight_conference,
            location_without_conference=settings.weight_location_without_conference,
        )

    def effective(self, has_conference: bool) -> "ScoringWeights":
        """Drop the conference weight and raise location when no venue was given."""
        if has_conference:
            return self
        return ScoringWeights(
            price=self.price,
            amenities=self.amenities,
            star_rating=self.star_rating,
            location=self.location_without_conference,
            conference=0.0,
            location_without_conference=self.location_without_conference,
        )

    @property
    def total(self) -> float:
        return self.price + self.amenities + self.star_rating + self.location + self.conference


DEFAULT_WEIGHTS = ScoringWeights()


def price_match(hotel: CanonicalHotelRecord, preferences: SearchPreferences) -> float:
    price = hotel.best_price
    if not price or price <= 0:
        return NEUTRAL_SCORE

    low = preferences.budget_min
    high = preferences.budget_max
    if price >= low and (high is None or price <= high):
        if high is None:
            midpoint = (low + low * 2) / 2
            spread = low
        else:
            midpoint = (low + high) / 2
            spread = high - low
        if spread <= 0:
            return 100.0 if price == midpoint else 80.0
        return max(80.0, 100.0 - (abs(price - midpoint) / spread) * 20.0)

    if price < low:
        below_pct = (low - price) / low * 100.0
        return min(70.0, NEUTRAL_SCORE + below_pct * 0.2)

    over_pct = (price - high) / high * 100.0  # type: ignore[operator]
    return max(0.0, NEUTRAL_SCORE - over_pct * 0.5)


def amenities_match(hotel: CanonicalHotelRecord, preferences: SearchPreferences) -> float:
    required = preferences.required_amenities
    if not required:
        return 100.0
    available = set(hotel.amenities)
    matched = sum(1 for amenity in required if amenity in available)
    return matched / len(required) * 100.0


def star_rating_match(hotel: CanonicalHotelRecord, preferences: SearchPreferences) -> bool:
    stars = hotel.star_rating or 0
    return abs(stars - preferences.preferred_star_rating) <= 1


def composite_score(
    *,
    price: float,
    amenities: float,
    star_match: bool,
    location: LocationMatch,
    conference: ConferenceProximity,
    weights: ScoringWeights,
    total_weight: Optional[float] = None,
) -> float:
    """Weighted sum of the component scores divided by ``total_weight``.

    ``total_weight`` defaults to the sum of ``weights``. Callers scoring with
    reallocated weights pass the configured total so the component weights
    keep their face value.
    """
    if total_weight is None:
        total_weight = weights.total
    if total_weight <= 0:
        return 0.0
    total = (
        price * weights.price
        + amenities * weights.amenities
        + (STAR_MATCH_SCORE if star_match else STAR_MISS_SCORE) * weights.star_rating
        + location.score * weights.location
        + conference.score * weights.conference
    )
    return round(max(0.0, min(100.0, total / total_weight)), 2)


def score_hotel(
    hotel: CanonicalHotelRecord,
    preferences: SearchPreferences,
    *,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    area_matcher: Optional[AreaMatcher] = None,
) -> ScoreBreakdown:
    price = round(price_match(hotel, preferences), 2)
    amenities = round(amenities_match(hotel, preferences), 2)
    star_match = star_rating_match(hotel, preferences)
    location = score_location(hotel, preferences, area_matcher)
    conference = score_conference_proximity(hotel, preferences)
    relevance = composite_score(
        price=price,
        amenities=amenities,
        star_match=star_match,
        location=location,
        conference=conference,
        weights=weights.effective(preferences.has_conference),
        total_weight=weights.total,
    )
    return ScoreBreakdown(
        price_match=price,
        amenities_match=amenities,
        star_rating_match=star_match,
        location_match=location,
        conference_proximity=conference,
        relevance_score=relevance,
    )


__all__ = [
    "DEFAULT_WEIGHTS",
    "ScoringWeights",
    "amenities_match",
    "composite_score",
    "price_match",
    "score_hotel",
    "star_rating_match",
]
