"""Dataclasses for canonical hotel records, offers and scoring output."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

PLACEHOLDER_IMAGE = "/images/hotel-placeholder.jpg"


@dataclass(frozen=True, slots=True)
class Coordinates:
    latitude: float
    longitude: float

    def to_dict(self) -> dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(slots=True)
class ProviderOffer:
    """One provider's price and booking link for a hotel."""

    provider: str
    booking_url: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    instant_booking: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "provider": self.provider,
            "booking_url": self.booking_url,
            "amount": self.amount,
            "currency": self.currency,
            "instant_booking": self.instant_booking,
        }


@dataclass(slots=True)
class CanonicalHotelRecord:
    """Provider-agnostic hotel, merged across every source that listed it."""

    hotel_id: str
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    star_rating: Optional[float] = None
    rating_score: Optional[float] = None
    review_count: Optional[int] = None
    amenities: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    description: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    instant_booking: bool = False
    cancellation: Optional[str] = None
    source: Optional[str] = None
    offers: Dict[str, ProviderOffer] = field(default_factory=dict)
    is_synthetic: bool = False
    raw: Dict[str, Any] = field(default_factory=dict)

    def add_offer(self, offer: ProviderOffer) -> bool:
        """Attach ``offer`` unless this provider already has one."""
        if offer.provider in self.offers:
            return False
        self.offers[offer.provider] = offer
        return True

    def merge_offers(self, other: "CanonicalHotelRecord") -> int:
        added = 0
        for offer in other.offers.values():
            if self.add_offer(offer):
                added += 1
        return added

    def _best_offer(self) -> Optional[ProviderOffer]:
        best: Optional[ProviderOffer] = None
        for offer in self.offers.values():
            if not offer.amount or offer.amount <= 0:
                continue
            if best is None or offer.amount < best.amount:  # type: ignore[operator]
                best = offer
        return best

    @property
    def best_price(self) -> Optional[float]:
        offer = self._best_offer()
        if offer is not None:
            return offer.amount
        if self.price and self.price > 0:
            return self.price
        return None

    @property
    def best_platform(self) -> Optional[str]:
        offer = self._best_offer()
        if offer is not None:
            return offer.provider
        return None

    @property
    def booking_links(self) -> dict[str, str]:
        return {
            provider: offer.booking_url
            for provider, offer in self.offers.items()
            if offer.booking_url
        }

    @property
    def prices(self) -> dict[str, dict[str, object]]:
        return {
            provider: {"amount": offer.amount, "currency": offer.currency or self.currency}
            for provider, offer in self.offers.items()
            if offer.amount
        }

    @property
    def primary_image(self) -> str:
        return self.images[0] if self.images else PLACEHOLDER_IMAGE

    def to_dict(self) -> dict[str, object]:
        return {
            "hotel_id": self.hotel_id,
            "name": self.name,
            "address": self.address,
            "city": self.city,
            "country": self.country,
            "coordinates": self.coordinates.to_dict() if self.coordinates else None,
            "star_rating": self.star_rating,
            "rating_score": self.rating_score,
            "review_count": self.review_count,
            "amenities": list(self.amenities),
            "images": list(self.images),
            "description": self.description,
            "price": self.price,
            "currency": self.currency,
            "instant_booking": self.instant_booking,
            "cancellation": self.cancellation,
            "source": self.source,
            "offers": {provider: offer.to_dict() for provider, offer in self.offers.items()},
            "best_price": self.best_price,
            "best_platform": self.best_platform,
            "is_synthetic": self.is_synthetic,
        }

    @classmethod
    def from_iterable(cls, records: Iterable["CanonicalHotelRecord"]) -> List[dict[str, object]]:
        return [record.to_dict() for record in records]


@dataclass(frozen=True, slots=True)
class LocationMatch:
    score: float
    distance_km: Optional[float]

    def to_dict(self) -> dict[str, object]:
        return {"score": self.score, "distance_km": self.distance_km}


@dataclass(frozen=True, slots=True)
class ConferenceProximity:
    score: float
    distance_km: Optional[float]
    within_radius: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "score": self.score,
            "distance_km": self.distance_km,
            "within_radius": self.within_radius,
        }


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    """Per-candidate match scores for one recommendation run."""

    price_match: float
    amenities_match: float
    star_rating_match: bool
    location_match: LocationMatch
    conference_proximity: ConferenceProximity
    relevance_score: float

    def to_dict(self) -> dict[str, object]:
        return {
            "price_match": self.price_match,
            "amenities_match": self.amenities_match,
            "star_rating_match": self.star_rating_match,
            "location_match": self.location_match.to_dict(),
            "conference_proximity": self.conference_proximity.to_dict(),
            "relevance_score": self.relevance_score,
        }


@dataclass(slots=True)
class Recommendation:
    hotel: CanonicalHotelRecord
    scores: ScoreBreakdown

    @property
    def relevance_score(self) -> float:
        return self.scores.relevance_score

    @property
    def booking_links(self) -> dict[str, str]:
        return self.hotel.booking_links

    @property
    def prices(self) -> dict[str, dict[str, object]]:
        return self.hotel.prices

    @property
    def best_platform(self) -> Optional[str]:
        return self.hotel.best_platform

    def best_price(self) -> Optional[dict[str, object]]:
        platform = self.hotel.best_platform
        if platform is None:
            return None
        offer = self.hotel.offers[platform]
        return {
            "platform": platform,
            "amount": offer.amount,
            "currency": offer.currency or self.hotel.currency,
        }

    def card_data(self) -> dict[str, object]:
        """Structured payload for rendering a hotel card."""
        hotel = self.hotel
        return {
            "id": hotel.hotel_id,
            "name": hotel.name,
            "address": hotel.address,
            "city": hotel.city,
            "country": hotel.country,
            "image": hotel.primary_image,
            "images": list(hotel.images),
            "rating": hotel.rating_score,
            "review_count": hotel.review_count,
            "price": hotel.best_price,
            "currency": hotel.currency,
            "prices": hotel.prices,
            "booking_links": hotel.booking_links,
            "amenities": list(hotel.amenities),
            "description": hotel.description,
            "instant_booking": hotel.instant_booking,
            "cancellation": hotel.cancellation,
            "coordinates": hotel.coordinates.to_dict() if hotel.coordinates else None,
            "best_price": self.best_price(),
            "best_platform": hotel.best_platform,
        }

    def to_dict(self) -> dict[str, object]:
        return {
            "hotel_id": self.hotel.hotel_id,
            "relevance_score": self.relevance_score,
            "scores": self.scores.to_dict(),
            "hotel": self.hotel.to_dict(),
            "booking_links": self.booking_links,
            "prices": self.prices,
            "card": self.card_data(),
        }


@dataclass(slots=True)
class ProviderOutcome:
    """Diagnostic summary of one adapter call."""

    provider: str
    area: str
    hotel_count: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None
    elapsed_ms: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, object]:
        return {
            "provider": self.provider,
            "area": self.area,
            "hotel_count": self.hotel_count,
            "error": self.error,
            "error_type": self.error_type,
            "elapsed_ms": self.elapsed_ms,
        }


@dataclass(slots=True)
class RecommendationResult:
    recommendations: List[Recommendation]
    total_candidates: int
    filtered_count: int
    generated_at: datetime
    used_fallback: bool = False
    provider_outcomes: List[ProviderOutcome] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.recommendations)

    def to_dict(self) -> dict[str, object]:
        return {
            "total_candidates": self.total_candidates,
            "filtered_count": self.filtered_count,
            "recommendations_generated": len(self.recommendations),
            "generated_at": self.generated_at.isoformat(),
            "used_fallback": self.used_fallback,
            "provider_outcomes": [outcome.to_dict() for outcome in self.provider_outcomes],
            "recommendations": [item.to_dict() for item in self.recommendations],
        }
