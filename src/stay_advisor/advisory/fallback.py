"""Placeholder hotels used when no provider returned usable data."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from stay_advisor.hotels.models import CanonicalHotelRecord, Coordinates, ProviderOffer

from .preferences import SearchPreferences

logger = logging.getLogger(__name__)

FALLBACK_PROVIDER = "mock"
FALLBACK_BOOKING_URL = "#"


@dataclass(frozen=True, slots=True)
class _Tier:
    name: str
    stars: int
    price_factor: float
    street: str
    latitude: float
    longitude: float
    rating: float
    reviews: int
    amenities: Tuple[str, ...]
    image: str


_TIERS: Tuple[_Tier, ...] = (
    _Tier(
        name="Luxury Grand Hotel",
        stars=5,
        price_factor=1.1,
        street="123 Main Street",
        latitude=19.0760,
        longitude=72.8777,
        rating=9.2,
        reviews=1520,
        amenities=("wifi", "pool", "gym", "restaurant", "spa", "parking"),
        image="https://images.unsplash.com/photo-1566073771259-6a8506099945?w=800&h=600&fit=crop",
    ),
    _Tier(
        name="Premium Business Hotel",
        stars=4,
        price_factor=1.0,
        street="456 Business Road",
        latitude=19.0522,
        longitude=72.8780,
        rating=8.5,
        reviews=1200,
        amenities=("wifi", "pool", "gym", "restaurant", "parking", "businesscenter"),
        image="https://images.unsplash.com/photo-1551882547-ff40c63fe5fa?w=800&h=600&fit=crop",
    ),
    _Tier(
        name="Comfort Inn Express",
        stars=3,
        price_factor=0.9,
        street="789 Comfort Lane",
        latitude=19.0759,
        longitude=72.8776,
        rating=7.8,
        reviews=890,
        amenities=("wifi", "parking", "restaurant"),
        image="https://images.unsplash.com/photo-1571896349842-33c89424de2d?w=800&h=600&fit=crop",
    ),
)


def synthesize_fallback_hotels(
    preferences: SearchPreferences,
    *,
    now: Optional[datetime] = None,
) -> List[CanonicalHotelRecord]:
    """Return three placeholder hotels at 5, 4 and 3 stars.

    Prices sit at 110%, 100% and 90% of the budget midpoint. Identifiers are
    seeded from ``now`` so two calls at the same instant produce identical
    records.
    """
    moment = now or datetime.now(timezone.utc)
    stamp = int(moment.timestamp() * 1000)
    area = preferences.primary_area
    midpoint = preferences.budget_midpoint
    hotels: List[CanonicalHotelRecord] = []
    for index, tier in enumerate(_TIERS, start=1):
        price = float(round(midpoint * tier.price_factor))
        offer = ProviderOffer(
            provider=FALLBACK_PROVIDER,
            booking_url=FALLBACK_BOOKING_URL,
            amount=price,
            currency=preferences.currency,
        )
        hotels.append(
            CanonicalHotelRecord(
                hotel_id=f"HTL{stamp}{index}",
                name=tier.name,
                address=f"{tier.street}, {area}",
                city=area.upper(),
                country=preferences.country,
                coordinates=Coordinates(latitude=tier.latitude, longitude=tier.longitude),
                star_rating=float(tier.stars),
                rating_score=tier.rating,
                review_count=tier.reviews,
                amenities=list(tier.amenities),
                images=[tier.image],
                description=f"{tier.stars}-star placeholder stay in {area}",
                price=price,
                currency=preferences.currency,
                source=FALLBACK_PROVIDER,
                offers={FALLBACK_PROVIDER: offer},
                is_synthetic=True,
            )
        )
    logger.warning("Synthesized %s fallback hotels for '%s' around %.0f", len(hotels), area, midpoint)
    return hotels


__all__ = ["synthesize_fallback_hotels"]
