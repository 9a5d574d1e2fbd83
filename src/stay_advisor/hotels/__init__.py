"""Hotel domain models and normalization helpers."""

from .models import (
    CanonicalHotelRecord,
    ConferenceProximity,
    Coordinates,
    LocationMatch,
    ProviderOffer,
    ProviderOutcome,
    Recommendation,
    RecommendationResult,
    ScoreBreakdown,
)
from .normalizer import (
    build_hotel_record,
    build_hotel_records,
    extract_results,
    normalize_amenity,
    normalize_platform_name,
    try_build_hotel_record,
)

__all__ = [
    "CanonicalHotelRecord",
    "ConferenceProximity",
    "Coordinates",
    "LocationMatch",
    "ProviderOffer",
    "ProviderOutcome",
    "Recommendation",
    "RecommendationResult",
    "ScoreBreakdown",
    "build_hotel_record",
    "build_hotel_records",
    "extract_results",
    "normalize_amenity",
    "normalize_platform_name",
    "try_build_hotel_record",
]
