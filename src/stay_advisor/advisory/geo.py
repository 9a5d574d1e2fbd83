"""Great-circle distances and location/conference proximity scores."""
from __future__ import annotations

import math
from typing import Optional, Protocol

from stay_advisor.hotels.models import (
    CanonicalHotelRecord,
    ConferenceProximity,
    Coordinates,
    LocationMatch,
)

from .preferences import SearchPreferences

EARTH_RADIUS_KM = 6371.0

# Estimated distances for textual area matches, in km.
PARTIAL_MATCH_DISTANCE_KM = 5.0
NO_MATCH_DISTANCE_KM = 20.0

# Share of the score lost at the edge of the conference radius.
IN_RADIUS_MAX_PENALTY = 30.0


def haversine_km(origin: Coordinates, target: Coordinates) -> float:
    lat1 = math.radians(origin.latitude)
    lat2 = math.radians(target.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(target.longitude - origin.longitude)
    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


class AreaMatcher(Protocol):
    """Scores how well a hotel sits within the requested target areas.

    Returning ``None`` defers to the textual heuristic.
    """

    def match(self, hotel: CanonicalHotelRecord, preferences: SearchPreferences) -> Optional[LocationMatch]:
        ...


class TextualAreaMatcher:
    """Compare the hotel's city name against the target area names."""

    def match(self, hotel: CanonicalHotelRecord, preferences: SearchPreferences) -> Optional[LocationMatch]:
        city = (hotel.city or "").strip().upper()
        areas = [area.strip().upper() for area in preferences.target_areas if area.strip()]
        if city and city in areas:
            return LocationMatch(score=100.0, distance_km=0.0)
        if city and any(city in area or area in city for area in areas):
            return LocationMatch(score=70.0, distance_km=PARTIAL_MATCH_DISTANCE_KM)
        return LocationMatch(score=40.0, distance_km=NO_MATCH_DISTANCE_KM)


_TEXTUAL = TextualAreaMatcher()


def score_location(
    hotel: CanonicalHotelRecord,
    preferences: SearchPreferences,
    matcher: Optional[AreaMatcher] = None,
) -> LocationMatch:
    if not preferences.target_areas:
        return LocationMatch(score=100.0, distance_km=0.0)
    if hotel.coordinates is None:
        return LocationMatch(score=50.0, distance_km=None)
    result = matcher.match(hotel, preferences) if matcher is not None else None
    if result is None:
        result = _TEXTUAL.match(hotel, preferences)
    return LocationMatch(score=_clamp(result.score), distance_km=result.distance_km)


def score_conference_proximity(
    hotel: CanonicalHotelRecord,
    preferences: SearchPreferences,
) -> ConferenceProximity:
    """Score distance to the conference venue.

    Inside the radius the score falls linearly from 100 to 70 at the edge.
    Beyond it the score drops by the excess-over-radius ratio, floored at 0.
    """
    venue = preferences.conference.coordinates if preferences.conference else None
    if venue is None:
        return ConferenceProximity(score=100.0, distance_km=None, within_radius=True)
    if hotel.coordinates is None:
        return ConferenceProximity(score=0.0, distance_km=None, within_radius=False)

    radius = preferences.max_distance_from_conference_km
    distance = haversine_km(hotel.coordinates, venue)
    within = distance <= radius
    if within:
        score = 100.0 - (distance / radius) * IN_RADIUS_MAX_PENALTY
    else:
        score = 100.0 - ((distance - radius) / radius) * 100.0
    return ConferenceProximity(
        score=_clamp(score),
        distance_km=round(distance, 2),
        within_radius=within,
    )


__all__ = [
    "AreaMatcher",
    "TextualAreaMatcher",
    "haversine_km",
    "score_conference_proximity",
    "score_location",
]
