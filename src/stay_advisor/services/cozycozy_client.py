"""Adapter for the CozyCozy meta-search results API."""
from __future__ import annotations

import logging
import secrets
import time
from typing import Any, Dict, List, Optional

import httpx
from jose import JWTError, jwt

from stay_advisor.hotels.models import CanonicalHotelRecord
from stay_advisor.hotels.normalizer import build_hotel_records, extract_results
from stay_advisor.utils.throttling import RateGate

from .base import HttpProviderAdapter, ProviderFilters, StayWindow

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.cozycozy.com/api"
_OPEN_PRICE_RANGE = [-0.5, 9007199254740991]
_WORLD_BOUNDS = {"west": -180, "east": 180, "north": 90, "south": -90}


def generate_search_id() -> str:
    return secrets.token_hex(13)


def token_expired(token: str, *, now: Optional[float] = None) -> bool:
    """Return True when ``token`` is a JWT whose ``exp`` claim lies in the past.

    Opaque tokens and tokens without ``exp`` are treated as valid.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return False
    expires_at = claims.get("exp")
    if not isinstance(expires_at, (int, float)) or isinstance(expires_at, bool):
        return False
    current = time.time() if now is None else now
    return current > expires_at


class CozyCozyClient(HttpProviderAdapter):
    """Searches booking.com, agoda and friends through one CozyCozy call."""

    name = "cozycozy"

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        auth_token: Optional[str] = None,
        result_count: int = 40,
        currency: str = "INR",
        timeout_s: float = 30.0,
        rate_limit_ms: int = 1000,
        user_agent: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        gate: Optional[RateGate] = None,
    ) -> None:
        super().__init__(
            timeout_s=timeout_s,
            rate_limit_ms=rate_limit_ms,
            user_agent=user_agent,
            client=client,
            gate=gate,
        )
        self.base_url = base_url.rstrip("/")
        self.auth_token = auth_token
        self.result_count = result_count
        self.currency = currency

    def build_headers(self, search_id: str) -> Dict[str, str]:
        headers = {
            "Accept": "application/json, text/plain, */*",
            "Accept-Language": "en-GB,en-US;q=0.9,en;q=0.8",
            "Content-Type": "application/json",
            "Origin": "https://www.cozycozy.com",
            "Referer": "https://www.cozycozy.com/",
            "x-search-id": search_id,
            "x-split-id": "0",
        }
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        if self.auth_token:
            if token_expired(self.auth_token):
                logger.warning("CozyCozy auth token has expired; searching without it")
            else:
                headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def build_payload(
        self,
        area: str,
        stay: StayWindow,
        guests: int,
        filters: ProviderFilters,
        *,
        search_id: str,
    ) -> Dict[str, Any]:
        if filters.price_max is not None:
            price_range = [filters.price_min, filters.price_max]
        elif filters.price_min:
            price_range = [filters.price_min, _OPEN_PRICE_RANGE[1]]
        else:
            price_range = list(_OPEN_PRICE_RANGE)
        star_ratings: List[int] = []
        if filters.min_star_rating:
            star_ratings = list(range(filters.min_star_rating, 6))
        return {
            "processNewResults": True,
            "count": self.result_count,
            "forMap": True,
            "offset": 0,
            "searchId": search_id,
            "sorting": "ranking",
            "zoomLevel": 11,
            "location": area,
            "checkIn": stay.check_in.isoformat(),
            "checkOut": stay.check_out.isoformat(),
            "adults": guests,
            "currency": filters.currency or self.currency,
            "filters": {
                "bounds": dict(_WORLD_BOUNDS),
                "noBounds": True,
                "price": price_range,
                "instantBooking": True,
                "combinedTypeCodes": [],
                "starRatings": star_ratings,
                "minRating": 0,
                "ratingRequired": False,
                "amenityCodes": list(filters.amenities),
                "providerCodes": [],
                "minBedRoomCount": 1,
                "minBathRoomCount": 0,
                "cityCodes": [],
                "areaCodes": [],
                "minResponseTime": None,
                "updateBounds": False,
                "breakfast": False,
                "minCancellationCategory": 0,
            },
        }

    async def _fetch(
        self,
        area: str,
        stay: StayWindow,
        guests: int,
        filters: ProviderFilters,
    ) -> List[CanonicalHotelRecord]:
        search_id = generate_search_id()
        url = f"{self.base_url}/getResults"
        logger.debug("CozyCozy getResults area='%s' searchId=%s", area, search_id)
        response = await self._send(
            "POST",
            url,
            json=self.build_payload(area, stay, guests, filters, search_id=search_id),
            headers=self.build_headers(search_id),
        )
        payload = self._decode(response)
        if not extract_results(payload):
            keys = list(payload.keys()) if isinstance(payload, dict) else type(payload).__name__
            logger.debug("CozyCozy response for '%s' had no results (shape: %s)", area, keys)
            return []
        return build_hotel_records(
            payload,
            provider=self.name,
            default_currency=filters.currency or self.currency,
            search_area=area,
        )


__all__ = ["CozyCozyClient", "generate_search_id", "token_expired"]
