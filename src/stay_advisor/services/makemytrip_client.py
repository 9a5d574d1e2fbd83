"""Adapter for the MakeMyTrip hotel autosuggest endpoint."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from stay_advisor.hotels.models import CanonicalHotelRecord
from stay_advisor.hotels.normalizer import try_build_hotel_record
from stay_advisor.utils.throttling import RateGate

from .base import HttpProviderAdapter, ProviderFilters, StayWindow

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.makemytrip.com"
AUTOSUGGEST_PATH = "/api/services/autosuggest/v1/hotels"
DEFAULT_STAR_RATING = 3


def _to_raw_hotel(item: Dict[str, Any], *, area: str, base_url: str) -> Dict[str, Any]:
    """Reshape one autosuggest item into the canonical payload layout."""
    city = item.get("city") or area
    location = item.get("location")
    address = item.get("address") or (location if isinstance(location, str) else None)
    stars = item.get("starRating") or item.get("hotelCategory") or DEFAULT_STAR_RATING
    url = item.get("url") or f"{base_url}/hotels/{str(city).lower().replace(' ', '-')}"
    return {
        "id": item.get("id"),
        "name": item.get("name") or item.get("hotelName"),
        "city": city,
        "address": address,
        "lat": item.get("lat"),
        "lng": item.get("lng"),
        "starRating": stars,
        "rating": item.get("rating"),
        "reviewCount": item.get("reviewCount"),
        "price": item.get("price"),
        "amenities": item.get("amenities") or item.get("facilities") or [],
        "images": item.get("images") or ([item["image"]] if item.get("image") else []),
        "description": item.get("description"),
        "sources": [{"platform": "makemytrip", "url": url, "price": item.get("price")}],
    }


class MakeMyTripClient(HttpProviderAdapter):
    name = "makemytrip"

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        currency: str = "INR",
        timeout_s: float = 5.0,
        rate_limit_ms: int = 2000,
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
        self.currency = currency

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Referer": f"{self.base_url}/",
        }
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return headers

    async def _fetch(
        self,
        area: str,
        stay: StayWindow,
        guests: int,
        filters: ProviderFilters,
    ) -> List[CanonicalHotelRecord]:
        params = {"query": area, "client": "web", "fetchAllHotels": "true"}
        logger.debug("MakeMyTrip autosuggest query='%s'", area)
        response = await self._send(
            "GET", f"{self.base_url}{AUTOSUGGEST_PATH}", params=params, headers=self._headers()
        )
        payload = self._decode(response)
        items = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            return []

        hotels: List[CanonicalHotelRecord] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            if item.get("type") != "Hotel" and not item.get("city"):
                continue
            record = try_build_hotel_record(
                _to_raw_hotel(item, area=area, base_url=self.base_url),
                provider=self.name,
                default_currency=self.currency,
                search_area=area,
            )
            if record is not None:
                hotels.append(record)
        return hotels


__all__ = ["MakeMyTripClient"]
