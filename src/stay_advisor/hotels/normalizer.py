"""Utilities to transform raw provider hotel payloads into canonical records."""
from __future__ import annotations

import logging
import math
import re
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .models import CanonicalHotelRecord, Coordinates, ProviderOffer

logger = logging.getLogger(__name__)

_RESULT_KEYS = ("results", "data", "hotels")
_OFFER_KEYS = ("providers", "offers", "bookingOptions", "sources")

_PLATFORM_ALIASES: Dict[str, str] = {
    "booking.com": "booking.com",
    "agoda": "agoda",
    "makemytrip": "makemytrip",
    "yatra": "yatra",
    "cleartrip": "cleartrip",
    "expedia": "expedia",
    "hotels.com": "hotels.com",
}
_PLATFORM_PATTERNS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("booking",), "booking.com"),
    (("agoda",), "agoda"),
    (("makemytrip", "mmt"), "makemytrip"),
    (("yatra",), "yatra"),
    (("cleartrip",), "cleartrip"),
    (("expedia",), "expedia"),
    (("hotels.com",), "hotels.com"),
)
_AMENITY_SEPARATORS = re.compile(r"[\s_\-]+")
# Currency symbols, codes and whitespace around the number.
_NUMBER_EDGES = re.compile(r"^(?:[^\d\-.]|\.(?!\d))+|[^\d.]+$")
_GROUPED_NUMBER = re.compile(r"-?\d{1,3}(?:,\d{3})+(?:\.\d+)?")


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        cleaned = _NUMBER_EDGES.sub("", value)
        if _GROUPED_NUMBER.fullmatch(cleaned):
            cleaned = cleaned.replace(",", "")
        value = cleaned
    try:
        converted = float(value)
    except (TypeError, ValueError):
        return None
    return converted if math.isfinite(converted) else None


def _to_int(value: Any) -> Optional[int]:
    converted = _to_float(value)
    if converted is None:
        return None
    return int(converted)


def _first(mapping: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = mapping.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_platform_name(platform: Optional[str]) -> str:
    if not platform:
        return "unknown"
    lowered = str(platform).strip().lower()
    if lowered in _PLATFORM_ALIASES:
        return _PLATFORM_ALIASES[lowered]
    for needles, canonical in _PLATFORM_PATTERNS:
        if any(needle in lowered for needle in needles):
            return canonical
    return lowered


def normalize_amenity(value: Any) -> Optional[str]:
    """Fold ``"Business Center"``, ``"business_center"`` and ``"businessCenter"`` together."""
    text = _text(value)
    if text is None:
        return None
    folded = _AMENITY_SEPARATORS.sub("", text.lower())
    return folded or None


def extract_results(payload: Any) -> List[Dict[str, Any]]:
    """Pull the list of hotel entries out of whatever envelope a provider uses."""
    if payload is None:
        return []
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]
    if not isinstance(payload, dict):
        return []
    for key in _RESULT_KEYS:
        value = payload.get(key)
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict)]
        if isinstance(value, dict):
            nested = extract_results(value) if any(k in value for k in _RESULT_KEYS) else None
            if nested:
                return nested
            return [item for item in value.values() if isinstance(item, dict)]
    values = list(payload.values())
    if values and all(isinstance(item, dict) for item in values):
        return values
    return []


def _extract_coordinates(hotel: Mapping[str, Any]) -> Optional[Coordinates]:
    location = _as_mapping(hotel.get("location"))
    candidates = (
        _as_mapping(hotel.get("coordinates")),
        _as_mapping(hotel.get("geoLocation")),
        _as_mapping(location.get("coordinates")),
        location,
        hotel,
    )
    for source in candidates:
        if not source:
            continue
        lat = _to_float(_first(source, "latitude", "lat"))
        lon = _to_float(_first(source, "longitude", "lng", "lon"))
        if lat is None or lon is None:
            continue
        if lat == 0 and lon == 0:
            continue
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
            continue
        return Coordinates(latitude=lat, longitude=lon)
    return None


def _extract_images(hotel: Mapping[str, Any]) -> List[str]:
    raw = _first(hotel, "images", "photos", "propertyImages")
    if raw is None:
        single = _first(hotel, "image", "photo")
        raw = [single] if single else []
    if isinstance(raw, (str, dict)):
        raw = [raw]
    elif not isinstance(raw, (list, tuple)):
        return []
    images: List[str] = []
    for entry in raw:
        if isinstance(entry, dict):
            url = _first(entry, "url", "large", "src")
        else:
            url = entry
        url = _text(url)
        if url and url not in images:
            images.append(url)
    return images


def _extract_amenities(hotel: Mapping[str, Any]) -> List[str]:
    raw = _first(hotel, "amenities", "facilities", "features")
    names: List[Any] = []
    if isinstance(raw, dict):
        names = [key for key, enabled in raw.items() if enabled is True]
    elif isinstance(raw, (list, tuple)):
        for entry in raw:
            if isinstance(entry, dict):
                names.append(_first(entry, "name", "description", "code"))
            else:
                names.append(entry)
    elif isinstance(raw, str):
        names = raw.split(",")
    amenities: List[str] = []
    for name in names:
        normalized = normalize_amenity(name)
        if normalized and normalized not in amenities:
            amenities.append(normalized)
    return amenities


def _extract_star_rating(hotel: Mapping[str, Any]) -> Optional[float]:
    value = _to_float(_first(hotel, "starRating", "stars", "hotelCategory", "category"))
    if value is None or value <= 0:
        return None
    return min(value, 5.0)


def _extract_rating(hotel: Mapping[str, Any]) -> Tuple[Optional[float], Optional[int]]:
    rating = hotel.get("rating")
    reviews = _first(hotel, "reviewCount", "reviews", "numReviews")
    if isinstance(rating, dict):
        score = _to_float(rating.get("score"))
        if reviews is None:
            reviews = rating.get("reviews")
    else:
        score = _to_float(rating if rating is not None else hotel.get("score"))
    if isinstance(reviews, list):
        reviews = len(reviews)
    return score, _to_int(reviews)


def _extract_price(hotel: Mapping[str, Any]) -> Tuple[Optional[float], Optional[str]]:
    price = hotel.get("price")
    currency = _text(_first(hotel, "currency", "currencyCode"))
    if isinstance(price, dict):
        currency = currency or _text(_first(price, "currency", "currencyCode"))
        price = _first(price, "amount", "total", "value")
    amount = _to_float(price)
    if amount is None:
        amount = _to_float(hotel.get("basePrice"))
    if amount is None:
        pricing = _as_mapping(hotel.get("pricing"))
        amount = _to_float(_first(pricing, "basePrice", "total", "amount"))
        currency = currency or _text(pricing.get("currency"))
    if amount is None:
        offer = _as_mapping(hotel.get("offer"))
        amount = _to_float(_first(offer, "amount", "price"))
        currency = currency or _text(offer.get("currency"))
    if amount is not None and amount <= 0:
        amount = None
    return amount, currency


def _extract_offers(
    hotel: Mapping[str, Any],
    *,
    provider: str,
    currency: Optional[str],
    instant_booking: bool,
) -> Dict[str, ProviderOffer]:
    offers: Dict[str, ProviderOffer] = {}
    entries: Iterable[Any] = ()
    for key in _OFFER_KEYS:
        value = hotel.get(key)
        if isinstance(value, list):
            entries = value
            break
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        platform = normalize_platform_name(_first(entry, "provider", "platform", "source"))
        if platform in offers:
            continue
        offers[platform] = ProviderOffer(
            provider=platform,
            booking_url=_text(_first(entry, "url", "bookingUrl", "link")),
            amount=_to_float(_first(entry, "price", "amount")),
            currency=_text(_first(entry, "currency", "currencyCode")) or currency,
            instant_booking=bool(_first(entry, "instantBooking", "instantBook")) or instant_booking,
        )

    links = _as_mapping(hotel.get("bookingLinks"))
    prices = _as_mapping(hotel.get("prices"))
    for platform_raw in list(links) + [key for key in prices if key not in links]:
        platform = normalize_platform_name(platform_raw)
        if platform in offers:
            continue
        price_data = prices.get(platform_raw)
        if isinstance(price_data, dict):
            amount = _to_float(price_data.get("amount"))
            offer_currency = _text(price_data.get("currency")) or currency
        else:
            amount = _to_float(price_data)
            offer_currency = currency
        offers[platform] = ProviderOffer(
            provider=platform,
            booking_url=_text(links.get(platform_raw)),
            amount=amount,
            currency=offer_currency,
            instant_booking=instant_booking,
        )
    return offers


def build_hotel_record(
    hotel: Any,
    *,
    provider: str,
    default_currency: str = "USD",
    search_area: Optional[str] = None,
    default_booking_url: Optional[str] = None,
) -> Optional[CanonicalHotelRecord]:
    """Map one raw provider entry onto the canonical schema.

    Returns ``None`` when the entry has no usable name.
    """
    if not isinstance(hotel, dict):
        return None
    name = _text(_first(hotel, "name", "title", "hotelName"))
    if name is None:
        return None

    location = _as_mapping(hotel.get("location"))
    address_field = hotel.get("address")
    if isinstance(address_field, dict):
        address = _text(_first(address_field, "addressLine1", "line1", "street"))
        city_fallback = _text(_first(address_field, "cityName", "city"))
        country_fallback = _text(_first(address_field, "countryName", "country"))
    else:
        address = _text(address_field) or _text(_first(location, "address")) or _text(hotel.get("fullAddress"))
        city_fallback = None
        country_fallback = None

    price, price_currency = _extract_price(hotel)
    currency = price_currency or default_currency
    instant_booking = bool(_first(hotel, "instantBooking", "instantBook"))
    offers = _extract_offers(hotel, provider=provider, currency=currency, instant_booking=instant_booking)
    if not offers and price is not None:
        offers[provider] = ProviderOffer(
            provider=provider,
            booking_url=_text(hotel.get("url")) or default_booking_url,
            amount=price,
            currency=currency,
            instant_booking=instant_booking,
        )
    if price is None:
        amounts = [offer.amount for offer in offers.values() if offer.amount and offer.amount > 0]
        price = min(amounts) if amounts else None

    rating_score, review_count = _extract_rating(hotel)
    hotel_id = _text(_first(hotel, "id", "cozyCozyId", "hotelId", "_id"))

    return CanonicalHotelRecord(
        hotel_id=hotel_id or f"{provider}-{uuid.uuid4().hex[:12]}",
        name=name,
        address=address,
        city=_text(_first(hotel, "city")) or _text(location.get("city")) or city_fallback or search_area,
        country=_text(_first(hotel, "country")) or _text(location.get("country")) or country_fallback,
        coordinates=_extract_coordinates(hotel),
        star_rating=_extract_star_rating(hotel),
        rating_score=rating_score,
        review_count=review_count,
        amenities=_extract_amenities(hotel),
        images=_extract_images(hotel),
        description=_text(_first(hotel, "description", "summary", "overview")),
        price=price,
        currency=currency,
        instant_booking=instant_booking,
        cancellation=_text(_first(hotel, "cancellation", "cancellationPolicy", "cancellationInfo")),
        source=provider,
        offers=offers,
        raw=hotel,
    )


def try_build_hotel_record(
    hotel: Any,
    *,
    provider: str,
    default_currency: str = "USD",
    search_area: Optional[str] = None,
    default_booking_url: Optional[str] = None,
) -> Optional[CanonicalHotelRecord]:
    """Like :func:`build_hotel_record` but returns ``None`` for malformed entries."""
    try:
        return build_hotel_record(
            hotel,
            provider=provider,
            default_currency=default_currency,
            search_area=search_area,
            default_booking_url=default_booking_url,
        )
    except (TypeError, ValueError, AttributeError) as exc:
        logger.debug("Skipping unparseable %s entry: %s", provider, exc)
        return None


def build_hotel_records(
    payload: Any,
    *,
    provider: str,
    default_currency: str = "USD",
    search_area: Optional[str] = None,
    default_booking_url: Optional[str] = None,
) -> List[CanonicalHotelRecord]:
    records: List[CanonicalHotelRecord] = []
    skipped = 0
    for entry in extract_results(payload):
        record = try_build_hotel_record(
            entry,
            provider=provider,
            default_currency=default_currency,
            search_area=search_area,
            default_booking_url=default_booking_url,
        )
        if record is None:
            skipped += 1
            continue
        records.append(record)
    if skipped:
        logger.debug("Skipped %s unusable %s entries", skipped, provider)
    return records
