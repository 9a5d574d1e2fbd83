from __future__ import annotations

import pytest

from stay_advisor.hotels import (
    build_hotel_record,
    build_hotel_records,
    extract_results,
    normalize_amenity,
    normalize_platform_name,
    try_build_hotel_record,
)
from stay_advisor.hotels.models import PLACEHOLDER_IMAGE


def test_extract_results_accepts_every_envelope_shape():
    entry = {"name": "A"}
    other = {"name": "B"}

    assert extract_results([entry, other]) == [entry, other]
    assert extract_results({"results": [entry]}) == [entry]
    assert extract_results({"results": {"h1": entry, "h2": other}}) == [entry, other]
    assert extract_results({"data": [other]}) == [other]
    assert extract_results({"hotels": {"x": entry}}) == [entry]
    assert extract_results({"h1": entry, "h2": other}) == [entry, other]


def test_extract_results_rejects_unusable_payloads():
    assert extract_results(None) == []
    assert extract_results("hotels") == []
    assert extract_results({"status": "ok", "count": 0}) == []
    assert extract_results([1, "two", None]) == []


def test_build_hotel_record_maps_meta_search_payload():
    raw = {
        "id": "cc-981",
        "title": "Harbor View Suites",
        "city": "Mumbai",
        "country": "India",
        "lat": "19.0544",
        "lng": 72.8402,
        "starRating": "4",
        "rating": {"score": 8.7, "reviews": 120},
        "amenities": {"wifi": True, "pool": False, "businessCenter": True},
        "photos": [{"url": "https://img.test/1.jpg"}, "https://img.test/2.jpg", "https://img.test/1.jpg"],
        "summary": "Sea-facing rooms",
        "instantBooking": True,
        "cancellationPolicy": "Free cancellation",
        "providers": [
            {"provider": "Booking.com", "url": "https://booking.test/hv", "price": 5200, "currency": "INR"},
            {"platform": "agoda", "link": "https://agoda.test/hv", "amount": "4,900"},
            {"provider": "booking", "url": "https://booking.test/dup", "price": 100},
        ],
    }

    record = build_hotel_record(raw, provider="cozycozy", default_currency="INR", search_area="Mumbai")

    assert record is not None
    assert record.hotel_id == "cc-981"
    assert record.name == "Harbor View Suites"
    assert record.coordinates is not None
    assert record.coordinates.latitude == 19.0544
    assert record.coordinates.longitude == 72.8402
    assert record.star_rating == 4.0
    assert record.rating_score == 8.7
    assert record.review_count == 120
    assert record.amenities == ["wifi", "businesscenter"]
    assert record.images == ["https://img.test/1.jpg", "https://img.test/2.jpg"]
    assert record.description == "Sea-facing rooms"
    assert record.cancellation == "Free cancellation"
    assert list(record.offers) == ["booking.com", "agoda"]
    assert record.offers["booking.com"].booking_url == "https://booking.test/hv"
    assert record.offers["agoda"].amount == 4900.0
    assert record.offers["agoda"].currency == "INR"
    assert record.offers["agoda"].instant_booking is True
    assert record.price == 4900.0
    assert record.best_price == 4900.0
    assert record.best_platform == "agoda"
    assert record.booking_links == {
        "booking.com": "https://booking.test/hv",
        "agoda": "https://agoda.test/hv",
    }


def test_build_hotel_record_maps_nested_pricing_and_drops_zero_coordinates():
    raw = {
        "hotelId": "MMT1",
        "name": "Sea View Inn",
        "pricing": {"basePrice": 7000, "currency": "INR"},
        "location": {
            "address": "Juhu Tara Road",
            "city": "Mumbai",
            "coordinates": {"latitude": 0, "longitude": 0},
        },
        "facilities": [{"name": "Free WiFi"}, {"description": "Swimming Pool"}],
        "sources": [{"platform": "makemytrip", "url": "https://mmt.test/1", "price": 7000}],
    }

    record = build_hotel_record(raw, provider="makemytrip", default_currency="USD")

    assert record is not None
    assert record.hotel_id == "MMT1"
    assert record.address == "Juhu Tara Road"
    assert record.city == "Mumbai"
    assert record.coordinates is None
    assert record.price == 7000.0
    assert record.currency == "INR"
    assert record.amenities == ["freewifi", "swimmingpool"]
    assert list(record.offers) == ["makemytrip"]
    assert record.primary_image == PLACEHOLDER_IMAGE


def test_build_hotel_record_synthesizes_offer_from_plain_price():
    raw = {"name": "Budget Stay", "price": {"amount": 3100, "currency": "EUR"}, "url": "https://direct.test/bs"}

    record = build_hotel_record(raw, provider="inventory", search_area="Goa")

    assert record is not None
    assert record.hotel_id.startswith("inventory-")
    assert record.city == "Goa"
    assert record.currency == "EUR"
    offer = record.offers["inventory"]
    assert offer.amount == 3100.0
    assert offer.booking_url == "https://direct.test/bs"
    assert offer.currency == "EUR"


def test_build_hotel_record_reads_stored_price_and_link_maps():
    raw = {
        "cozyCozyId": "cc-7",
        "name": "Marina Bay Hotel",
        "prices": {"Agoda": {"amount": 8800, "currency": "INR"}, "yatra": 9100},
        "bookingLinks": {"Agoda": "https://agoda.test/mb"},
    }

    record = build_hotel_record(raw, provider="inventory", default_currency="INR")

    assert record is not None
    assert set(record.offers) == {"agoda", "yatra"}
    assert record.offers["agoda"].booking_url == "https://agoda.test/mb"
    assert record.offers["yatra"].booking_url is None
    assert record.best_platform == "agoda"
    assert record.prices["yatra"] == {"amount": 9100.0, "currency": "INR"}


def test_build_hotel_records_skips_unusable_entries():
    payload = {
        "results": [
            {"name": "Kept Hotel", "price": 4000},
            {"title": ""},
            {"id": "no-name"},
            {"name": "Second Kept", "stars": 9},
        ]
    }

    records = build_hotel_records(payload, provider="cozycozy")

    assert [record.name for record in records] == ["Kept Hotel", "Second Kept"]
    assert records[1].star_rating == 5.0


def test_platform_and_amenity_normalization():
    assert normalize_platform_name("Booking.com") == "booking.com"
    assert normalize_platform_name("MMT Hotels") == "makemytrip"
    assert normalize_platform_name("ClearTrip") == "cleartrip"
    assert normalize_platform_name("Some Niche Site") == "some niche site"
    assert normalize_platform_name(None) == "unknown"
    assert normalize_amenity("Business Center") == "businesscenter"
    assert normalize_amenity("business_center") == "businesscenter"
    assert normalize_amenity("businessCenter") == "businesscenter"
    assert normalize_amenity("   ") is None


@pytest.mark.parametrize(
    "raw_price, expected",
    [
        ("4,900", 4900.0),
        ("₹ 4,900", 4900.0),
        ("1,25,000", None),
        ("Rs. 5000", 5000.0),
        ("7200 INR", 7200.0),
        ("1e5", 100000.0),
        ("25.000,00", None),
        ("1.2.3", None),
        ("1e999", None),
        ("NaN", None),
        ("on request", None),
    ],
)
def test_price_strings_are_parsed_strictly(raw_price, expected):
    record = build_hotel_record({"name": "Priced", "price": raw_price}, provider="inventory")

    assert record is not None
    assert record.price == expected


def test_non_iterable_images_and_amenities_are_ignored():
    record = build_hotel_record(
        {"name": "Odd Payload", "images": 5, "amenities": 3, "reviewCount": "1e999"}, provider="inventory"
    )

    assert record is not None
    assert record.images == []
    assert record.amenities == []
    assert record.review_count is None


def test_try_build_hotel_record_returns_none_on_malformed_entry(monkeypatch: pytest.MonkeyPatch):
    def _explode(hotel):
        raise TypeError("'int' object is not iterable")

    monkeypatch.setattr("stay_advisor.hotels.normalizer._extract_images", _explode)

    assert try_build_hotel_record({"name": "Broken"}, provider="inventory") is None
    assert build_hotel_records([{"name": "Broken"}], provider="inventory") == []
