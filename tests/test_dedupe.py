from __future__ import annotations

from stay_advisor.advisory.dedupe import dedupe, dedupe_key
from stay_advisor.hotels.models import CanonicalHotelRecord, ProviderOffer


def _hotel(hotel_id: str, name: str, *offers: ProviderOffer, city: str = "Mumbai") -> CanonicalHotelRecord:
    return CanonicalHotelRecord(
        hotel_id=hotel_id,
        name=name,
        city=city,
        offers={offer.provider: offer for offer in offers},
    )


def test_names_differing_in_case_and_spacing_collapse_into_one_record():
    first = _hotel("a", "Grand Hotel", ProviderOffer("booking.com", "https://booking.test/g", 5000.0))
    second = _hotel(
        "b",
        "  grand   hotel ",
        ProviderOffer("agoda", "https://agoda.test/g", 4800.0),
        ProviderOffer("booking.com", "https://booking.test/other", 1.0),
    )

    result = dedupe([first, second])

    assert len(result) == 1
    merged = result[0]
    assert merged is first
    assert set(merged.offers) == {"booking.com", "agoda"}
    assert merged.offers["booking.com"].booking_url == "https://booking.test/g"
    assert merged.offers["booking.com"].amount == 5000.0
    assert merged.best_platform == "agoda"


def test_first_appearance_order_is_preserved():
    records = [
        _hotel("1", "Sea Breeze"),
        _hotel("2", "Palm Court"),
        _hotel("3", "SEA BREEZE"),
        _hotel("4", "Hilltop Inn"),
    ]

    result = dedupe(records)

    assert [record.hotel_id for record in result] == ["1", "2", "4"]


def test_same_name_in_different_cities_still_merges():
    mumbai = _hotel("m", "Grand Hotel", ProviderOffer("yatra", amount=3000.0), city="Mumbai")
    delhi = _hotel("d", "Grand Hotel", ProviderOffer("cleartrip", amount=3500.0), city="Delhi")

    result = dedupe([mumbai, delhi])

    assert len(result) == 1
    assert result[0].city == "Mumbai"
    assert set(result[0].offers) == {"yatra", "cleartrip"}


def test_dedupe_key_strips_all_whitespace():
    assert dedupe_key(_hotel("x", "  The\tOberoi \n Mumbai ")) == "theoberoimumbai"
