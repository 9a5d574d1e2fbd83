from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from stay_advisor.advisory.preferences import SearchPreferences
from stay_advisor.advisory.ranking import Ranker, order_recommendations
from stay_advisor.hotels.models import (
    CanonicalHotelRecord,
    ConferenceProximity,
    Coordinates,
    LocationMatch,
    ProviderOffer,
    Recommendation,
    ScoreBreakdown,
)

_NOW = datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)


def _prefs(**overrides) -> SearchPreferences:
    data = {
        "target_areas": ["Mumbai"],
        "check_in": date(2025, 3, 1),
        "check_out": date(2025, 3, 4),
        "budget_min": 20000,
        "budget_max": 30000,
        "preferred_star_rating": 4,
    }
    data.update(overrides)
    return SearchPreferences.parse(data)


def _rec(hotel_id: str, score: float) -> Recommendation:
    breakdown = ScoreBreakdown(
        price_match=score,
        amenities_match=score,
        star_rating_match=True,
        location_match=LocationMatch(score, None),
        conference_proximity=ConferenceProximity(100.0, None, True),
        relevance_score=score,
    )
    return Recommendation(hotel=CanonicalHotelRecord(hotel_id=hotel_id, name=hotel_id), scores=breakdown)


def _hotel(hotel_id: str, price: float, city: str = "Mumbai") -> CanonicalHotelRecord:
    return CanonicalHotelRecord(
        hotel_id=hotel_id,
        name=f"Hotel {hotel_id}",
        city=city,
        coordinates=Coordinates(19.07, 72.87),
        star_rating=4.0,
        offers={"agoda": ProviderOffer("agoda", "https://agoda.test", price)},
    )


def test_orders_by_relevance_descending():
    ordered = order_recommendations([_rec("a", 40), _rec("b", 90), _rec("c", 65)])

    assert [item.relevance_score for item in ordered] == [90, 65, 40]


def test_ties_keep_incoming_order_and_limit_truncates():
    ordered = order_recommendations([_rec("x", 70), _rec("y", 80), _rec("z", 70), _rec("w", 70)], limit=3)

    assert [item.hotel.hotel_id for item in ordered] == ["y", "x", "z"]


def test_rank_respects_limit_and_reports_counts():
    ranker = Ranker(limit=2, clock=lambda: _NOW)
    candidates = [_hotel("1", 25000), _hotel("2", 90000), _hotel("3", 24000, city="Pune")]

    result = ranker.rank(candidates, _prefs())

    assert len(result) == 2
    assert result.total_candidates == 3
    assert result.filtered_count == 3
    assert result.generated_at == _NOW
    assert result.used_fallback is False
    assert result.recommendations[0].hotel.hotel_id == "1"
    scores = [item.relevance_score for item in result.recommendations]
    assert scores == sorted(scores, reverse=True)


def test_call_limit_overrides_default():
    ranker = Ranker(limit=1)
    candidates = [_hotel(str(index), 25000) for index in range(4)]

    assert len(ranker.rank(candidates, _prefs(), limit=3)) == 3


def test_threshold_drops_weak_candidates():
    ranker = Ranker(threshold=80.0)

    result = ranker.rank([_hotel("good", 25000), _hotel("bad", 500000, city="Delhi")], _prefs())

    assert [item.hotel.hotel_id for item in result.recommendations] == ["good"]
    assert result.filtered_count == 1


def test_relaxed_threshold_applies_when_nothing_passes():
    ranker = Ranker(threshold=99.5, relaxed_threshold=10.0)

    result = ranker.rank([_hotel("a", 500000, city="Delhi"), _hotel("b", 21000)], _prefs())

    assert {item.hotel.hotel_id for item in result.recommendations} == {"a", "b"}
    assert result.used_fallback is False


def test_fallback_hotels_are_ranked_when_nothing_survives():
    ranker = Ranker(threshold=99.5, relaxed_threshold=99.5, clock=lambda: _NOW)

    result = ranker.rank([_hotel("a", 500000, city="Delhi")], _prefs())

    assert result.used_fallback is True
    assert len(result) == 3
    assert result.total_candidates == 4
    assert all(item.hotel.is_synthetic for item in result.recommendations)


def test_empty_candidates_fall_back():
    result = Ranker(clock=lambda: _NOW).rank([], _prefs())

    assert result.used_fallback is True
    assert sorted(item.hotel.star_rating for item in result.recommendations) == [3.0, 4.0, 5.0]
    assert result.total_candidates == 3


def test_limit_must_be_positive():
    with pytest.raises(ValueError):
        Ranker(limit=0)


@pytest.mark.parametrize("limit", [0, -1])
def test_call_limit_must_be_positive(limit):
    candidates = [CanonicalHotelRecord(hotel_id="a", name="A", city="Mumbai")]

    with pytest.raises(ValueError):
        Ranker().rank(candidates, _prefs(), limit=limit)
