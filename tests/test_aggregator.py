from __future__ import annotations

import asyncio
from datetime import date, datetime, timezone
from typing import List

import pytest

from stay_advisor.advisory.aggregator import Aggregator
from stay_advisor.advisory.preferences import SearchPreferences
from stay_advisor.hotels.models import CanonicalHotelRecord
from stay_advisor.services.base import ProviderAdapter

_NOW = datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)


def _prefs(*areas: str) -> SearchPreferences:
    return SearchPreferences.parse(
        {
            "target_areas": list(areas) or ["Mumbai"],
            "check_in": date(2025, 3, 1),
            "check_out": date(2025, 3, 4),
        }
    )


class _DummyAdapter(ProviderAdapter):
    def __init__(self, name: str, hotels: int = 1, *, error: Exception | None = None) -> None:
        super().__init__(timeout_s=1.0)
        self.name = name
        self._hotels = hotels
        self._error = error
        self.areas: List[str] = []

    async def _fetch(self, area, stay, guests, filters):
        self.areas.append(area)
        if self._error is not None:
            raise self._error
        return [
            CanonicalHotelRecord(hotel_id=f"{self.name}-{area}-{index}", name=f"{self.name} {area} {index}", city=area)
            for index in range(self._hotels)
        ]


class _BarrierAdapter(ProviderAdapter):
    """Finishes only once every sibling call has started."""

    def __init__(self, name: str, started: List[str], expected: int, release: asyncio.Event) -> None:
        super().__init__(timeout_s=1.0)
        self.name = name
        self._started = started
        self._expected = expected
        self._release = release

    async def _fetch(self, area, stay, guests, filters):
        self._started.append(self.name)
        if len(self._started) == self._expected:
            self._release.set()
        await self._release.wait()
        return [CanonicalHotelRecord(hotel_id=self.name, name=self.name, city=area)]


class _ExplodingAdapter(_DummyAdapter):
    async def search_with_outcome(self, area, stay, guests, filters=None):
        raise RuntimeError("adapter wiring broke")


@pytest.mark.asyncio
async def test_adapters_run_concurrently() -> None:
    started: List[str] = []
    release = asyncio.Event()
    adapters = [_BarrierAdapter(name, started, 3, release) for name in ("a", "b", "c")]

    result = await asyncio.wait_for(Aggregator(adapters).aggregate_with_outcomes(_prefs()), timeout=0.5)

    assert sorted(started) == ["a", "b", "c"]
    assert [hotel.hotel_id for hotel in result.hotels] == ["a", "b", "c"]
    assert result.used_fallback is False


@pytest.mark.asyncio
async def test_failing_adapter_does_not_affect_others() -> None:
    healthy = _DummyAdapter("healthy", hotels=2)
    failing = _DummyAdapter("failing", error=ConnectionError("down"))

    result = await Aggregator([failing, healthy]).aggregate_with_outcomes(_prefs())

    assert [hotel.hotel_id for hotel in result.hotels] == ["healthy-Mumbai-0", "healthy-Mumbai-1"]
    assert [outcome.ok for outcome in result.outcomes] == [False, True]
    assert result.outcomes[0].error_type == "unknown"


@pytest.mark.asyncio
async def test_primary_area_results_come_before_secondary_areas() -> None:
    first = _DummyAdapter("one")
    second = _DummyAdapter("two")

    hotels = await Aggregator([first, second]).aggregate(_prefs("Mumbai", "Pune", "Goa"))

    assert [hotel.city for hotel in hotels] == ["Mumbai", "Mumbai", "Pune", "Pune", "Goa", "Goa"]
    assert [hotel.hotel_id.split("-")[0] for hotel in hotels[:2]] == ["one", "two"]
    assert first.areas == ["Mumbai", "Pune", "Goa"]


@pytest.mark.asyncio
async def test_fallback_when_every_adapter_is_empty() -> None:
    adapters = [_DummyAdapter("empty", hotels=0), _DummyAdapter("broken", error=TimeoutError())]

    result = await Aggregator(adapters, clock=lambda: _NOW).aggregate_with_outcomes(_prefs())

    assert result.used_fallback is True
    assert len(result.hotels) == 3
    stamp = int(_NOW.timestamp() * 1000)
    assert [hotel.hotel_id for hotel in result.hotels] == [f"HTL{stamp}1", f"HTL{stamp}2", f"HTL{stamp}3"]
    assert {hotel.city for hotel in result.hotels} == {"MUMBAI"}


@pytest.mark.asyncio
async def test_exception_escaping_an_adapter_is_recorded() -> None:
    exploding = _ExplodingAdapter("exploding")
    healthy = _DummyAdapter("healthy")

    result = await Aggregator([exploding, healthy]).aggregate_with_outcomes(_prefs())

    assert len(result.hotels) == 1
    assert result.outcomes[0].provider == "exploding"
    assert "adapter wiring broke" in result.outcomes[0].error


@pytest.mark.asyncio
async def test_no_adapters_falls_back() -> None:
    hotels = await Aggregator([]).aggregate(_prefs())

    assert len(hotels) == 3
    assert all(hotel.is_synthetic for hotel in hotels)
