"""Concurrent fan-out over every configured provider adapter."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple

from stay_advisor.hotels.models import CanonicalHotelRecord, ProviderOutcome
from stay_advisor.services.base import ProviderAdapter

from .fallback import synthesize_fallback_hotels
from .preferences import SearchPreferences

logger = logging.getLogger(__name__)

FallbackFactory = Callable[..., List[CanonicalHotelRecord]]


@dataclass(slots=True)
class AggregationResult:
    hotels: List[CanonicalHotelRecord]
    outcomes: List[ProviderOutcome] = field(default_factory=list)
    used_fallback: bool = False


class Aggregator:
    """Query every adapter for every target area at once and concatenate results.

    The primary area and each secondary area are searched concurrently. The
    join waits for every call to settle; one failing or slow adapter never
    cancels its siblings.
    """

    def __init__(
        self,
        adapters: Sequence[ProviderAdapter],
        *,
        fallback: FallbackFactory = synthesize_fallback_hotels,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.adapters = list(adapters)
        self._fallback = fallback
        self._clock = clock

    async def aggregate(self, preferences: SearchPreferences) -> List[CanonicalHotelRecord]:
        result = await self.aggregate_with_outcomes(preferences)
        return result.hotels

    async def aggregate_with_outcomes(self, preferences: SearchPreferences) -> AggregationResult:
        calls: List[Tuple[ProviderAdapter, str]] = [
            (adapter, area) for area in preferences.target_areas for adapter in self.adapters
        ]
        stay = preferences.stay
        filters = preferences.provider_filters()
        logger.info(
            "Aggregating %s provider calls across %s area(s)",
            len(calls),
            len(preferences.target_areas),
        )
        settled = await asyncio.gather(
            *(adapter.search_with_outcome(area, stay, preferences.guests, filters) for adapter, area in calls),
            return_exceptions=True,
        )

        hotels: List[CanonicalHotelRecord] = []
        outcomes: List[ProviderOutcome] = []
        for (adapter, area), result in zip(calls, settled):
            if isinstance(result, BaseException):
                logger.warning("%s search for '%s' raised %s", adapter.name, area, result)
                outcomes.append(
                    ProviderOutcome(
                        provider=adapter.name,
                        area=area,
                        error=f"{type(result).__name__}: {result}",
                        error_type="unknown",
                    )
                )
                continue
            found, outcome = result
            hotels.extend(found)
            outcomes.append(outcome)

        failed = sum(1 for outcome in outcomes if not outcome.ok)
        logger.info(
            "Aggregated %s candidates from %s calls (%s failed)", len(hotels), len(outcomes), failed
        )
        if hotels:
            return AggregationResult(hotels=hotels, outcomes=outcomes)

        logger.warning("No provider returned hotels; using fallback hotels")
        now = self._clock() if self._clock else None
        return AggregationResult(
            hotels=self._fallback(preferences, now=now),
            outcomes=outcomes,
            used_fallback=True,
        )


__all__ = ["AggregationResult", "Aggregator"]
