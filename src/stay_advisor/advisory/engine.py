"""Entry point tying aggregation, deduplication and ranking together."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

from stay_advisor.config.settings import Settings
from stay_advisor.hotels.models import RecommendationResult
from stay_advisor.services.base import ProviderAdapter
from stay_advisor.services.registry import build_adapters

from .aggregator import Aggregator
from .dedupe import dedupe
from .geo import AreaMatcher
from .preferences import SearchPreferences
from .ranking import Ranker
from .scoring import ScoringWeights

logger = logging.getLogger(__name__)

PreferencesInput = Union[SearchPreferences, Mapping[str, Any]]


class RecommendationEngine:
    """Generate ranked hotel recommendations for one set of preferences.

    Adapters are created once per engine, so each keeps its own rate gate
    across runs.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        adapters: Optional[Sequence[ProviderAdapter]] = None,
        area_matcher: Optional[AreaMatcher] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.adapters = list(adapters) if adapters is not None else build_adapters(self.settings)
        self.aggregator = Aggregator(self.adapters, clock=clock)
        self.ranker = Ranker(
            limit=self.settings.result_limit,
            threshold=self.settings.acceptance_threshold,
            relaxed_threshold=self.settings.relaxed_acceptance_threshold,
            weights=ScoringWeights.from_settings(self.settings),
            area_matcher=area_matcher,
            clock=clock,
        )

    async def generate(
        self,
        preferences: PreferencesInput,
        *,
        limit: Optional[int] = None,
    ) -> RecommendationResult:
        """Validate, aggregate, dedupe and rank.

        Raises :class:`~stay_advisor.core.errors.InvalidPreferencesError` before
        any provider is called when ``preferences`` are invalid. Otherwise always
        returns a non-empty result.
        """
        prefs = SearchPreferences.parse(self._with_defaults(preferences))
        logger.info(
            "Generating recommendations for %s (%s to %s, budget %s-%s)",
            ", ".join(prefs.target_areas),
            prefs.check_in,
            prefs.check_out,
            prefs.budget_min,
            prefs.budget_max if prefs.budget_max is not None else "open",
        )
        aggregation = await self.aggregator.aggregate_with_outcomes(prefs)
        candidates = dedupe(aggregation.hotels)
        logger.info("%s unique hotels after deduplication", len(candidates))
        return self.ranker.rank(
            candidates,
            prefs,
            limit=limit,
            used_fallback=aggregation.used_fallback,
            outcomes=aggregation.outcomes,
        )

    def _with_defaults(self, preferences: PreferencesInput) -> PreferencesInput:
        if isinstance(preferences, SearchPreferences) or not isinstance(preferences, Mapping):
            return preferences
        if preferences.get("guests") is not None:
            return preferences
        return {**preferences, "guests": self.settings.default_guest_count}

    def generate_sync(
        self,
        preferences: PreferencesInput,
        *,
        limit: Optional[int] = None,
    ) -> RecommendationResult:
        return asyncio.run(self.generate(preferences, limit=limit))

    async def aclose(self) -> None:
        for adapter in self.adapters:
            await adapter.aclose()


_engines: Dict[Tuple[Any, ...], RecommendationEngine] = {}


def get_engine(
    settings: Optional[Settings] = None,
    *,
    adapters: Optional[Sequence[ProviderAdapter]] = None,
    area_matcher: Optional[AreaMatcher] = None,
) -> RecommendationEngine:
    """Return the shared engine for this combination of collaborators.

    Engines are keyed by object identity and hold references to their
    collaborators, so the same ``settings`` always map to the same adapters
    and rate gates until :func:`close_engines` is called.
    """
    key = (
        id(settings),
        id(area_matcher),
        None if adapters is None else tuple(id(adapter) for adapter in adapters),
    )
    engine = _engines.get(key)
    if engine is None:
        engine = RecommendationEngine(settings, adapters=adapters, area_matcher=area_matcher)
        _engines[key] = engine
        logger.debug("Created recommendation engine with %s adapters", len(engine.adapters))
    return engine


def close_engines() -> None:
    """Close and forget every shared engine."""
    engines = list(_engines.values())
    _engines.clear()
    for engine in engines:
        asyncio.run(engine.aclose())


def generate_recommendations(
    preferences: PreferencesInput,
    *,
    settings: Optional[Settings] = None,
    adapters: Optional[Sequence[ProviderAdapter]] = None,
    area_matcher: Optional[AreaMatcher] = None,
    limit: Optional[int] = None,
) -> RecommendationResult:
    """Blocking convenience wrapper around :meth:`RecommendationEngine.generate`.

    Repeated calls reuse one engine per ``settings`` object, so provider
    pacing carries over between requests.
    """
    engine = get_engine(settings, adapters=adapters, area_matcher=area_matcher)
    return engine.generate_sync(preferences, limit=limit)


__all__ = ["RecommendationEngine", "close_engines", "generate_recommendations", "get_engine"]
