"""Hotel recommendation pipeline: aggregation, scoring and ranking."""

from .aggregator import AggregationResult, Aggregator
from .dedupe import dedupe, dedupe_key
from .engine import RecommendationEngine, close_engines, generate_recommendations, get_engine
from .fallback import synthesize_fallback_hotels
from .geo import AreaMatcher, TextualAreaMatcher, haversine_km, score_conference_proximity, score_location
from .preferences import ConferenceVenue, SearchPreferences
from .ranking import Ranker, order_recommendations
from .scoring import ScoringWeights, score_hotel

__all__ = [
    "AggregationResult",
    "Aggregator",
    "AreaMatcher",
    "ConferenceVenue",
    "Ranker",
    "RecommendationEngine",
    "ScoringWeights",
    "SearchPreferences",
    "TextualAreaMatcher",
    "close_engines",
    "dedupe",
    "dedupe_key",
    "generate_recommendations",
    "get_engine",
    "haversine_km",
    "order_recommendations",
    "score_conference_proximity",
    "score_hotel",
    "score_location",
    "synthesize_fallback_hotels",
]
