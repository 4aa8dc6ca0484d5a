"""
Recommendation engine package for personalized recipe ordering.

Provides pluggable component scorers and an engine that blends them, reusable
by the ranking service or batch jobs without any web-framework dependency.
"""

from .availability import (
    DEFAULT_MIN_AVAILABILITY_SCORE,
    AvailabilityScorer,
    analyze_availability,
    availability_score,
    recipe_ingredient_names,
)
from .behavioral import BehavioralAffinityScorer, similarity
from .engine import (
    COMPONENT_NAMES,
    ComponentScore,
    ComponentScorer,
    RankingEngine,
    ScoringContext,
    build_default_engine,
    composite_score,
)
from .macro_fit import MacroFitScorer
from .meal_prep import MealPrepScorer, score_meal_prep

__all__ = [
    "COMPONENT_NAMES",
    "DEFAULT_MIN_AVAILABILITY_SCORE",
    "AvailabilityScorer",
    "BehavioralAffinityScorer",
    "ComponentScore",
    "ComponentScorer",
    "MacroFitScorer",
    "MealPrepScorer",
    "RankingEngine",
    "ScoringContext",
    "analyze_availability",
    "availability_score",
    "build_default_engine",
    "composite_score",
    "recipe_ingredient_names",
    "score_meal_prep",
    "similarity",
]
