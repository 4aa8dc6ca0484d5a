"""
Models package for recipe ranking data.

This package splits the models into:
- recipe_models: service-boundary models (recipes, goals, privacy, results)
- behavior_models: raw behavioral records and the derived behavior profile
"""

from .behavior_models import (
    BehaviorEntry,
    BehaviorProfile,
    FeedbackRecord,
    IngredientCostRecord,
    MealFeedback,
    MealHistoryRecord,
    RecipeSnapshot,
    SavedRecord,
)
from .recipe_models import (
    CandidateRecipe,
    ComponentScoreSet,
    MacroGoals,
    MealPrepFlags,
    PrivacySettings,
    RankedResult,
    RecipeAvailabilityAnalysis,
    ScoringWeights,
)

__all__ = [
    # Behavioral records
    "BehaviorEntry",
    "BehaviorProfile",
    "FeedbackRecord",
    "IngredientCostRecord",
    "MealFeedback",
    "MealHistoryRecord",
    "RecipeSnapshot",
    "SavedRecord",

    # Recipes and results
    "CandidateRecipe",
    "ComponentScoreSet",
    "MacroGoals",
    "MealPrepFlags",
    "PrivacySettings",
    "RankedResult",
    "RecipeAvailabilityAnalysis",
    "ScoringWeights",
]
