# Recipe ranking package: personalized recipe scoring and ranking

from .exceptions import DataStoreError, RankingCancelled, RecipeRankingError
from .logging_config import (
    ThreadSafeLoggingConfig,
    get_logger,
    setup_logging,
    stop_logging,
)
from .maintenance import MealPrepScoreDistribution, recompute_meal_prep_scores
from .models import (
    BehaviorProfile,
    CandidateRecipe,
    ComponentScoreSet,
    FeedbackRecord,
    IngredientCostRecord,
    MacroGoals,
    MealHistoryRecord,
    MealPrepFlags,
    PrivacySettings,
    RankedResult,
    RecipeAvailabilityAnalysis,
    SavedRecord,
    ScoringWeights,
)
from .privacy import GateDecision, PrivacyGate, privacy_from_request, resolve_privacy_settings
from .recommendations import RankingEngine, build_default_engine, score_meal_prep
from .service import RankingService
from .signals import build_behavior_profile, normalize_ingredient_name
from .stores import InMemoryDataStore, JsonUserDataStore

__all__ = [
    "DataStoreError",
    "RankingCancelled",
    "RecipeRankingError",
    "ThreadSafeLoggingConfig",
    "get_logger",
    "setup_logging",
    "stop_logging",
    "MealPrepScoreDistribution",
    "recompute_meal_prep_scores",
    "BehaviorProfile",
    "CandidateRecipe",
    "ComponentScoreSet",
    "FeedbackRecord",
    "IngredientCostRecord",
    "MacroGoals",
    "MealHistoryRecord",
    "MealPrepFlags",
    "PrivacySettings",
    "RankedResult",
    "RecipeAvailabilityAnalysis",
    "SavedRecord",
    "ScoringWeights",
    "GateDecision",
    "PrivacyGate",
    "privacy_from_request",
    "resolve_privacy_settings",
    "RankingEngine",
    "build_default_engine",
    "score_meal_prep",
    "RankingService",
    "build_behavior_profile",
    "normalize_ingredient_name",
    "InMemoryDataStore",
    "JsonUserDataStore",
]
