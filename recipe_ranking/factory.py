"""
Factory for creating the ranking module from configuration values.
"""
from pathlib import Path
from typing import Dict, Optional

from .models import ScoringWeights
from .recommendations import build_default_engine
from .service import RankingService
from .stores import JsonUserDataStore


def create_ranking_module(
    user_data_dir: Path,
    recipe_catalog_path: Optional[Path] = None,
    weights: Optional[Dict[str, float]] = None,
    meals_per_day: int = 3,
    neutral_macro_score: float = 60.0,
    recency_half_life_days: float = 30.0,
    min_availability_score: int = 70,
    max_workers: int = 4,
) -> dict:
    """Create the ranking service backed by per-user JSON files.

    Args:
        user_data_dir: Directory holding ``<uid>.json`` user data files
        recipe_catalog_path: JSON list of recipes for id lookups
        weights: Default weight vector; validated here so a bad config
            fails at startup
        meals_per_day: Divisor turning daily macro goals into per-meal targets
        neutral_macro_score: Macro fit score for users without goals
        recency_half_life_days: Half-life of behavioral signals
        min_availability_score: Default availability filter threshold
        max_workers: Scoring thread pool size

    Returns:
        Dictionary containing the service, engine and store
    """
    store = JsonUserDataStore(Path(user_data_dir), Path(recipe_catalog_path) if recipe_catalog_path else None)
    engine = build_default_engine(
        meals_per_day=meals_per_day,
        neutral_macro_score=neutral_macro_score,
        recency_half_life_days=recency_half_life_days,
    )
    service = RankingService(
        behavioral_store=store,
        preference_store=store,
        ingredient_cost_store=store,
        recipe_store=store,
        engine=engine,
        default_weights=ScoringWeights(**weights) if weights else None,
        max_workers=max_workers,
        min_availability_score=min_availability_score,
    )
    return {
        "service": service,
        "engine": engine,
        "store": store,
    }
