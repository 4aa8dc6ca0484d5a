"""
Batch maintenance for persisted recipe scores.

Recomputes the meal-prep score of every recipe in a catalog, independent of
any ranking request, and summarizes the resulting distribution.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from tqdm import tqdm

from .models import CandidateRecipe
from .recommendations import score_meal_prep

_LOG = logging.getLogger("recipe_ranking.maintenance")

MEAL_PREP_SUITABLE_THRESHOLD = 60


def score_bucket(score: int) -> str:
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "good"
    if score >= 40:
        return "okay"
    return "poor"


@dataclass
class MealPrepScoreDistribution:
    excellent: int = 0  # 80-100
    good: int = 0       # 60-79
    okay: int = 0       # 40-59
    poor: int = 0       # 0-39
    changed: int = 0

    def record(self, score: int) -> None:
        bucket = score_bucket(score)
        setattr(self, bucket, getattr(self, bucket) + 1)

    @property
    def total(self) -> int:
        return self.excellent + self.good + self.okay + self.poor

    @property
    def suitable_for_meal_prep(self) -> int:
        return self.excellent + self.good

    def log_summary(self, logger: logging.Logger = _LOG) -> None:
        logger.info("Recomputed meal prep scores for %d recipes (%d changed)", self.total, self.changed)
        logger.info("  Excellent (80-100): %d", self.excellent)
        logger.info("  Good (60-79): %d", self.good)
        logger.info("  Okay (40-59): %d", self.okay)
        logger.info("  Poor (0-39): %d", self.poor)
        logger.info(
            "%d recipes suitable for meal prep mode (score >= %d)",
            self.suitable_for_meal_prep, MEAL_PREP_SUITABLE_THRESHOLD,
        )


def recompute_meal_prep_scores(
    recipes: Iterable[CandidateRecipe],
    show_progress: bool = True,
) -> Tuple[List[CandidateRecipe], MealPrepScoreDistribution]:
    """Return copies of ``recipes`` with ``meal_prep_score`` refreshed."""
    recipes = list(recipes)
    distribution = MealPrepScoreDistribution()
    updated: List[CandidateRecipe] = []

    for recipe in tqdm(recipes, total=len(recipes), desc="Scoring meal prep", disable=not show_progress):
        score = score_meal_prep(recipe)
        if recipe.meal_prep_score != score:
            distribution.changed += 1
        distribution.record(score)
        updated.append(recipe.model_copy(update={"meal_prep_score": score}))

    return updated, distribution
