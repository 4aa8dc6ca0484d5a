"""
Macro fit scoring.

Compares a recipe's macros to the user's per-meal budget (daily goal divided
by meals per day) using the average relative deviation:

    score = 100 / (1 + sensitivity * mean(|actual - target| / target))
"""

from typing import Dict, Optional

from ..models import CandidateRecipe, MacroGoals
from .engine import ComponentScore, ScoringContext, clamp_score

DEFAULT_MEALS_PER_DAY = 3
NEUTRAL_MACRO_SCORE = 60.0
MACRO_DEVIATION_SENSITIVITY = 1.0

MACRO_FIELDS = ("calories", "protein", "carbs", "fat")


def per_meal_targets(goals: MacroGoals, meals_per_day: int = DEFAULT_MEALS_PER_DAY) -> Dict[str, float]:
    return {name: getattr(goals, name) / meals_per_day for name in MACRO_FIELDS}


def macro_deviations(recipe: CandidateRecipe, targets: Dict[str, float]) -> Dict[str, float]:
    """Relative deviation per macro; macros with no positive target are skipped."""
    deviations = {}
    for name in MACRO_FIELDS:
        target = targets.get(name, 0.0)
        if target <= 0:
            continue
        deviations[name] = abs(getattr(recipe, name) - target) / target
    return deviations


class MacroFitScorer:
    """Closeness of a recipe's macros to the per-meal budget."""

    name = "macro_fit"

    def __init__(
        self,
        meals_per_day: int = DEFAULT_MEALS_PER_DAY,
        neutral_score: float = NEUTRAL_MACRO_SCORE,
        sensitivity: float = MACRO_DEVIATION_SENSITIVITY,
    ):
        if meals_per_day < 1:
            raise ValueError("meals_per_day must be at least 1")
        self.meals_per_day = meals_per_day
        self.neutral_score = clamp_score(neutral_score)
        self.sensitivity = sensitivity

    def score(self, recipe: CandidateRecipe, context: ScoringContext) -> ComponentScore:
        return self.score_against(recipe, context.macro_goals)

    def score_against(self, recipe: CandidateRecipe, goals: Optional[MacroGoals]) -> ComponentScore:
        if goals is None:
            return ComponentScore(value=self.neutral_score, metadata={"reason": "no_goals"})

        deviations = macro_deviations(recipe, per_meal_targets(goals, self.meals_per_day))
        if not deviations:
            return ComponentScore(value=self.neutral_score, metadata={"reason": "no_positive_targets"})

        average = sum(deviations.values()) / len(deviations)
        value = clamp_score(100.0 / (1.0 + self.sensitivity * average))
        return ComponentScore(
            value=value,
            metadata={
                "average_deviation": round(average, 4),
                "deviations": {name: round(dev, 4) for name, dev in deviations.items()},
            },
        )
