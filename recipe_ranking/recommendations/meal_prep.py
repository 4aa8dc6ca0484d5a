"""
Meal-prep suitability scoring.

A fixed checklist over recipe attributes. The score depends on the recipe
alone, so the same function backs both ranking and the batch recomputation
job in ``recipe_ranking.maintenance``.
"""

from typing import Union

from ..models import CandidateRecipe, MealPrepFlags
from .engine import ComponentScore, ScoringContext

MEAL_PREP_POINTS = {
    "batch_friendly": 30,
    "freezable": 25,
    "weekly_prep_friendly": 20,
    "meal_prep_suitable": 15,
    "storage": 10,
    "servings_large": 10,   # 6+ servings
    "servings_medium": 5,   # 4-5 servings
}


def score_meal_prep(recipe: Union[CandidateRecipe, MealPrepFlags]) -> int:
    """Meal-prep suitability in [0, 100]."""
    flags = recipe.meal_prep if isinstance(recipe, CandidateRecipe) else recipe

    score = 0
    if flags.batch_friendly:
        score += MEAL_PREP_POINTS["batch_friendly"]
    if flags.freezable:
        score += MEAL_PREP_POINTS["freezable"]
    if flags.weekly_prep_friendly:
        score += MEAL_PREP_POINTS["weekly_prep_friendly"]
    if flags.meal_prep_suitable:
        score += MEAL_PREP_POINTS["meal_prep_suitable"]
    if (flags.storage_instructions or "").strip() or flags.fridge_storage_days or flags.freezer_storage_months:
        score += MEAL_PREP_POINTS["storage"]

    servings = flags.servings or 1
    if servings >= 6:
        score += MEAL_PREP_POINTS["servings_large"]
    elif servings >= 4:
        score += MEAL_PREP_POINTS["servings_medium"]

    return max(0, min(100, score))


class MealPrepScorer:
    name = "meal_prep"

    def score(self, recipe: CandidateRecipe, context: ScoringContext) -> ComponentScore:
        return ComponentScore(value=float(score_meal_prep(recipe)))
