"""
Ingredient availability scoring.

An ingredient counts as available to a user when they have at least one prior
purchase-cost record for it. The score is the rounded share of available
ingredients; a recipe without ingredients is trivially 100. Availability is a
feasibility signal: by default it prunes candidates before ranking instead of
being blended into the composite.
"""

import math
from typing import FrozenSet, Iterable, List

from ..models import CandidateRecipe, RecipeAvailabilityAnalysis
from ..signals import normalize_ingredient_name
from .engine import ComponentScore, ScoringContext

DEFAULT_MIN_AVAILABILITY_SCORE = 70
# Used when availability history was not fetched (personalization off).
NEUTRAL_AVAILABILITY_SCORE = 100


def recipe_ingredient_names(ingredients: Iterable[str]) -> List[str]:
    names = []
    for line in ingredients or ():
        name = normalize_ingredient_name(line)
        if name:
            names.append(name)
    return names


def availability_score(names: List[str], available: FrozenSet[str]) -> int:
    if not names:
        return 100
    available_count = sum(1 for name in names if name in available)
    return int(math.floor(available_count / len(names) * 100 + 0.5))


def analyze_availability(recipe: CandidateRecipe, available: FrozenSet[str]) -> RecipeAvailabilityAnalysis:
    """Build the availability report shown alongside a recipe."""
    names = recipe_ingredient_names(recipe.ingredients)
    unavailable = [name for name in names if name not in available]
    overall = availability_score(names, available)

    recommendations = []
    if unavailable:
        recommendations.append(
            f"{len(unavailable)} ingredient(s) may not be available: {', '.join(unavailable[:3])}"
        )
    if overall < 50:
        recommendations.append("Many ingredients may be unavailable. Consider alternative recipes.")
    elif overall >= 80:
        recommendations.append("All ingredients should be readily available!")

    return RecipeAvailabilityAnalysis(
        recipe_id=recipe.id,
        title=recipe.title,
        overall_availability=overall,
        available_ingredients=len(names) - len(unavailable),
        total_ingredients=len(names),
        unavailable_ingredients=unavailable,
        recommendations=recommendations,
    )


class AvailabilityScorer:
    name = "availability"

    def score(self, recipe: CandidateRecipe, context: ScoringContext) -> ComponentScore:
        if context.available_ingredients is None:
            return ComponentScore(value=float(NEUTRAL_AVAILABILITY_SCORE), metadata={"reason": "not_fetched"})
        names = recipe_ingredient_names(recipe.ingredients)
        value = availability_score(names, context.available_ingredients)
        missing = [name for name in names if name not in context.available_ingredients]
        return ComponentScore(value=float(value), metadata={"missing": missing} if missing else {})
