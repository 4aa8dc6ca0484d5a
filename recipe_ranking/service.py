"""
Ranking service - entry point of the recipe ranking engine.

Each ``rank`` call runs in two phases:

1. Fetch: the privacy gate loads the behavior profile and macro goals, and
   availability history is looked up once per distinct ingredient name across
   all candidates. All I/O happens here.
2. Score: candidates are scored in a thread pool against the immutable
   inputs gathered in phase 1, then blended and sorted.
"""

import logging
from datetime import datetime, timezone
from threading import Event
from typing import Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Union

from .exceptions import RankingCancelled, RecipeRankingError
from .models import (
    CandidateRecipe,
    PrivacySettings,
    RankedResult,
    RecipeAvailabilityAnalysis,
    ScoringWeights,
)
from .privacy import PrivacyGate
from .recommendations import (
    DEFAULT_MIN_AVAILABILITY_SCORE,
    RankingEngine,
    ScoringContext,
    analyze_availability,
    availability_score,
    build_default_engine,
    recipe_ingredient_names,
    score_meal_prep,
)
from .stores import BehavioralStore, IngredientCostStore, PreferenceStore, RecipeStore

_LOG = logging.getLogger("recipe_ranking.service")

WeightsInput = Union[ScoringWeights, Mapping[str, float], None]


class RankingService:
    """Orchestrates fetching, gating, scoring and sorting."""

    def __init__(
        self,
        behavioral_store: BehavioralStore,
        preference_store: PreferenceStore,
        ingredient_cost_store: IngredientCostStore,
        recipe_store: Optional[RecipeStore] = None,
        engine: Optional[RankingEngine] = None,
        default_weights: Optional[ScoringWeights] = None,
        max_workers: int = 4,
        min_availability_score: int = DEFAULT_MIN_AVAILABILITY_SCORE,
        now_fn: Optional[Callable[[], datetime]] = None,
    ):
        self.gate = PrivacyGate(behavioral_store, preference_store)
        self.ingredient_cost_store = ingredient_cost_store
        self.recipe_store = recipe_store
        self.engine = engine or build_default_engine()
        self.default_weights = default_weights or ScoringWeights()
        self.max_workers = max(1, max_workers)
        self.min_availability_score = min_availability_score
        self.now_fn = now_fn or (lambda: datetime.now(timezone.utc))

    # Public API ---------------------------------------------------------------

    def rank(
        self,
        user_id: str,
        candidates: Sequence[CandidateRecipe],
        privacy: PrivacySettings,
        weights: WeightsInput = None,
        min_availability_score: Optional[int] = None,
        cancel_event: Optional[Event] = None,
        now: Optional[datetime] = None,
    ) -> List[RankedResult]:
        """Rank candidates for a user.

        Args:
            user_id: User the ranking is for
            candidates: Recipes to score
            privacy: Request-scoped privacy flags
            weights: Optional weight vector; invalid vectors raise
                ``pydantic.ValidationError`` before any data is fetched
            min_availability_score: When set, candidates below this
                availability score are pruned before ranking (personalized
                requests only)
            cancel_event: Set by the caller to abort during the fetch phase
            now: Reference time for recency decay. Defaults to ``now_fn()``,
                read once per call; pass a fixed value (or construct the
                service with a fixed ``now_fn``) to reproduce a ranking
                exactly across calls

        Returns:
            RankedResult list ordered by composite score, newest recipe, id
        """
        resolved_weights = self._resolve_weights(weights)
        reference_time = now if now is not None else self.now_fn()
        candidates = list(candidates)
        user_label = user_id if privacy.analytics_enabled else "anonymous"

        # Phase 1: fetch
        decision = self.gate.evaluate(user_id, privacy, cancel_event=cancel_event)
        available: Optional[FrozenSet[str]] = None
        if decision.use_personalization:
            available = self._fetch_available_ingredients(
                user_id, self._distinct_ingredient_names(candidates), cancel_event
            )
        if cancel_event is not None and cancel_event.is_set():
            raise RankingCancelled("Ranking request cancelled during fetch phase")

        if min_availability_score is not None and available is not None:
            before = len(candidates)
            candidates = [
                recipe for recipe in candidates
                if availability_score(recipe_ingredient_names(recipe.ingredients), available) >= min_availability_score
            ]
            _LOG.debug("Availability pre-filter kept %d of %d candidates", len(candidates), before)

        # Phase 2: score
        context = ScoringContext(
            profile=decision.profile,
            macro_goals=decision.macro_goals,
            available_ingredients=available,
            personalized=decision.use_personalization,
            now=reference_time,
        )
        results = self.engine.rank(candidates, context, resolved_weights, max_workers=self.max_workers)
        _LOG.info(
            "Ranked %d recipes for user %s (personalized=%s)",
            len(results), user_label, decision.use_personalization,
        )
        return results

    def score_meal_prep(self, recipe: CandidateRecipe) -> int:
        return score_meal_prep(recipe)

    def filter_by_availability(
        self,
        user_id: str,
        candidate_ids: Sequence[str],
        min_score: Optional[int] = None,
    ) -> List[str]:
        """Return the candidate IDs whose availability meets the threshold.

        Input order is preserved; IDs unknown to the recipe store are dropped.
        """
        threshold = self.min_availability_score if min_score is None else min_score
        recipes = self._load_recipes(candidate_ids)
        available = self._fetch_available_ingredients(user_id, self._distinct_ingredient_names(recipes))
        return [
            recipe.id for recipe in recipes
            if availability_score(recipe_ingredient_names(recipe.ingredients), available) >= threshold
        ]

    def analyze_recipe_availability(self, user_id: str, recipe_id: str) -> Optional[RecipeAvailabilityAnalysis]:
        recipes = self._load_recipes([recipe_id])
        if not recipes:
            return None
        recipe = recipes[0]
        available = self._fetch_available_ingredients(user_id, recipe_ingredient_names(recipe.ingredients))
        return analyze_availability(recipe, available)

    # Internals ----------------------------------------------------------------

    def _resolve_weights(self, weights: WeightsInput) -> ScoringWeights:
        if weights is None:
            return self.default_weights
        if isinstance(weights, ScoringWeights):
            return weights
        return ScoringWeights(**dict(weights))

    def _load_recipes(self, recipe_ids: Iterable[str]) -> List[CandidateRecipe]:
        if self.recipe_store is None:
            raise RecipeRankingError("A recipe store is required to look up recipes by id")
        recipes = []
        for recipe_id in recipe_ids:
            recipe = self.recipe_store.get_recipe(recipe_id)
            if recipe is None:
                _LOG.debug("Unknown recipe id %s skipped", recipe_id)
                continue
            recipes.append(recipe)
        return recipes

    @staticmethod
    def _distinct_ingredient_names(recipes: Iterable[CandidateRecipe]) -> List[str]:
        seen: Dict[str, None] = {}
        for recipe in recipes:
            for name in recipe_ingredient_names(recipe.ingredients):
                seen.setdefault(name, None)
        return list(seen)

    def _fetch_available_ingredients(
        self,
        user_id: str,
        names: Iterable[str],
        cancel_event: Optional[Event] = None,
    ) -> FrozenSet[str]:
        """Look up each distinct ingredient once; failed lookups count as unavailable."""
        available = set()
        for name in dict.fromkeys(names):
            if cancel_event is not None and cancel_event.is_set():
                raise RankingCancelled("Ranking request cancelled during fetch phase")
            try:
                records = self.ingredient_cost_store.get_ingredient_costs(user_id, name)
            except Exception as e:
                _LOG.warning("Ingredient cost lookup failed for %r: %s", name, e)
                continue
            if records:
                available.add(name)
        return frozenset(available)
