"""
Reusable ranking engine primitives.

Component scorers are pluggable: each one turns a candidate recipe plus the
per-request ``ScoringContext`` into a 0-100 score for a single dimension. The
engine evaluates every scorer for every candidate, blends the results with a
``ScoringWeights`` vector and sorts deterministically.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Protocol, Sequence, Tuple

from ..models import (
    BehaviorProfile,
    CandidateRecipe,
    ComponentScoreSet,
    MacroGoals,
    RankedResult,
    ScoringWeights,
)
from ..signals import as_utc

_LOG = logging.getLogger("recipe_ranking.engine")

COMPONENT_NAMES: Tuple[str, ...] = ("behavioral", "macro_fit", "meal_prep", "availability")


# ---------------------------------------------------------------------------
# Core data structures
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class ScoringContext:
    """Immutable inputs shared by every candidate of one request."""

    profile: BehaviorProfile = field(default_factory=BehaviorProfile)
    macro_goals: Optional[MacroGoals] = None
    available_ingredients: Optional[FrozenSet[str]] = None
    personalized: bool = False
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(slots=True)
class ComponentScore:
    """Score for one dimension of one candidate."""

    value: float
    metadata: Dict[str, Any] = field(default_factory=dict)


class ComponentScorer(Protocol):
    """Interface for plug-and-play component scorers."""

    name: str

    def score(self, recipe: CandidateRecipe, context: ScoringContext) -> ComponentScore:
        """Return the component score for a single recipe."""


def clamp_score(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def composite_score(components: ComponentScoreSet, weights: ScoringWeights) -> float:
    """Weighted blend of the component scores, rounded for stable ordering."""
    total = sum(
        getattr(components, name) * weight
        for name, weight in weights.as_dict().items()
    )
    return round(clamp_score(total), 4)


def ranking_sort_key(result: RankedResult, created_at: Optional[datetime]) -> Tuple[float, float, str]:
    created = as_utc(created_at)
    created_ts = created.timestamp() if created else float("-inf")
    return (-result.composite_score, -created_ts, result.recipe_id)


class RankingEngine:
    """Scores candidates with every component scorer and sorts the output."""

    def __init__(self, scorers: Sequence[ComponentScorer]):
        by_name = {scorer.name: scorer for scorer in scorers}
        missing = [name for name in COMPONENT_NAMES if name not in by_name]
        if missing:
            raise ValueError(f"Missing component scorers: {', '.join(missing)}")
        self.scorers: Dict[str, ComponentScorer] = {name: by_name[name] for name in COMPONENT_NAMES}

    def score_candidate(
        self, recipe: CandidateRecipe, context: ScoringContext
    ) -> Tuple[ComponentScoreSet, Dict[str, Any]]:
        values: Dict[str, float] = {}
        metadata: Dict[str, Any] = {}
        for name, scorer in self.scorers.items():
            component = scorer.score(recipe, context)
            values[name] = clamp_score(component.value)
            if component.metadata:
                metadata[name] = component.metadata
        return ComponentScoreSet(**values), metadata

    def rank(
        self,
        candidates: Sequence[CandidateRecipe],
        context: ScoringContext,
        weights: ScoringWeights,
        max_workers: int = 1,
    ) -> List[RankedResult]:
        candidates = list(candidates)
        if not candidates:
            return []

        scored: List[Tuple[ComponentScoreSet, Dict[str, Any]]] = [None] * len(candidates)  # type: ignore

        def _score_one(idx: int, recipe: CandidateRecipe):
            return idx, self.score_candidate(recipe, context)

        if max_workers <= 1 or len(candidates) == 1:
            for i, recipe in enumerate(candidates):
                scored[i] = _score_one(i, recipe)[1]
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = [executor.submit(_score_one, i, r) for i, r in enumerate(candidates)]
                for future in futures:
                    i, result = future.result()
                    scored[i] = result

        keyed: List[Tuple[Tuple[float, float, str], RankedResult]] = []
        for recipe, (components, metadata) in zip(candidates, scored):
            result = RankedResult(
                recipe_id=recipe.id,
                composite_score=composite_score(components, weights),
                components=components,
                metadata=metadata,
            )
            keyed.append((ranking_sort_key(result, recipe.created_at), result))

        keyed.sort(key=lambda item: item[0])
        _LOG.debug("Ranked %d candidates (personalized=%s)", len(keyed), context.personalized)
        return [result for _, result in keyed]


def build_default_engine(
    meals_per_day: int = 3,
    neutral_macro_score: float = 60.0,
    recency_half_life_days: Optional[float] = None,
    scorer_overrides: Optional[Mapping[str, ComponentScorer]] = None,
) -> RankingEngine:
    """Factory for the default four-component engine."""
    from .availability import AvailabilityScorer
    from .behavioral import BehavioralAffinityScorer
    from .macro_fit import MacroFitScorer
    from .meal_prep import MealPrepScorer

    behavioral = (
        BehavioralAffinityScorer(recency_half_life_days=recency_half_life_days)
        if recency_half_life_days is not None
        else BehavioralAffinityScorer()
    )
    scorers: Dict[str, ComponentScorer] = {
        "behavioral": behavioral,
        "macro_fit": MacroFitScorer(meals_per_day=meals_per_day, neutral_score=neutral_macro_score),
        "meal_prep": MealPrepScorer(),
        "availability": AvailabilityScorer(),
    }
    scorers.update(scorer_overrides or {})
    return RankingEngine(list(scorers.values()))
