"""
Behavioral affinity scoring.

Ranks a candidate by how closely it resembles the user's positive history
(liked, saved, consumed-and-liked) versus negative history (disliked,
consumed-and-disliked). Every history entry casts an independent,
recency-decayed vote weighted by its signal source. Each side is averaged
over its vote mass, so a long history sharpens confidence without pushing
unrelated candidates toward the top.
"""

from __future__ import annotations

import math
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from ..models import BehaviorEntry, BehaviorProfile, CandidateRecipe
from ..signals import RECENCY_HALF_LIFE_DAYS, ingredient_tokens, recency_weight
from .engine import ComponentScore, ScoringContext, clamp_score

NEUTRAL_BEHAVIORAL_SCORE = 50.0

# Similarity sub-weights, summing to 1.0.
SIMILARITY_WEIGHTS: Dict[str, float] = {
    "cuisine": 0.40,
    "ingredients": 0.25,
    "macros": 0.20,
    "cook_time": 0.15,
}

# Vote strength per signal source.
POSITIVE_SOURCE_WEIGHTS: Dict[str, float] = {
    "liked": 1.0,
    "saved": 0.8,
    "consumed_liked": 0.6,
}
NEGATIVE_SOURCE_WEIGHTS: Dict[str, float] = {
    "disliked": 1.0,
    "consumed_disliked": 0.6,
}

COOK_TIME_SCALE_MINUTES = 15.0
# Similarity an unrelated recipe reaches through macro and cook-time closeness
# alone. Only similarity above it counts as affinity.
BASELINE_SIMILARITY = 0.35
# Vote mass at which confidence in a side reaches tanh(1), about 0.76.
SATURATION = 2.0


def cuisine_match(candidate: CandidateRecipe, entry: BehaviorEntry) -> float:
    a = (candidate.cuisine or "").strip().casefold()
    b = (entry.cuisine or "").strip().casefold()
    return 1.0 if a and a == b else 0.0


def cook_time_closeness(candidate: CandidateRecipe, entry: BehaviorEntry) -> float:
    diff = abs(float(candidate.cook_time) - float(entry.cook_time))
    return 1.0 / (1.0 + diff / COOK_TIME_SCALE_MINUTES)


def macro_closeness(candidate: CandidateRecipe, entry: BehaviorEntry) -> float:
    """1 minus the normalized Euclidean distance of relative macro deltas."""
    squared = 0.0
    pairs = (
        (candidate.calories, entry.calories),
        (candidate.protein, entry.protein),
        (candidate.carbs, entry.carbs),
        (candidate.fat, entry.fat),
    )
    for a, b in pairs:
        scale = max(abs(a), abs(b), 1.0)
        squared += (abs(a - b) / scale) ** 2
    return 1.0 - math.sqrt(squared) / 2.0


def ingredient_overlap(candidate_tokens: FrozenSet[str], entry: BehaviorEntry) -> float:
    if not candidate_tokens or not entry.tokens:
        return 0.0
    union = candidate_tokens | entry.tokens
    return len(candidate_tokens & entry.tokens) / len(union)


def similarity(
    candidate: CandidateRecipe,
    candidate_tokens: FrozenSet[str],
    entry: BehaviorEntry,
    weights: Dict[str, float] = SIMILARITY_WEIGHTS,
) -> float:
    """Similarity in [0, 1] between a candidate and one history entry."""
    return (
        weights["cuisine"] * cuisine_match(candidate, entry)
        + weights["ingredients"] * ingredient_overlap(candidate_tokens, entry)
        + weights["macros"] * macro_closeness(candidate, entry)
        + weights["cook_time"] * cook_time_closeness(candidate, entry)
    )


def _positive_sources(profile: BehaviorProfile) -> Iterable[Tuple[str, BehaviorEntry]]:
    for entry in profile.liked:
        yield "liked", entry
    for entry in profile.saved:
        yield "saved", entry
    for entry in profile.consumed:
        if entry.feedback == "Liked":
            yield "consumed_liked", entry


def _negative_sources(profile: BehaviorProfile) -> Iterable[Tuple[str, BehaviorEntry]]:
    for entry in profile.disliked:
        yield "disliked", entry
    for entry in profile.consumed:
        if entry.feedback == "Disliked":
            yield "consumed_disliked", entry


class BehavioralAffinityScorer:
    """Similarity-weighted, recency-decayed affinity to the user's history."""

    name = "behavioral"

    def __init__(
        self,
        recency_half_life_days: float = RECENCY_HALF_LIFE_DAYS,
        saturation: float = SATURATION,
        baseline_similarity: float = BASELINE_SIMILARITY,
        similarity_weights: Optional[Dict[str, float]] = None,
        positive_weights: Optional[Dict[str, float]] = None,
        negative_weights: Optional[Dict[str, float]] = None,
        top_matches: int = 3,
    ):
        self.recency_half_life_days = max(1.0, float(recency_half_life_days))
        self.saturation = max(1e-6, float(saturation))
        self.baseline_similarity = min(max(0.0, float(baseline_similarity)), 0.99)
        self.similarity_weights = dict(similarity_weights or SIMILARITY_WEIGHTS)
        self.positive_weights = dict(positive_weights or POSITIVE_SOURCE_WEIGHTS)
        self.negative_weights = dict(negative_weights or NEGATIVE_SOURCE_WEIGHTS)
        self.top_matches = top_matches

    def score(self, recipe: CandidateRecipe, context: ScoringContext) -> ComponentScore:
        profile = context.profile
        if profile.is_empty:
            return ComponentScore(value=NEUTRAL_BEHAVIORAL_SCORE, metadata={"reason": "no_history"})

        tokens = ingredient_tokens(recipe.ingredients)
        pos_affinity, pos_mass, pos_matches = self._vote(
            recipe, tokens, _positive_sources(profile), self.positive_weights, context
        )
        neg_affinity, neg_mass, neg_matches = self._vote(
            recipe, tokens, _negative_sources(profile), self.negative_weights, context
        )

        # Mean affinity per side is independent of history length; the vote
        # mass only sets how far that side may move the score.
        positive = pos_affinity * math.tanh(pos_mass / self.saturation)
        negative = neg_affinity * math.tanh(neg_mass / self.saturation)
        net = positive - negative

        value = clamp_score(NEUTRAL_BEHAVIORAL_SCORE + NEUTRAL_BEHAVIORAL_SCORE * net)
        return ComponentScore(
            value=value,
            metadata={
                "positive": round(positive, 4),
                "negative": round(negative, 4),
                "net": round(net, 4),
                "positive_mass": round(pos_mass, 4),
                "negative_mass": round(neg_mass, 4),
                "top_positive_matches": pos_matches,
                "top_negative_matches": neg_matches,
            },
        )

    # Internals ----------------------------------------------------------------

    def _excess_similarity(self, value: float) -> float:
        """Rescale similarity so the baseline maps to 0 and a perfect match to 1."""
        return max(0.0, value - self.baseline_similarity) / (1.0 - self.baseline_similarity)

    def _vote(
        self,
        recipe: CandidateRecipe,
        tokens: FrozenSet[str],
        sources: Iterable[Tuple[str, BehaviorEntry]],
        source_weights: Dict[str, float],
        context: ScoringContext,
    ) -> Tuple[float, float, List[str]]:
        """Weighted mean affinity in [0, 1], the vote mass, and the top matches."""
        mass = 0.0
        weighted = 0.0
        contributions: Dict[str, float] = {}
        for source, entry in sources:
            weight = source_weights.get(source, 0.0)
            if weight <= 0:
                continue
            vote = weight * recency_weight(entry.timestamp, context.now, self.recency_half_life_days)
            affinity = self._excess_similarity(similarity(recipe, tokens, entry, self.similarity_weights))
            mass += vote
            weighted += vote * affinity
            if affinity > 0:
                contributions[entry.recipe_id] = contributions.get(entry.recipe_id, 0.0) + vote * affinity

        if mass <= 0:
            return 0.0, 0.0, []
        ranked = sorted(contributions.items(), key=lambda item: (-item[1], item[0]))
        return weighted / mass, mass, [recipe_id for recipe_id, _ in ranked[: self.top_matches]]
