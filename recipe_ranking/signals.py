"""
Signal extraction for personalized ranking.

Pure functions that turn raw behavioral records into a ``BehaviorProfile``,
normalize free-text ingredient lines and compute recency weights. Nothing in
this module keeps state between calls; the profile is derived fresh for every
ranking request.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import FrozenSet, Iterable, List, Optional, Sequence

from .models import (
    BehaviorEntry,
    BehaviorProfile,
    FeedbackRecord,
    MealHistoryRecord,
    RecipeSnapshot,
    SavedRecord,
)

RECENCY_HALF_LIFE_DAYS = 30.0

UNIT_VOCABULARY = (
    "fl oz",
    "cups", "cup",
    "lbs", "lb",
    "oz",
    "tbsp", "tsp",
    "pieces", "piece",
    "cloves", "clove",
    "bunches", "bunch",
    "pints", "pint",
    "quarts", "quart",
    "gallons", "gallon",
    "ml",
    "liters", "liter", "l",
    "grams", "gram", "g",
    "kilograms", "kilogram", "kg",
)

INGREDIENT_STOPWORDS = frozenset({
    "a", "an", "and", "or", "of", "the", "to", "for", "with", "into",
    "fresh", "chopped", "diced", "minced", "sliced", "large", "small",
    "medium", "optional", "taste", "plus", "more", "about",
})

_QUANTITY_RE = re.compile(r"^(?:(?:\d+(?:[./]\d+)?|[¼½¾⅓⅔⅛⅜⅝⅞])[\s\-]*)+")
_UNIT_RE = re.compile(
    r"^(?:"
    + "|".join(re.escape(unit).replace(r"\ ", r"\.?\s*") for unit in UNIT_VOCABULARY)
    + r")\.?(?:\s+of)?(?:\s+|$)"
)
_TRAILING_PUNCT_RE = re.compile(r"[\s,.;:!]+$")
_WHITESPACE_RE = re.compile(r"\s+")
_TOKEN_RE = re.compile(r"[a-z][a-z'\-]+")


# ---------------------------------------------------------------------------
# Ingredient text
# ---------------------------------------------------------------------------


def normalize_ingredient_name(text: Optional[str]) -> str:
    """Reduce an ingredient line to a lookup name.

    Leading quantities (``2``, ``1/2``, ``1 1/2``, ``1.5``, ``½``, ``2-3``)
    and the unit right after them are dropped, as is trailing punctuation.
    Text without a recognizable quantity is only lower-cased and trimmed.

    Examples:
        "2 cups Chickpeas," -> "chickpeas"
        "1 1/2 tbsp olive oil" -> "olive oil"
        "salt to taste" -> "salt to taste"
    """
    if not isinstance(text, str):
        return ""
    cleaned = _WHITESPACE_RE.sub(" ", text.strip().lower())
    if not cleaned:
        return ""

    without_qty = _QUANTITY_RE.sub("", cleaned, count=1)
    if without_qty != cleaned:
        without_qty = _UNIT_RE.sub("", without_qty, count=1)

    name = _TRAILING_PUNCT_RE.sub("", without_qty).strip()
    return name or _TRAILING_PUNCT_RE.sub("", cleaned).strip() or cleaned


def ingredient_tokens(lines: Iterable[str]) -> FrozenSet[str]:
    """Tokenize ingredient lines into a set of descriptive words."""
    tokens = set()
    for line in lines or ():
        name = normalize_ingredient_name(line)
        for token in _TOKEN_RE.findall(name):
            if token in INGREDIENT_STOPWORDS or token in UNIT_VOCABULARY:
                continue
            tokens.add(token)
    return frozenset(tokens)


# ---------------------------------------------------------------------------
# Recency
# ---------------------------------------------------------------------------


def as_utc(ts: Optional[datetime]) -> Optional[datetime]:
    if ts is None:
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def recency_weight(
    timestamp: Optional[datetime],
    now: datetime,
    half_life_days: float = RECENCY_HALF_LIFE_DAYS,
) -> float:
    """Exponential decay that halves every ``half_life_days``.

    Undated records count fully and timestamps in the future are treated as
    age zero, so the weight never exceeds 1.
    """
    ts = as_utc(timestamp)
    if ts is None:
        return 1.0
    age_days = max((as_utc(now) - ts).total_seconds() / 86400.0, 0.0)
    return math.pow(0.5, age_days / max(half_life_days, 1e-9))


# ---------------------------------------------------------------------------
# Behavior profile
# ---------------------------------------------------------------------------


def _entry_from_snapshot(
    snapshot: RecipeSnapshot,
    timestamp: Optional[datetime],
    sentiment: Optional[str] = None,
    feedback: Optional[str] = None,
) -> BehaviorEntry:
    return BehaviorEntry(
        recipe_id=snapshot.recipe_id,
        cuisine=snapshot.cuisine,
        cook_time=snapshot.cook_time,
        calories=snapshot.calories,
        protein=snapshot.protein,
        carbs=snapshot.carbs,
        fat=snapshot.fat,
        ingredients=tuple(snapshot.ingredients),
        tokens=ingredient_tokens(snapshot.ingredients),
        timestamp=timestamp,
        sentiment=sentiment,
        feedback=feedback,
    )


def _newest_first(entries: List[BehaviorEntry]) -> tuple:
    def key(entry: BehaviorEntry):
        ts = as_utc(entry.timestamp)
        return (-(ts.timestamp()) if ts else math.inf, entry.recipe_id)

    return tuple(sorted(entries, key=key))


def build_behavior_profile(
    feedback: Sequence[FeedbackRecord] = (),
    saved: Sequence[SavedRecord] = (),
    meal_history: Sequence[MealHistoryRecord] = (),
) -> BehaviorProfile:
    """Derive a ``BehaviorProfile`` from raw store records.

    A feedback record flagged both liked and disliked contributes to both
    collections. Each collection is ordered newest first.
    """
    liked: List[BehaviorEntry] = []
    disliked: List[BehaviorEntry] = []
    for record in feedback or ():
        if record.liked:
            liked.append(_entry_from_snapshot(record, record.created_at, sentiment=record.sentiment))
        if record.disliked:
            disliked.append(_entry_from_snapshot(record, record.created_at, sentiment=record.sentiment))

    saved_entries = [_entry_from_snapshot(record, record.saved_date) for record in saved or ()]
    consumed = [
        _entry_from_snapshot(record, record.date, feedback=record.feedback)
        for record in meal_history or ()
    ]

    return BehaviorProfile(
        liked=_newest_first(liked),
        disliked=_newest_first(disliked),
        saved=_newest_first(saved_entries),
        consumed=_newest_first(consumed),
    )
