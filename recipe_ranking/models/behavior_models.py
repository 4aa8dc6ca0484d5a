"""
Behavioral data models.

Raw records come from the behavioral store already joined with the recipe
attributes they refer to. ``BehaviorProfile`` is derived from them on every
request and is never persisted.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import FrozenSet, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

MealFeedback = Literal["Liked", "Disliked"]


class RecipeSnapshot(BaseModel):
    """Recipe attributes joined onto a behavioral record."""
    recipe_id: str = Field(description="Recipe the record refers to")
    cuisine: str = Field(default="")
    cook_time: float = Field(default=0)
    calories: float = Field(default=0)
    protein: float = Field(default=0)
    carbs: float = Field(default=0)
    fat: float = Field(default=0)
    ingredients: List[str] = Field(default_factory=list)


class FeedbackRecord(RecipeSnapshot):
    """Explicit like / dislike feedback."""
    liked: bool = False
    disliked: bool = False
    created_at: Optional[datetime] = None
    sentiment: Optional[str] = None


class SavedRecord(RecipeSnapshot):
    """A recipe saved to the user's collection."""
    saved_date: Optional[datetime] = None


class MealHistoryRecord(RecipeSnapshot):
    """A consumed meal, optionally tagged with feedback."""
    date: Optional[datetime] = None
    feedback: Optional[MealFeedback] = None


class IngredientCostRecord(BaseModel):
    """A prior purchase of an ingredient, used as an availability proxy."""
    ingredient_name: str
    store: str = "Unknown Store"
    location: Optional[str] = None
    last_updated: Optional[datetime] = None


@dataclass(slots=True, frozen=True)
class BehaviorEntry:
    """Normalized view of one behavioral record."""

    recipe_id: str
    cuisine: str
    cook_time: float
    calories: float
    protein: float
    carbs: float
    fat: float
    ingredients: Tuple[str, ...] = ()
    tokens: FrozenSet[str] = frozenset()
    timestamp: Optional[datetime] = None
    sentiment: Optional[str] = None
    feedback: Optional[MealFeedback] = None


@dataclass(slots=True, frozen=True)
class BehaviorProfile:
    """Per-request behavioral aggregate for one user.

    A recipe may appear in several collections at once (liked and saved, for
    example); each collection is an independent signal source.
    """

    liked: Tuple[BehaviorEntry, ...] = ()
    disliked: Tuple[BehaviorEntry, ...] = ()
    saved: Tuple[BehaviorEntry, ...] = ()
    consumed: Tuple[BehaviorEntry, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.liked or self.disliked or self.saved or self.consumed)

    def counts(self) -> dict:
        return {
            "liked": len(self.liked),
            "disliked": len(self.disliked),
            "saved": len(self.saved),
            "consumed": len(self.consumed),
        }

