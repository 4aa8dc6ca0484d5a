"""
Recipe and user-preference data models.

This module contains the Pydantic models that cross the ranking service
boundary: candidate recipes, macro goals, privacy settings and the ranked
output returned to callers.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MealPrepFlags(BaseModel):
    """Batch-cooking and storage attributes of a recipe."""
    batch_friendly: bool = Field(default=False, description="Recipe scales well to large batches")
    freezable: bool = Field(default=False, description="Recipe keeps well in the freezer")
    weekly_prep_friendly: bool = Field(default=False, description="Recipe can be prepped once for the week")
    meal_prep_suitable: bool = Field(default=False, description="Recipe was tagged as meal-prep suitable")
    storage_instructions: Optional[str] = Field(default=None, description="Free-text storage instructions")
    fridge_storage_days: Optional[int] = Field(default=None, description="Days the dish keeps refrigerated")
    freezer_storage_months: Optional[int] = Field(default=None, description="Months the dish keeps frozen")
    servings: int = Field(default=1, description="Number of servings the recipe yields")


class CandidateRecipe(BaseModel):
    """A recipe considered for ranking."""
    id: str = Field(description="Recipe identifier")
    title: str = Field(default="", description="Display title, used in reports only")
    cuisine: str = Field(default="", description="Cuisine label, e.g. 'Mediterranean'")
    cook_time: float = Field(default=0, description="Cook time in minutes")
    calories: float = Field(default=0, description="Calories per serving")
    protein: float = Field(default=0, description="Protein grams per serving")
    carbs: float = Field(default=0, description="Carbohydrate grams per serving")
    fat: float = Field(default=0, description="Fat grams per serving")
    ingredients: List[str] = Field(default_factory=list, description="Raw ingredient lines")
    meal_prep: MealPrepFlags = Field(default_factory=MealPrepFlags, description="Meal-prep attributes")
    created_at: Optional[datetime] = Field(default=None, description="Creation time, newer wins ties")
    meal_prep_score: Optional[int] = Field(default=None, description="Persisted meal-prep score from batch maintenance")


class MacroGoals(BaseModel):
    """Daily macro budget for a user."""
    calories: float = Field(default=0, description="Daily calorie target")
    protein: float = Field(default=0, description="Daily protein target in grams")
    carbs: float = Field(default=0, description="Daily carbohydrate target in grams")
    fat: float = Field(default=0, description="Daily fat target in grams")


class PrivacySettings(BaseModel):
    """Request-scoped privacy flags. Never persisted server-side."""
    model_config = ConfigDict(frozen=True)

    data_sharing_enabled: bool = True
    analytics_enabled: bool = True
    location_services_enabled: bool = False


class ScoringWeights(BaseModel):
    """Weight vector used to blend component scores into a composite."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    behavioral: float = 0.5
    macro_fit: float = 0.3
    meal_prep: float = 0.2
    availability: float = 0.0

    @model_validator(mode="after")
    def _check_weights(self) -> "ScoringWeights":
        values = self.as_dict()
        negative = [name for name, value in values.items() if value < 0]
        if negative:
            raise ValueError(f"Weights must be non-negative: {', '.join(negative)}")
        total = sum(values.values())
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Weights must sum to 1.0, got {total:.6f}")
        return self

    def as_dict(self) -> Dict[str, float]:
        return {
            "behavioral": self.behavioral,
            "macro_fit": self.macro_fit,
            "meal_prep": self.meal_prep,
            "availability": self.availability,
        }


class ComponentScoreSet(BaseModel):
    """Per-dimension scores for one candidate, each in [0, 100]."""
    behavioral: float = Field(ge=0, le=100)
    macro_fit: float = Field(ge=0, le=100)
    meal_prep: float = Field(ge=0, le=100)
    availability: float = Field(ge=0, le=100)


class RankedResult(BaseModel):
    """One entry of the ranked output."""
    recipe_id: str
    composite_score: float = Field(ge=0, le=100)
    components: ComponentScoreSet
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Per-component explanation data")


class RecipeAvailabilityAnalysis(BaseModel):
    """Ingredient availability report for a single recipe and user."""
    recipe_id: str
    title: str = ""
    overall_availability: int = Field(ge=0, le=100)
    available_ingredients: int
    total_ingredients: int
    unavailable_ingredients: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
