"""
Data store interfaces consumed by the ranking service.

The engine only talks to collaborators through the protocols below. Two
implementations ship with the package: ``InMemoryDataStore`` for tests and
embedding, and ``JsonUserDataStore`` which keeps one JSON file per user plus a
shared recipe catalog file.
"""

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from pydantic import ValidationError

from .exceptions import DataStoreError
from .models import (
    CandidateRecipe,
    FeedbackRecord,
    IngredientCostRecord,
    MacroGoals,
    MealHistoryRecord,
    SavedRecord,
)

_LOG = logging.getLogger("recipe_ranking.stores")


class BehavioralStore(Protocol):
    def get_feedback(self, user_id: str) -> List[FeedbackRecord]: ...

    def get_saved(self, user_id: str) -> List[SavedRecord]: ...

    def get_meal_history(self, user_id: str) -> List[MealHistoryRecord]: ...


class PreferenceStore(Protocol):
    def get_macro_goals(self, user_id: str) -> Optional[MacroGoals]: ...


class IngredientCostStore(Protocol):
    def get_ingredient_costs(self, user_id: str, ingredient_name: str) -> List[IngredientCostRecord]: ...


class RecipeStore(Protocol):
    def get_recipe(self, recipe_id: str) -> Optional[CandidateRecipe]: ...

    def list_recipes(self) -> List[CandidateRecipe]: ...


def ingredient_key(name: str) -> str:
    return (name or "").lower().strip()


class InMemoryDataStore:
    """Dictionary-backed implementation of every store protocol."""

    def __init__(self):
        self._feedback: Dict[str, List[FeedbackRecord]] = {}
        self._saved: Dict[str, List[SavedRecord]] = {}
        self._meals: Dict[str, List[MealHistoryRecord]] = {}
        self._goals: Dict[str, MacroGoals] = {}
        self._costs: Dict[str, Dict[str, List[IngredientCostRecord]]] = {}
        self._recipes: Dict[str, CandidateRecipe] = {}

    # Writers ------------------------------------------------------------------

    def add_feedback(self, user_id: str, record: FeedbackRecord) -> None:
        self._feedback.setdefault(user_id, []).append(record)

    def add_saved(self, user_id: str, record: SavedRecord) -> None:
        self._saved.setdefault(user_id, []).append(record)

    def add_meal(self, user_id: str, record: MealHistoryRecord) -> None:
        self._meals.setdefault(user_id, []).append(record)

    def set_macro_goals(self, user_id: str, goals: MacroGoals) -> None:
        self._goals[user_id] = goals

    def add_ingredient_cost(self, user_id: str, record: IngredientCostRecord) -> None:
        key = ingredient_key(record.ingredient_name)
        self._costs.setdefault(user_id, {}).setdefault(key, []).append(record)

    def add_recipe(self, recipe: CandidateRecipe) -> None:
        self._recipes[recipe.id] = recipe

    # Store protocols ----------------------------------------------------------

    def get_feedback(self, user_id: str) -> List[FeedbackRecord]:
        return list(self._feedback.get(user_id, []))

    def get_saved(self, user_id: str) -> List[SavedRecord]:
        return list(self._saved.get(user_id, []))

    def get_meal_history(self, user_id: str) -> List[MealHistoryRecord]:
        return list(self._meals.get(user_id, []))

    def get_macro_goals(self, user_id: str) -> Optional[MacroGoals]:
        return self._goals.get(user_id)

    def get_ingredient_costs(self, user_id: str, ingredient_name: str) -> List[IngredientCostRecord]:
        return list(self._costs.get(user_id, {}).get(ingredient_key(ingredient_name), []))

    def get_recipe(self, recipe_id: str) -> Optional[CandidateRecipe]:
        return self._recipes.get(recipe_id)

    def list_recipes(self) -> List[CandidateRecipe]:
        return [self._recipes[key] for key in sorted(self._recipes)]


class JsonUserDataStore:
    """File-backed store: ``<user_data_dir>/<uid>.json`` plus a recipe catalog.

    User files hold the sections ``feedback``, ``saved``, ``meal_history``,
    ``macro_goals`` and ``ingredient_costs``. The catalog is a JSON list of
    recipes.
    """

    USER_SECTIONS = ("feedback", "saved", "meal_history", "macro_goals", "ingredient_costs")

    def __init__(self, user_data_dir: Path, recipe_catalog_path: Optional[Path] = None):
        self.user_data_dir = Path(user_data_dir)
        self.user_data_dir.mkdir(parents=True, exist_ok=True)
        self.recipe_catalog_path = Path(recipe_catalog_path) if recipe_catalog_path else None
        # path -> (file signature, parsed content); reparsed when the file changes
        self._parsed_cache: Dict[Path, Tuple[Optional[Tuple[int, int]], Any]] = {}
        self._cache_lock = Lock()

    def _user_file(self, uid: str) -> Path:
        """Get user data file path."""
        return self.user_data_dir / f"{uid}.json"

    @staticmethod
    def _signature(path: Path) -> Optional[Tuple[int, int]]:
        try:
            stat = path.stat()
        except FileNotFoundError:
            return None
        return stat.st_mtime_ns, stat.st_size

    def _cached(self, path: Path, loader: Callable[[], Any]) -> Any:
        """Return the parsed content of ``path``, parsing at most once per file version."""
        signature = self._signature(path)
        with self._cache_lock:
            hit = self._parsed_cache.get(path)
        if hit is not None and hit[0] == signature:
            return hit[1]
        value = loader()
        with self._cache_lock:
            self._parsed_cache[path] = (signature, value)
        return value

    def _invalidate(self, path: Path) -> None:
        with self._cache_lock:
            self._parsed_cache.pop(path, None)

    def _load_user_data(self, uid: str) -> Dict[str, Any]:
        user_file = self._user_file(uid)
        if not user_file.exists():
            data: Dict[str, Any] = {}
        else:
            try:
                data = json.loads(user_file.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                raise DataStoreError(f"Invalid user data file {user_file}: {e}") from e
            if not isinstance(data, dict):
                raise DataStoreError(f"User data file {user_file} must contain an object")

        for section in self.USER_SECTIONS:
            if section not in data:
                data[section] = None if section == "macro_goals" else []
        return data

    def _parse_user_data(self, uid: str) -> Dict[str, Any]:
        data = self._load_user_data(uid)
        costs: Dict[str, List[IngredientCostRecord]] = {}
        for record in self._parse(IngredientCostRecord, data["ingredient_costs"], "ingredient_costs"):
            costs.setdefault(ingredient_key(record.ingredient_name), []).append(record)
        goals = data["macro_goals"]
        return {
            "feedback": self._parse(FeedbackRecord, data["feedback"], "feedback"),
            "saved": self._parse(SavedRecord, data["saved"], "saved"),
            "meal_history": self._parse(MealHistoryRecord, data["meal_history"], "meal_history"),
            "macro_goals": self._parse(MacroGoals, [goals], "macro_goals")[0] if goals else None,
            "ingredient_costs": costs,
        }

    def _user_sections(self, uid: str) -> Dict[str, Any]:
        user_file = self._user_file(uid)
        return self._cached(user_file, lambda: self._parse_user_data(uid))

    def save_user_data(self, uid: str, data: Dict[str, Any]) -> None:
        user_file = self._user_file(uid)
        user_file.write_text(
            json.dumps(data, indent=2, ensure_ascii=False, default=str), encoding="utf-8"
        )
        self._invalidate(user_file)

    def _parse(self, model, items: List[Dict[str, Any]], source: str) -> list:
        try:
            return [model.model_validate(item) for item in items]
        except ValidationError as e:
            raise DataStoreError(f"Invalid {source} records: {e}") from e

    # Store protocols ----------------------------------------------------------

    def get_feedback(self, user_id: str) -> List[FeedbackRecord]:
        return list(self._user_sections(user_id)["feedback"])

    def get_saved(self, user_id: str) -> List[SavedRecord]:
        return list(self._user_sections(user_id)["saved"])

    def get_meal_history(self, user_id: str) -> List[MealHistoryRecord]:
        return list(self._user_sections(user_id)["meal_history"])

    def get_macro_goals(self, user_id: str) -> Optional[MacroGoals]:
        return self._user_sections(user_id)["macro_goals"]

    def get_ingredient_costs(self, user_id: str, ingredient_name: str) -> List[IngredientCostRecord]:
        costs = self._user_sections(user_id)["ingredient_costs"]
        return list(costs.get(ingredient_key(ingredient_name), []))

    # Recipe catalog -----------------------------------------------------------

    def _parse_catalog(self) -> Tuple[List[CandidateRecipe], Dict[str, CandidateRecipe]]:
        try:
            items = json.loads(self.recipe_catalog_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise DataStoreError(f"Invalid recipe catalog {self.recipe_catalog_path}: {e}") from e
        if not isinstance(items, list):
            raise DataStoreError(f"Recipe catalog {self.recipe_catalog_path} must contain a list")
        recipes = self._parse(CandidateRecipe, items, "recipe")
        by_id: Dict[str, CandidateRecipe] = {}
        for recipe in recipes:
            by_id.setdefault(recipe.id, recipe)
        return recipes, by_id

    def _catalog(self) -> Tuple[List[CandidateRecipe], Dict[str, CandidateRecipe]]:
        if not self.recipe_catalog_path or not self.recipe_catalog_path.exists():
            return [], {}
        return self._cached(self.recipe_catalog_path, self._parse_catalog)

    def list_recipes(self) -> List[CandidateRecipe]:
        return list(self._catalog()[0])

    def get_recipe(self, recipe_id: str) -> Optional[CandidateRecipe]:
        return self._catalog()[1].get(recipe_id)

    def save_recipes(self, recipes: List[CandidateRecipe]) -> None:
        if not self.recipe_catalog_path:
            raise DataStoreError("No recipe catalog path configured")
        self.recipe_catalog_path.parent.mkdir(parents=True, exist_ok=True)
        payload = [recipe.model_dump(mode="json") for recipe in recipes]
        self.recipe_catalog_path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
        )
        self._invalidate(self.recipe_catalog_path)
        _LOG.info("Saved %d recipes to %s", len(recipes), self.recipe_catalog_path)
