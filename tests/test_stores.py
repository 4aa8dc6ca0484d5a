"""
Tests for the bundled data stores and the ranking module factory.
"""

import json
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from recipe_ranking.exceptions import DataStoreError
from recipe_ranking.factory import create_ranking_module
from recipe_ranking.models import CandidateRecipe, IngredientCostRecord, PrivacySettings
from recipe_ranking.service import RankingService
from recipe_ranking.stores import InMemoryDataStore, JsonUserDataStore


@pytest.fixture
def user_data_dir(tmp_path):
    data_dir = tmp_path / "user_data"
    data_dir.mkdir()
    (data_dir / "u1.json").write_text(json.dumps({
        "feedback": [
            {"recipe_id": "r1", "liked": True, "cuisine": "Thai", "created_at": "2025-01-10T12:00:00Z"},
            {"recipe_id": "r2", "disliked": True, "sentiment": "too spicy"},
        ],
        "saved": [{"recipe_id": "r3", "saved_date": "2025-01-05T08:00:00Z"}],
        "meal_history": [{"recipe_id": "r1", "date": "2025-01-12T19:00:00Z", "feedback": "Liked"}],
        "macro_goals": {"calories": 2100, "protein": 140, "carbs": 220, "fat": 70},
        "ingredient_costs": [
            {"ingredient_name": "Jasmine Rice", "store": "Asia Market", "location": "Downtown"},
            {"ingredient_name": "coconut milk"},
        ],
    }), encoding="utf-8")
    return data_dir


@pytest.fixture
def catalog(tmp_path):
    path = tmp_path / "recipes.json"
    path.write_text(json.dumps([
        {"id": "r1", "title": "Green Curry", "cuisine": "Thai", "ingredients": ["1 cup jasmine rice", "400 ml coconut milk"]},
        {"id": "r2", "title": "Pad Krapow", "cuisine": "Thai", "meal_prep": {"batch_friendly": True, "servings": 4}},
    ]), encoding="utf-8")
    return path


class TestJsonUserDataStore:
    def test_reads_all_sections(self, user_data_dir):
        store = JsonUserDataStore(user_data_dir)

        feedback = store.get_feedback("u1")
        assert [f.recipe_id for f in feedback] == ["r1", "r2"]
        assert feedback[0].created_at == datetime(2025, 1, 10, 12, tzinfo=timezone.utc)
        assert feedback[1].sentiment == "too spicy"
        assert store.get_saved("u1")[0].recipe_id == "r3"
        assert store.get_meal_history("u1")[0].feedback == "Liked"
        assert store.get_macro_goals("u1").calories == 2100

    def test_ingredient_lookup_is_case_insensitive(self, user_data_dir):
        store = JsonUserDataStore(user_data_dir)

        records = store.get_ingredient_costs("u1", "jasmine rice")
        assert len(records) == 1
        assert records[0].store == "Asia Market"
        assert store.get_ingredient_costs("u1", " Coconut Milk ")[0].store == "Unknown Store"
        assert store.get_ingredient_costs("u1", "fish sauce") == []

    def test_unknown_user_has_no_data(self, user_data_dir):
        store = JsonUserDataStore(user_data_dir)

        assert store.get_feedback("ghost") == []
        assert store.get_macro_goals("ghost") is None
        assert store.get_ingredient_costs("ghost", "rice") == []

    def test_invalid_json_raises(self, user_data_dir):
        (user_data_dir / "broken.json").write_text("{not json", encoding="utf-8")
        store = JsonUserDataStore(user_data_dir)

        with pytest.raises(DataStoreError):
            store.get_feedback("broken")

    def test_invalid_records_raise(self, user_data_dir):
        (user_data_dir / "bad.json").write_text(
            json.dumps({"meal_history": [{"recipe_id": "r1", "feedback": "Meh"}]}), encoding="utf-8"
        )
        with pytest.raises(DataStoreError):
            JsonUserDataStore(user_data_dir).get_meal_history("bad")

    def test_recipe_catalog(self, user_data_dir, catalog):
        store = JsonUserDataStore(user_data_dir, catalog)

        assert [r.id for r in store.list_recipes()] == ["r1", "r2"]
        assert store.get_recipe("r2").meal_prep.batch_friendly is True
        assert store.get_recipe("r9") is None

    def test_save_recipes_round_trip(self, user_data_dir, catalog):
        store = JsonUserDataStore(user_data_dir, catalog)
        recipes = [r.model_copy(update={"meal_prep_score": 35}) for r in store.list_recipes()]

        store.save_recipes(recipes)

        assert [r.meal_prep_score for r in store.list_recipes()] == [35, 35]

    def test_save_recipes_without_catalog(self, user_data_dir):
        with pytest.raises(DataStoreError):
            JsonUserDataStore(user_data_dir).save_recipes([])

    def test_missing_catalog_is_empty(self, user_data_dir, tmp_path):
        store = JsonUserDataStore(user_data_dir, tmp_path / "nowhere.json")
        assert store.list_recipes() == []

    def test_user_file_is_parsed_once_across_lookups(self, user_data_dir):
        store = JsonUserDataStore(user_data_dir)

        with patch("recipe_ranking.stores.json.loads", wraps=json.loads) as loads:
            for name in ("jasmine rice", "coconut milk", "fish sauce", "lime"):
                store.get_ingredient_costs("u1", name)
            store.get_feedback("u1")
            store.get_macro_goals("u1")

        assert loads.call_count == 1

    def test_catalog_is_parsed_once_across_lookups(self, user_data_dir, catalog):
        store = JsonUserDataStore(user_data_dir, catalog)

        with patch("recipe_ranking.stores.json.loads", wraps=json.loads) as loads:
            for recipe_id in ("r1", "r2", "r9", "r1"):
                store.get_recipe(recipe_id)
            store.list_recipes()

        assert loads.call_count == 1

    def test_changed_user_file_is_reread(self, user_data_dir):
        store = JsonUserDataStore(user_data_dir)
        assert len(store.get_feedback("u1")) == 2

        (user_data_dir / "u1.json").write_text(
            json.dumps({"feedback": [{"recipe_id": "r7", "liked": True}]}), encoding="utf-8"
        )

        assert [f.recipe_id for f in store.get_feedback("u1")] == ["r7"]

    def test_save_user_data_refreshes_reads(self, user_data_dir):
        store = JsonUserDataStore(user_data_dir)
        assert store.get_ingredient_costs("u1", "fish sauce") == []

        store.save_user_data("u1", {"ingredient_costs": [{"ingredient_name": "Fish Sauce", "store": "Corner Shop"}]})

        assert store.get_ingredient_costs("u1", "fish sauce")[0].store == "Corner Shop"
        assert store.get_feedback("u1") == []

    def test_duplicate_catalog_ids_resolve_to_first(self, user_data_dir, tmp_path):
        path = tmp_path / "dupes.json"
        path.write_text(json.dumps([
            {"id": "r1", "title": "First"},
            {"id": "r1", "title": "Second"},
        ]), encoding="utf-8")
        store = JsonUserDataStore(user_data_dir, path)

        assert len(store.list_recipes()) == 2
        assert store.get_recipe("r1").title == "First"


class TestInMemoryDataStore:
    def test_getters_return_copies(self):
        store = InMemoryDataStore()
        store.add_ingredient_cost("u1", IngredientCostRecord(ingredient_name="Rice"))

        records = store.get_ingredient_costs("u1", "rice")
        records.clear()

        assert len(store.get_ingredient_costs("u1", "RICE")) == 1

    def test_recipes_listed_by_id(self):
        store = InMemoryDataStore()
        for recipe_id in ("c", "a", "b"):
            store.add_recipe(CandidateRecipe(id=recipe_id))
        assert [r.id for r in store.list_recipes()] == ["a", "b", "c"]


class TestFactory:
    def test_create_ranking_module(self, user_data_dir, catalog):
        module = create_ranking_module(
            user_data_dir=user_data_dir,
            recipe_catalog_path=catalog,
            weights={"behavioral": 0.4, "macro_fit": 0.3, "meal_prep": 0.2, "availability": 0.1},
            max_workers=2,
        )

        assert isinstance(module["service"], RankingService)
        assert isinstance(module["store"], JsonUserDataStore)
        assert module["service"].default_weights.availability == 0.1

        results = module["service"].rank("u1", module["store"].list_recipes(), PrivacySettings())
        assert {r.recipe_id for r in results} == {"r1", "r2"}
        by_id = {r.recipe_id: r for r in results}
        assert by_id["r1"].components.availability == 100

    def test_invalid_weights_fail_at_startup(self, user_data_dir):
        with pytest.raises(ValueError):
            create_ranking_module(user_data_dir, weights={"behavioral": 2.0})
