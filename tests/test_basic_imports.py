"""
Basic import tests to verify the core functionality.
"""


def test_recipe_ranking_imports():
    """Test that the public package surface can be imported."""
    from recipe_ranking import (
        RankingService,
        InMemoryDataStore,
        build_default_engine,
        resolve_privacy_settings,
        score_meal_prep,
    )

    assert callable(build_default_engine)
    assert callable(resolve_privacy_settings)
    assert callable(score_meal_prep)
    assert RankingService is not None
    assert InMemoryDataStore is not None


def test_models_imports():
    """Test that the models can be instantiated."""
    from recipe_ranking.models import CandidateRecipe, MacroGoals, ScoringWeights

    recipe = CandidateRecipe(id="r1", title="Lentil Soup", cuisine="Indian")
    assert recipe.meal_prep.servings == 1
    assert recipe.created_at is None

    goals = MacroGoals(calories=2000)
    assert goals.protein == 0

    weights = ScoringWeights()
    assert sum(weights.as_dict().values()) == 1.0


def test_default_engine_components():
    from recipe_ranking.recommendations import COMPONENT_NAMES, build_default_engine

    engine = build_default_engine()
    assert tuple(engine.scorers) == COMPONENT_NAMES


def test_logging_config_lifecycle():
    from recipe_ranking.logging_config import ThreadSafeLoggingConfig

    config = ThreadSafeLoggingConfig()
    config.setup_logging(debug=True)
    try:
        assert config.running
    finally:
        config.stop()
    assert not config.running


def test_command_line_entry_points():
    import rank_recipes
    import recompute_meal_prep_scores

    assert callable(rank_recipes.main)
    assert callable(recompute_meal_prep_scores.main)
