"""
Test cases for the configuration management system.
Tests config loading, env overrides, and access functionality.
"""

import os
import json
from unittest.mock import patch, mock_open
import pytest

from config_manager import (
    ConfigManager,
    ScoringConfig,
    AvailabilityConfig,
    ServiceConfig,
    PathsConfig,
    get_scoring_config,
    get_availability_config,
    get_service_config,
    get_paths_config,
    reload_config,
)


class TestConfigManager:
    """Test the ConfigManager class functionality."""

    def test_init_with_default_config_file(self):
        """Test ConfigManager initialization with default config file."""
        with patch('config_manager.Path') as mock_path:
            mock_path.return_value.exists.return_value = False
            with patch.dict(os.environ, {}, clear=True):
                manager = ConfigManager()

            assert manager._config is not None
            assert manager._config["scoring"]["weights"] == {
                "behavioral": 0.5,
                "macro_fit": 0.3,
                "meal_prep": 0.2,
                "availability": 0.0
            }
            assert manager._config["availability"]["min_score"] == 70

    def test_load_config_from_file(self):
        """Test loading configuration from existing file."""
        test_config = {
            "scoring": {
                "meals_per_day": 4,
                "weights": {"behavioral": 0.6, "macro_fit": 0.2}
            },
            "service": {"max_workers": 8}
        }

        with patch('builtins.open', mock_open(read_data=json.dumps(test_config))):
            with patch('config_manager.Path') as mock_path:
                mock_path.return_value.exists.return_value = True
                with patch.dict(os.environ, {}, clear=True):
                    manager = ConfigManager()

                    scoring = manager.get_scoring_config()
                    assert scoring.meals_per_day == 4
                    # Partial weights are merged over the defaults
                    assert scoring.weights == {
                        "behavioral": 0.6,
                        "macro_fit": 0.2,
                        "meal_prep": 0.2,
                        "availability": 0.0
                    }
                    assert scoring.recency_half_life_days == 30.0
                    assert manager.get_service_config().max_workers == 8

    def test_override_with_env_variables(self):
        """Test that environment variables override config values."""
        env_vars = {
            "RANKING_WEIGHTS": "0.4,0.2,0.1,0.3",
            "MEALS_PER_DAY": "5",
            "RECENCY_HALF_LIFE_DAYS": "14",
            "MIN_AVAILABILITY_SCORE": "60",
            "MAX_WORKERS": "2",
            "APP_DEBUG": "true",
            "USER_DATA_DIR": "/tmp/users",
            "RECIPE_CATALOG_PATH": "/tmp/recipes.json"
        }

        with patch('config_manager.Path') as mock_path:
            mock_path.return_value.exists.return_value = False
            with patch.dict(os.environ, env_vars, clear=True):
                manager = ConfigManager()

                assert manager._config["scoring"]["weights"] == {
                    "behavioral": 0.4,
                    "macro_fit": 0.2,
                    "meal_prep": 0.1,
                    "availability": 0.3
                }
                assert manager._config["scoring"]["meals_per_day"] == 5
                assert manager._config["scoring"]["recency_half_life_days"] == 14.0
                assert manager._config["availability"]["min_score"] == 60
                assert manager._config["service"]["max_workers"] == 2
                assert manager._config["service"]["debug"] is True
                assert manager._config["paths"]["user_data_dir"] == "/tmp/users"
                assert manager._config["paths"]["recipe_catalog_path"] == "/tmp/recipes.json"

    def test_ranking_weights_env_needs_four_values(self):
        """Test that a short RANKING_WEIGHTS vector is rejected."""
        with patch('config_manager.Path') as mock_path:
            mock_path.return_value.exists.return_value = False
            with patch.dict(os.environ, {"RANKING_WEIGHTS": "0.5,0.5"}, clear=True):
                with pytest.raises(ValueError, match="RANKING_WEIGHTS"):
                    ConfigManager()

    def test_get_section_configs(self):
        """Test typed accessors for every section."""
        with patch('config_manager.Path') as mock_path:
            mock_path.return_value.exists.return_value = False
            with patch.dict(os.environ, {}, clear=True):
                manager = ConfigManager()

            assert isinstance(manager.get_scoring_config(), ScoringConfig)
            assert manager.get_availability_config() == AvailabilityConfig(min_score=70)
            assert manager.get_service_config() == ServiceConfig(max_workers=4, debug=False)
            assert manager.get_paths_config() == PathsConfig(
                user_data_dir="user_data",
                recipe_catalog_path="data/recipes.json"
            )

    def test_scoring_config_weights_are_copied(self):
        """Mutating the returned weights must not touch the manager."""
        with patch('config_manager.Path') as mock_path:
            mock_path.return_value.exists.return_value = False
            with patch.dict(os.environ, {}, clear=True):
                manager = ConfigManager()

            manager.get_scoring_config().weights["behavioral"] = 1.0
            assert manager._config["scoring"]["weights"]["behavioral"] == 0.5

    def test_get_config(self):
        """Test getting raw configuration dictionary."""
        test_config = {"test": "value"}

        with patch('config_manager.Path') as mock_path:
            mock_path.return_value.exists.return_value = False
            manager = ConfigManager()
            manager._config = test_config

            config = manager.get_config()

            assert config == test_config
            assert config is not manager._config  # Should be a copy

    def test_save_config(self):
        """Test saving configuration to file."""
        with patch('config_manager.Path') as mock_path:
            mock_path.return_value.exists.return_value = False
            manager = ConfigManager()

            with patch('builtins.open', mock_open()) as mock_file:
                manager.save_config()

                mock_file.assert_called_once()
                mock_file().write.assert_called()

    def test_reload_config(self):
        """Test reloading configuration."""
        with patch('config_manager.Path') as mock_path:
            mock_path.return_value.exists.return_value = False
            with patch.dict(os.environ, {}, clear=True):
                manager = ConfigManager()
                original_config = json.loads(json.dumps(manager._config))

                manager._config["test"] = "modified"
                manager.reload()

                assert "test" not in manager._config
                assert manager._config == original_config


class TestGlobalFunctions:
    """Test the global configuration functions."""

    def test_get_scoring_config_global(self):
        config = get_scoring_config()

        assert isinstance(config, ScoringConfig)
        assert set(config.weights) == {"behavioral", "macro_fit", "meal_prep", "availability"}

    def test_get_availability_config_global(self):
        assert isinstance(get_availability_config(), AvailabilityConfig)

    def test_get_service_config_global(self):
        config = get_service_config()

        assert isinstance(config, ServiceConfig)
        assert config.max_workers >= 1

    def test_get_paths_config_global(self):
        config = get_paths_config()

        assert isinstance(config, PathsConfig)
        assert hasattr(config, 'user_data_dir')
        assert hasattr(config, 'recipe_catalog_path')

    def test_reload_config_global(self):
        # Should not raise any exceptions
        reload_config()


class TestConfigIntegration:
    """Test configuration with real files."""

    def test_config_with_real_file(self, tmp_path):
        """Test configuration with a real temporary file."""
        config_file = tmp_path / "test_config.json"
        test_config = {
            "scoring": {
                "weights": {
                    "behavioral": 0.4,
                    "macro_fit": 0.3,
                    "meal_prep": 0.2,
                    "availability": 0.1
                },
                "meals_per_day": 2,
                "neutral_macro_score": 55.0,
                "recency_half_life_days": 21.0
            },
            "availability": {"min_score": 50},
            "paths": {
                "user_data_dir": "test_user_data",
                "recipe_catalog_path": "test_recipes.json"
            }
        }

        with open(config_file, 'w', encoding='utf-8') as f:
            json.dump(test_config, f)

        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager(str(config_file))

            scoring = manager.get_scoring_config()
            assert scoring.weights["availability"] == 0.1
            assert scoring.meals_per_day == 2
            assert scoring.neutral_macro_score == 55.0
            assert manager.get_availability_config().min_score == 50
            assert manager.get_paths_config().user_data_dir == "test_user_data"
            # Sections missing from the file keep their defaults
            assert manager.get_service_config().max_workers == 4

    def test_save_and_reload_round_trip(self, tmp_path):
        config_file = tmp_path / "saved_config.json"
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager(str(config_file))
            manager._config["availability"]["min_score"] = 40
            manager.save_config()

            reloaded = ConfigManager(str(config_file))
            assert reloaded.get_availability_config().min_score == 40


class TestConfigErrorHandling:
    """Test error handling in configuration system."""

    def test_invalid_json_file(self, tmp_path):
        """Test handling of invalid JSON in config file."""
        config_file = tmp_path / "invalid_config.json"

        with open(config_file, 'w', encoding='utf-8') as f:
            f.write('{"invalid": json}')

        # Should fall back to default config
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager(str(config_file))

            assert manager._config is not None
            assert manager.get_availability_config().min_score == 70
            assert "paths" in manager._config
