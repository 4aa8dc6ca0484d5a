"""
Configuration management for the recipe ranking engine.
Handles loading, validating, and providing access to ranking settings.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass


@dataclass
class ScoringConfig:
    """Scoring configuration settings."""
    weights: Dict[str, float]
    meals_per_day: int
    neutral_macro_score: float
    recency_half_life_days: float


@dataclass
class AvailabilityConfig:
    """Ingredient availability settings."""
    min_score: int


@dataclass
class ServiceConfig:
    """Ranking service runtime settings."""
    max_workers: int
    debug: bool


@dataclass
class PathsConfig:
    """Path configuration settings."""
    user_data_dir: str
    recipe_catalog_path: str


WEIGHT_KEYS = ("behavioral", "macro_fit", "meal_prep", "availability")


class ConfigManager:
    """Manages application configuration loading and access."""

    def __init__(self, config_file: str = "ranking_config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        self._config = self._get_default_config()

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                    self._merge_config(file_config)
            except (json.JSONDecodeError, FileNotFoundError):
                # Keep default config if file is invalid or not found
                pass

        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "scoring": {
                "weights": {
                    "behavioral": 0.5,
                    "macro_fit": 0.3,
                    "meal_prep": 0.2,
                    "availability": 0.0
                },
                "meals_per_day": 3,
                "neutral_macro_score": 60.0,
                "recency_half_life_days": 30.0
            },
            "availability": {
                "min_score": 70
            },
            "service": {
                "max_workers": 4,
                "debug": False
            },
            "paths": {
                "user_data_dir": "user_data",
                "recipe_catalog_path": "data/recipes.json"
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config and isinstance(values, dict):
                if section == "scoring" and isinstance(values.get("weights"), dict):
                    values = dict(values)
                    self._config["scoring"]["weights"].update(values.pop("weights"))
                self._config[section].update(values)
            else:
                self._config[section] = values

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        if os.getenv("RANKING_WEIGHTS"):
            parts = [float(p) for p in os.getenv("RANKING_WEIGHTS").split(",") if p.strip()]
            if len(parts) != len(WEIGHT_KEYS):
                raise ValueError(
                    f"RANKING_WEIGHTS needs {len(WEIGHT_KEYS)} comma-separated values: {', '.join(WEIGHT_KEYS)}"
                )
            self._config["scoring"]["weights"] = dict(zip(WEIGHT_KEYS, parts))

        if os.getenv("MEALS_PER_DAY"):
            self._config["scoring"]["meals_per_day"] = int(os.getenv("MEALS_PER_DAY"))

        if os.getenv("RECENCY_HALF_LIFE_DAYS"):
            self._config["scoring"]["recency_half_life_days"] = float(os.getenv("RECENCY_HALF_LIFE_DAYS"))

        if os.getenv("MIN_AVAILABILITY_SCORE"):
            self._config["availability"]["min_score"] = int(os.getenv("MIN_AVAILABILITY_SCORE"))

        if os.getenv("MAX_WORKERS"):
            self._config["service"]["max_workers"] = int(os.getenv("MAX_WORKERS"))

        if os.getenv("APP_DEBUG"):
            self._config["service"]["debug"] = os.getenv("APP_DEBUG").lower() == "true"

        if os.getenv("USER_DATA_DIR"):
            self._config["paths"]["user_data_dir"] = os.getenv("USER_DATA_DIR")

        if os.getenv("RECIPE_CATALOG_PATH"):
            self._config["paths"]["recipe_catalog_path"] = os.getenv("RECIPE_CATALOG_PATH")

    def get_scoring_config(self) -> ScoringConfig:
        """Get scoring configuration."""
        scoring = self._config["scoring"]
        return ScoringConfig(
            weights=dict(scoring["weights"]),
            meals_per_day=scoring["meals_per_day"],
            neutral_macro_score=scoring["neutral_macro_score"],
            recency_half_life_days=scoring["recency_half_life_days"]
        )

    def get_availability_config(self) -> AvailabilityConfig:
        """Get availability configuration."""
        return AvailabilityConfig(min_score=self._config["availability"]["min_score"])

    def get_service_config(self) -> ServiceConfig:
        """Get service configuration."""
        service = self._config["service"]
        return ServiceConfig(
            max_workers=service["max_workers"],
            debug=service["debug"]
        )

    def get_paths_config(self) -> PathsConfig:
        """Get paths configuration."""
        paths = self._config["paths"]
        return PathsConfig(
            user_data_dir=paths["user_data_dir"],
            recipe_catalog_path=paths["recipe_catalog_path"]
        )

    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)


# Global configuration instance
config_manager = ConfigManager()


def get_scoring_config() -> ScoringConfig:
    """Get scoring configuration."""
    return config_manager.get_scoring_config()


def get_availability_config() -> AvailabilityConfig:
    """Get availability configuration."""
    return config_manager.get_availability_config()


def get_service_config() -> ServiceConfig:
    """Get service configuration."""
    return config_manager.get_service_config()


def get_paths_config() -> PathsConfig:
    """Get paths configuration."""
    return config_manager.get_paths_config()


def reload_config() -> None:
    """Reload configuration."""
    config_manager.reload()


def save_config() -> None:
    """Save configuration to file."""
    config_manager.save_config()
