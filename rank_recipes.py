#!/usr/bin/env python3
"""
Rank the recipe catalog for one user from the command line.

Privacy flags are given the way clients send them (``true`` / ``1``) so the
same resolution rules apply as for HTTP requests.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from config_manager import (
    get_availability_config,
    get_paths_config,
    get_scoring_config,
    get_service_config,
)
from recipe_ranking.factory import create_ranking_module
from recipe_ranking.logging_config import setup_logging, stop_logging
from recipe_ranking.privacy import resolve_privacy_settings

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    paths = get_paths_config()
    scoring = get_scoring_config()
    service_config = get_service_config()

    parser = argparse.ArgumentParser(description="Rank recipes for a user")
    parser.add_argument("user_id", help="User to rank recipes for")
    parser.add_argument("--catalog", type=Path, default=Path(paths.recipe_catalog_path))
    parser.add_argument("--user-data-dir", type=Path, default=Path(paths.user_data_dir))
    parser.add_argument("--data-sharing", default=None, help="Value of the data sharing flag (true/false)")
    parser.add_argument("--analytics", default=None, help="Value of the analytics flag (true/false)")
    parser.add_argument("--min-availability", type=int, default=None,
                        help="Prune recipes below this availability score before ranking")
    parser.add_argument("--limit", type=int, default=10, help="Number of results to print")
    parser.add_argument("--debug", action="store_true", default=service_config.debug)
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug)
    try:
        module = create_ranking_module(
            user_data_dir=args.user_data_dir,
            recipe_catalog_path=args.catalog,
            weights=scoring.weights,
            meals_per_day=scoring.meals_per_day,
            neutral_macro_score=scoring.neutral_macro_score,
            recency_half_life_days=scoring.recency_half_life_days,
            min_availability_score=get_availability_config().min_score,
            max_workers=service_config.max_workers,
        )
        flags = {}
        if args.data_sharing is not None:
            flags["dataSharingEnabled"] = args.data_sharing
        if args.analytics is not None:
            flags["analyticsEnabled"] = args.analytics
        privacy = resolve_privacy_settings(query=flags)

        candidates = module["store"].list_recipes()
        results = module["service"].rank(
            args.user_id, candidates, privacy, min_availability_score=args.min_availability
        )
        payload = [result.model_dump(mode="json") for result in results[: args.limit]]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0
    finally:
        stop_logging()


if __name__ == "__main__":
    sys.exit(main())
