#!/usr/bin/env python3
"""
Recompute the persisted meal-prep score of every recipe in the catalog.

The score depends only on recipe attributes, so this can run at any time
independently of ranking requests.
"""

import argparse
import logging
import sys
from pathlib import Path

from config_manager import get_paths_config
from recipe_ranking.logging_config import setup_logging, stop_logging
from recipe_ranking.maintenance import recompute_meal_prep_scores
from recipe_ranking.stores import JsonUserDataStore

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    paths = get_paths_config()
    parser = argparse.ArgumentParser(description="Recompute meal prep scores for the recipe catalog")
    parser.add_argument("--catalog", type=Path, default=Path(paths.recipe_catalog_path),
                        help="Recipe catalog JSON file")
    parser.add_argument("--user-data-dir", type=Path, default=Path(paths.user_data_dir),
                        help="User data directory")
    parser.add_argument("--dry-run", action="store_true", help="Report the distribution without writing scores")
    parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug)
    try:
        if not args.catalog.exists():
            logger.error(f"Recipe catalog not found: {args.catalog}")
            return 1

        store = JsonUserDataStore(args.user_data_dir, args.catalog)
        recipes = store.list_recipes()
        logger.info(f"Found {len(recipes)} recipes to score")

        updated, distribution = recompute_meal_prep_scores(recipes, show_progress=not args.no_progress)
        distribution.log_summary(logger)

        if args.dry_run:
            logger.info("Dry run - catalog left unchanged")
        else:
            store.save_recipes(updated)
        return 0
    finally:
        stop_logging()


if __name__ == "__main__":
    sys.exit(main())
