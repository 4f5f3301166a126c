#!/usr/bin/env python3
"""
Initialize the MyMixes database
Creates tables and optionally seeds a sample reviewer and recipe
"""

import argparse
import sys
import logging
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("init_db")

SAMPLE_RECIPE = {
    "title": "Whiskey Sour",
    "slug": "whiskey-sour",
    "description": "Classic sour with a silky foam",
    "method": "Dry shake, then shake with ice and strain over fresh ice.",
    "ingredients": [
        {"name": "Bourbon", "amount": "2 oz"},
        {"name": "Lemon juice", "amount": "3/4 oz"},
        {"name": "Simple syrup", "amount": "3/4 oz"},
        {"name": "Egg white", "amount": "1"},
    ],
}


def init_tables() -> bool:
    """Create all tables"""
    from sqlalchemy import inspect
    from sqlalchemy.exc import SQLAlchemyError

    from domain.models import init_database, get_engine

    try:
        init_database()
    except SQLAlchemyError as e:
        logger.error(f"✗ Failed to initialize database: {e}")
        return False

    tables = inspect(get_engine()).get_table_names()
    logger.info(f"✓ {len(tables)} tables ready: {', '.join(sorted(tables))}")
    return True


def seed() -> None:
    """Insert the sample user and recipe when missing"""
    from domain.models import get_session_factory
    from domain.schemas import RecipeCreate
    from repositories import RecipeRepository, UserRepository
    from services import RecipeService

    db = get_session_factory()()
    try:
        users = UserRepository(db)
        if users.get_by_email("test@test.com") is None:
            users.create_user("test@test.com", name="Test User")
            logger.info("✓ Seeded sample user")

        if RecipeRepository(db).get_by_slug(SAMPLE_RECIPE["slug"]) is None:
            RecipeService.create_recipe(db, RecipeCreate.model_validate(SAMPLE_RECIPE))
            logger.info("✓ Seeded sample recipe")
    finally:
        db.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", action="store_true", help="insert sample data")
    args = parser.parse_args(argv)

    if not init_tables():
        return 1
    if args.seed:
        seed()
    return 0


if __name__ == "__main__":
    sys.exit(main())
