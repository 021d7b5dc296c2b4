"""
Run the meal planner CLI.

Usage:
    python run_cli.py [COMMAND] [OPTIONS]

Commands:
    login        Sign in and save credentials locally (~/.mealplanner/session.json)
    logout       Clear stored credentials
    recipes      List recipes (--category to filter)
    categories   List recipe categories
    recipe       Show one recipe (--servings to rescale)
    plan         Show a week's meal plan
    plan-add     Put a recipe in a meal slot
    plan-remove  Remove (or --clear) a meal slot
    plan-slot    Add an empty meal slot to a day
    saved        List saved recipes (--favorites for favorites only)
    favorite     Toggle a recipe's favorite flag
    profile      Show your profile and preferences
    diet         Replace your dietary requirements
    portions     Set the number of people you cook for

Examples:
    python run_cli.py login alice
    python run_cli.py recipe 3f2a --servings 6
    python run_cli.py plan --week 2025-03-12

Environment variables (all optional):
    SANITY_PROJECT_ID   CMS project id
    SANITY_DATASET      CMS dataset (default: production)
    SANITY_TOKEN        CMS read token for private datasets
    DB_PATH             SQLite database file path (default: mealplanner.db)
    JWT_SECRET          Secret used to sign session tokens
    LOG_LEVEL           Logging level (default: WARNING)
"""

import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

from adapters.cli.main import app

if __name__ == "__main__":
    app()
