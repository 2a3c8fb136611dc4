"""
Command line entry point for the Cocktail Order Engine.

Usage Examples:
    # Create the database tables
    cocktail-order init-db

    # Print the order list for event 12 at its stored pricing tier
    cocktail-order order-list 12

    # Print the order list for event 12 at business tier prices
    cocktail-order order-list 12 --tier business

    # Plan an exported menu without touching the database
    cocktail-order plan-file menu.json --tier first_class
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from src.services.catalog_service import recipes_from_records, selection_from_record
from src.services.database import initialize_app_database
from src.services.exceptions import ServiceError
from src.services.order_service import get_drinks_count, get_order_list, planner_settings
from src.services.ordering import build_order_list, plan_selection, render_order_list_text
from src.utils.config import get_config
from src.utils.constants import PRICING_TIERS

logger = logging.getLogger(__name__)


def init_db_cmd() -> int:
    """Create the database tables."""
    config = get_config()
    print(f"Initializing database ({config.environment})...")
    initialize_app_database()
    print("Database initialized successfully")
    return 0


def order_list_cmd(event_id: int, tier: Optional[str]) -> int:
    """Print an event's order list."""
    try:
        initialize_app_database()
        lines = get_order_list(event_id, pricing_tier=tier)
        drinks = get_drinks_count(event_id)
    except ServiceError as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Number of drinks: {drinks}")
    print(render_order_list_text(lines))
    return 0


def plan_file_cmd(path: str, tier: Optional[str]) -> int:
    """
    Print the order list for a JSON menu document.

    The document holds "recipes" (exported recipe records with nested
    recipe_ingredients), "selection" ({recipe_id: servings} or a list of
    event_recipes rows), and an optional "pricing_tier".
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            document = json.load(fh)
    except (OSError, ValueError) as e:
        print(f"ERROR: Could not read {path}: {e}")
        return 1

    recipes = recipes_from_records(document.get("recipes") or [])
    try:
        selection = selection_from_record(document.get("selection"))
    except ServiceError as e:
        print(f"ERROR: {e}")
        return 1
    plans = plan_selection(
        selection,
        recipes,
        tier or document.get("pricing_tier"),
        planner_settings(),
    )
    print(render_order_list_text(build_order_list(plans)))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="cocktail-order",
        description="Order lists for cocktail events",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("init-db", help="Create the database tables")

    order_parser = subparsers.add_parser("order-list", help="Print an event's order list")
    order_parser.add_argument("event_id", type=int, help="Event ID")
    order_parser.add_argument(
        "--tier",
        choices=PRICING_TIERS,
        default=None,
        help="Pricing tier (default: the event's tier)",
    )

    plan_parser = subparsers.add_parser("plan-file", help="Plan a JSON menu document")
    plan_parser.add_argument("file", help="JSON file path")
    plan_parser.add_argument(
        "--tier",
        choices=PRICING_TIERS,
        default=None,
        help="Pricing tier (default: the document's tier, else economy)",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "init-db":
        return init_db_cmd()
    elif args.command == "order-list":
        return order_list_cmd(args.event_id, args.tier)
    elif args.command == "plan-file":
        return plan_file_cmd(args.file, args.tier)
    else:
        print(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
