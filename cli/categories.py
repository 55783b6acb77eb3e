#!/usr/bin/env python3

import sys
from pathlib import Path
from ingestion.records import load_categories
from logger import get_logger
from models.category import CategoryType
from cli.output import print_json

logger = get_logger()


def _categories_from_args(args, services):
    """Load categories from --file, or the default seed when not given."""
    if args.file:
        return load_categories(Path(args.file))
    return services.categories.default_categories()


def cmd_tree(args, services):
    """Show categories as a parent/children tree."""
    try:
        categories = _categories_from_args(args, services)
    except Exception as e:
        logger.error(f"Error loading categories: {e}")
        sys.exit(1)

    tree = services.categories.build_tree(categories)

    if args.json:
        print_json(tree)
        return

    if not tree:
        logger.info("No categories found.")
        return

    logger.info("\nCategories:")
    logger.info("=" * 80)
    for node in tree:
        category = node.category
        logger.info(f"{category.name} ({category.id}, {category.type.value})")
        for child in node.children:
            logger.info(f"  └ {child.category.name} ({child.category.id})")
    logger.info("-" * 80)
    logger.info(f"\nTotal categories: {len(categories)}")


def cmd_defaults(args, services):
    """Show the fallback category for each category type."""
    try:
        categories = _categories_from_args(args, services)
    except Exception as e:
        logger.error(f"Error loading categories: {e}")
        sys.exit(1)

    logger.info("\nDefault categories:")
    logger.info("=" * 80)
    missing = 0
    for category_type in CategoryType:
        try:
            default = services.categories.default_category_for(category_type, categories)
            logger.info(f"{category_type.value:<12} {default.name} ({default.id})")
        except LookupError as e:
            logger.warning(str(e))
            missing += 1

    if missing:
        sys.exit(1)


def setup_parser(subparsers):
    """Setup categories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "categories",
        help="Inspect categories",
        description="Show category trees and default categories",
    )

    categories_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available category commands",
        dest="subcommand",
        required=True,
    )

    # categories tree
    tree_parser = categories_subparsers.add_parser(
        "tree", help="Show categories as a tree"
    )
    tree_parser.add_argument(
        "--file", help="Categories JSON file (defaults to the built-in categories)"
    )
    tree_parser.add_argument(
        "--json", action="store_true", help="Print the tree as JSON"
    )
    tree_parser.set_defaults(func=cmd_tree)

    # categories defaults
    defaults_parser = categories_subparsers.add_parser(
        "defaults", help="Show the default category of each type"
    )
    defaults_parser.add_argument(
        "--file", help="Categories JSON file (defaults to the built-in categories)"
    )
    defaults_parser.set_defaults(func=cmd_defaults)
