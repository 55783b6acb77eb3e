#!/usr/bin/env python3
"""
Kakeibo CLI - Command-line interface for classifying and aggregating transactions.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    categories   Inspect category trees and default categories
    classify     Classify transactions into category types
    report       Category totals, breakdowns and trends

Examples:
    python -m cli categories tree
    python -m cli classify text "給与振込" --amount 250000
    python -m cli classify file transactions.json --categories categories.json
    python -m cli report summary transactions.json --start 2024-01-01 --end 2024-12-31
    python -m cli report trend transactions.json --start-month 2024-01 --end-month 2024-12
"""

import sys
import argparse
from cli import categories, classify, report
from config import load_config
from services.base import Services
from logger import setup_logging


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Kakeibo - Transaction classification and income/expense reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Create subparsers for each command
    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    # Register each command's subparser
    categories.setup_parser(subparsers)
    classify.setup_parser(subparsers)
    report.setup_parser(subparsers)

    # Parse arguments and execute
    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config()
            setup_logging(config)

            # Create services container for dependency injection
            services = Services(config)

            args.func(args, services)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
