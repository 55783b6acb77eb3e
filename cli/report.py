#!/usr/bin/env python3

import sys
from pathlib import Path
from ingestion.records import load_categories, load_transactions
from logger import get_logger
from models.category import CategoryType
from tools.reports import get_period_report
from cli.dates import default_period, parse_date, parse_month
from cli.output import print_json

logger = get_logger()


def _load(args, services):
    if args.categories:
        categories = load_categories(Path(args.categories))
    else:
        categories = services.categories.default_categories()
    transactions = load_transactions(Path(args.transactions_file), categories)
    return categories, transactions


def cmd_summary(args, services):
    """Print category totals, breakdowns and trends for a period."""
    try:
        categories, transactions = _load(args, services)
    except Exception as e:
        logger.error(f"Error loading records: {e}")
        sys.exit(1)

    start_date, end_date = default_period()
    start_date = args.start or start_date
    end_date = args.end or end_date

    try:
        report = get_period_report(
            services, transactions, categories, start_date, end_date, args.type
        )
    except Exception as e:
        logger.error(f"Error building report: {e}")
        sys.exit(1)

    print_json(report)


def cmd_trend(args, services):
    """Print the trend analysis of monthly income, expense or balance."""
    try:
        _, transactions = _load(args, services)
    except Exception as e:
        logger.error(f"Error loading records: {e}")
        sys.exit(1)

    start_month, end_month = default_period(services.config.min_trend_months)
    start_month = args.start_month or start_month
    end_month = args.end_month or end_month

    try:
        analysis = services.trends.analyze(
            transactions, start_month, end_month, args.target, args.period
        )
    except ValueError as e:
        logger.error(f"Error analyzing trend: {e}")
        sys.exit(1)

    print_json(analysis)


def setup_parser(subparsers):
    """Setup report subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "report",
        help="Income and expense reports",
        description="Aggregate transactions by category and month",
    )

    report_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available report commands",
        dest="subcommand",
        required=True,
    )

    # report summary
    summary_parser = report_subparsers.add_parser(
        "summary", help="Category totals for a period"
    )
    summary_parser.add_argument("transactions_file", help="Transactions JSON file")
    summary_parser.add_argument(
        "--categories", help="Categories JSON file (defaults to the built-in categories)"
    )
    summary_parser.add_argument(
        "--start", type=parse_date, help="Start date YYYY-MM-DD (default: 12 months ago)"
    )
    summary_parser.add_argument(
        "--end", type=parse_date, help="End date YYYY-MM-DD (default: end of this month)"
    )
    summary_parser.add_argument(
        "--type",
        choices=[t.value for t in CategoryType],
        help="Only report on one category type",
    )
    summary_parser.set_defaults(func=cmd_summary)

    # report trend
    trend_parser = report_subparsers.add_parser(
        "trend", help="Trend analysis of monthly totals"
    )
    trend_parser.add_argument("transactions_file", help="Transactions JSON file")
    trend_parser.add_argument(
        "--categories", help="Categories JSON file (defaults to the built-in categories)"
    )
    trend_parser.add_argument("--start-month", type=parse_month, help="YYYY-MM")
    trend_parser.add_argument("--end-month", type=parse_month, help="YYYY-MM")
    trend_parser.add_argument(
        "--target",
        choices=["income", "expense", "balance"],
        default="balance",
        help="Value to analyze (default: balance)",
    )
    trend_parser.add_argument(
        "--period",
        type=int,
        choices=[3, 6, 12],
        help="Moving average period in months",
    )
    trend_parser.set_defaults(func=cmd_trend)
