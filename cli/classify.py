#!/usr/bin/env python3

import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from types import SimpleNamespace
from ingestion.records import load_categories, load_transactions
from logger import get_logger
from cli.output import print_json

logger = get_logger()


def cmd_text(args, services):
    """Classify a single description and amount."""
    try:
        amount = Decimal(args.amount)
    except InvalidOperation:
        logger.error(f"Invalid amount: {args.amount}")
        sys.exit(1)

    transaction = SimpleNamespace(amount=amount, description=args.description)
    result = services.classification.classify(transaction, args.institution_type)
    print_json(result)


def cmd_file(args, services):
    """Classify every transaction in a transactions file.

    Each transaction also gets a subcategory suggestion for the type it was
    classified as.
    """
    try:
        if args.categories:
            categories = load_categories(Path(args.categories))
        else:
            categories = services.categories.default_categories()
        transactions = load_transactions(Path(args.transactions_file), categories)
    except Exception as e:
        logger.error(f"Error loading records: {e}")
        sys.exit(1)

    if not transactions:
        logger.info("No transactions to classify.")
        return

    results = services.classification.classify_many(transactions)

    output = []
    for transaction in transactions:
        classification = results[transaction.id]
        entry = {
            "transaction_id": transaction.id,
            "description": transaction.description,
            "classification": classification,
        }
        try:
            entry["subcategory"] = services.subcategories.classify(
                transaction.description, classification.category, categories
            )
        except LookupError as e:
            logger.warning(f"Transaction {transaction.id}: {e}")
            entry["subcategory"] = None
        output.append(entry)

    print_json(output)


def setup_parser(subparsers):
    """Setup classify subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "classify",
        help="Classify transactions",
        description="Assign category types to transactions",
    )

    classify_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available classify commands",
        dest="subcommand",
        required=True,
    )

    # classify text
    text_parser = classify_subparsers.add_parser(
        "text", help="Classify a single description"
    )
    text_parser.add_argument("description", help="Transaction description")
    text_parser.add_argument(
        "--amount", default="0", help="Signed transaction amount (default: 0)"
    )
    text_parser.add_argument(
        "--institution-type",
        help="Institution type, e.g. bank, credit_card, securities",
    )
    text_parser.set_defaults(func=cmd_text)

    # classify file
    file_parser = classify_subparsers.add_parser(
        "file", help="Classify all transactions in a JSON file"
    )
    file_parser.add_argument("transactions_file", help="Transactions JSON file")
    file_parser.add_argument(
        "--categories", help="Categories JSON file (defaults to the built-in categories)"
    )
    file_parser.set_defaults(func=cmd_file)
