"""Period report tools combining classification, aggregation and trends."""

from datetime import date
from typing import Dict, List, Optional

from logger import get_logger
from models.category import Category, CategoryType
from models.transaction import Transaction
from services.trends import as_date

logger = get_logger()


def get_period_transactions(
    transactions: List[Transaction], start_date: date, end_date: date
) -> List[Transaction]:
    """Get the transactions dated within a period (both ends inclusive)."""
    start, end = as_date(start_date), as_date(end_date)
    return [t for t in transactions if start <= t.calendar_date <= end]


def get_category_summary(
    services,
    transactions: List[Transaction],
    categories: List[Category],
    category_type,
    start_date: date,
    end_date: date,
) -> Dict:
    """Summarize one category type over a period.

    Args:
        services: Services container.
        transactions: Transactions already limited to the period.
        categories: Categories used to name the subcategories.
        category_type: Category type to summarize.
        start_date: Start of period.
        end_date: End of period.

    Returns:
        Dictionary with:
        - "aggregation": CategoryAggregationResult for the type
        - "subcategories": list of dicts with "category_id", "category_name",
          "result" (SubcategoryAggregationResult, percentage within the type)
          and "top_transactions"
        - "trend": TrendData for the type's transactions
        - "month_over_month": list of MonthOverMonth entries

    Raises:
        InvalidCategoryTypeError: If category_type is not a known type.
    """
    category_type = CategoryType.parse(category_type)
    limit = services.config.top_transactions_limit

    aggregation = services.aggregation.aggregate_by_type(transactions, category_type)
    type_transactions = [t for t in transactions if t.category.type == category_type]

    names = {c.id: c.name for c in categories}
    subcategories = []
    breakdown = services.aggregation.aggregate_by_subcategory_for_type(
        transactions, category_type
    )
    for category_id, result in breakdown.items():
        subcategory_transactions = [
            t for t in type_transactions if t.category.id == category_id
        ]
        subcategories.append(
            {
                "category_id": category_id,
                "category_name": names.get(category_id, ""),
                "result": result,
                "top_transactions": services.aggregation.top_transactions(
                    subcategory_transactions, limit
                ),
            }
        )

    trend = services.trends.calculate_trend(type_transactions, start_date, end_date)

    return {
        "aggregation": aggregation,
        "subcategories": subcategories,
        "trend": trend,
        "month_over_month": services.trends.month_over_month(trend),
    }


def get_period_report(
    services,
    transactions: List[Transaction],
    categories: List[Category],
    start_date: date,
    end_date: date,
    category_type: Optional[str] = None,
) -> Dict:
    """Build an income/expense report for a period.

    Args:
        services: Services container.
        transactions: All transactions; those outside the period are ignored.
        categories: All category records.
        start_date: Start of period (inclusive).
        end_date: End of period (inclusive).
        category_type: Optional single category type to report on.

    Returns:
        Dictionary with:
        - "period": {"start": date, "end": date}
        - "categories": {category type value: category summary}, see
          get_category_summary
        - "hierarchy": root SubcategoryAggregationResult nodes
        - "transfer_pairs": list of (transaction, transaction) tuples

    Raises:
        ValueError: If start_date is after end_date.
        InvalidCategoryTypeError: If category_type is not a known type.
        CategoryIntegrityError: If the categories do not form a valid tree.
    """
    if as_date(start_date) > as_date(end_date):
        raise ValueError(f"Start date {start_date} is after end date {end_date}")

    period_transactions = get_period_transactions(transactions, start_date, end_date)
    logger.info(
        f"Building report for {start_date} to {end_date}: "
        f"{len(period_transactions)} of {len(transactions)} transactions in period"
    )

    if category_type is not None:
        category_types = [CategoryType.parse(category_type)]
    else:
        category_types = list(CategoryType)

    return {
        "period": {"start": as_date(start_date), "end": as_date(end_date)},
        "categories": {
            t.value: get_category_summary(
                services, period_transactions, categories, t, start_date, end_date
            )
            for t in category_types
        },
        "hierarchy": services.aggregation.aggregate_hierarchy(
            period_transactions, categories
        ),
        "transfer_pairs": services.classification.find_transfer_pairs(
            period_transactions
        ),
    }
