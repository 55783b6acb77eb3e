"""Aggregation of transaction amounts by category type and category tree."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from errors import CategoryIntegrityError
from logger import get_logger
from models.category import Category, CategoryType
from models.results import CategoryAggregationResult, SubcategoryAggregationResult

logger = get_logger()

ZERO = Decimal("0")
_ONE_DECIMAL = Decimal("0.1")
_INTEGER = Decimal("1")


def to_decimal(value) -> Decimal:
    """Convert an int, float, str or Decimal amount to Decimal."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def calculate_percentage(amount, total) -> Decimal:
    """Share of amount in total as a percentage with one decimal place.

    Returns 0 when total is 0. Halves round away from zero.
    """
    total = to_decimal(total)
    if total == 0:
        return ZERO
    return (to_decimal(amount) / total * 100).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)


def calculate_average(amount, count: int) -> Decimal:
    """Average amount rounded to an integer, or 0 when count is 0."""
    if count == 0:
        return ZERO
    return (to_decimal(amount) / count).quantize(_INTEGER, rounding=ROUND_HALF_UP)


class AggregationService:
    """Service for rolling up transaction amounts.

    All methods accept caller-owned lists and return freshly built results.
    """

    def aggregate_by_type(self, transactions: List, target_type) -> CategoryAggregationResult:
        """Aggregate transactions of one category type.

        Args:
            transactions: All transactions in scope. Their combined amount is
                          the denominator of the percentage.
            target_type: Category type to aggregate.

        Returns:
            CategoryAggregationResult with the signed total, count and share.

        Raises:
            InvalidCategoryTypeError: If target_type is not a known type.
        """
        target_type = CategoryType.parse(target_type)

        filtered = [t for t in transactions if t.category.type == target_type]
        total_amount = sum((to_decimal(t.amount) for t in filtered), ZERO)
        all_total_amount = sum((to_decimal(t.amount) for t in transactions), ZERO)

        return CategoryAggregationResult(
            category=target_type,
            total_amount=total_amount,
            transaction_count=len(filtered),
            percentage=calculate_percentage(total_amount, all_total_amount),
        )

    def aggregate_all_types(self, transactions: List) -> List[CategoryAggregationResult]:
        """Aggregate transactions for every category type, in enum order."""
        return [self.aggregate_by_type(transactions, t) for t in CategoryType]

    def aggregate_by_subcategory(
        self, transactions: List
    ) -> Dict[str, SubcategoryAggregationResult]:
        """Aggregate transactions per category ID.

        Percentages are relative to the sum of all transactions passed in.

        Args:
            transactions: Transactions to aggregate (already filtered by caller).

        Returns:
            Dictionary of category ID to result, in order of first appearance.
        """
        # First pass: totals and counts
        totals: Dict[str, Decimal] = {}
        counts: Dict[str, int] = {}
        for transaction in transactions:
            category_id = transaction.category.id
            totals[category_id] = totals.get(category_id, ZERO) + to_decimal(transaction.amount)
            counts[category_id] = counts.get(category_id, 0) + 1

        grand_total = sum(totals.values(), ZERO)

        # Second pass: derived fields, once every total is known
        return {
            category_id: SubcategoryAggregationResult(
                item_id=category_id,
                total_amount=total,
                transaction_count=counts[category_id],
                average_amount=calculate_average(total, counts[category_id]),
                percentage=calculate_percentage(total, grand_total),
            )
            for category_id, total in totals.items()
        }

    def aggregate_by_subcategory_for_type(
        self, transactions: List, category_type
    ) -> Dict[str, SubcategoryAggregationResult]:
        """Aggregate per category ID within one category type.

        Percentages are relative to the type's total rather than to all
        transactions.

        Raises:
            InvalidCategoryTypeError: If category_type is not a known type.
        """
        category_type = CategoryType.parse(category_type)
        return self.aggregate_by_subcategory(
            [t for t in transactions if t.category.type == category_type]
        )

    def aggregate_hierarchy(
        self, transactions: List, categories: List[Category]
    ) -> List[SubcategoryAggregationResult]:
        """Aggregate transactions along the category hierarchy.

        Every category gets a node, even without transactions. A parent's
        totals include its own transactions and those of all descendants, at
        any depth. Average and percentage are recomputed for every node with
        children.

        Args:
            transactions: Transactions to aggregate.
            categories: Category records defining the hierarchy.

        Returns:
            Root nodes (categories without a parent), in input order.

        Raises:
            CategoryIntegrityError: If a parent_id references an unknown
                                    category, an ID is duplicated, or the
                                    parent links form a cycle.
        """
        flat = self.aggregate_by_subcategory(transactions)
        grand_total = sum((r.total_amount for r in flat.values()), ZERO)

        by_id: Dict[str, Category] = {}
        for category in categories:
            if category.id in by_id:
                raise CategoryIntegrityError(
                    f"Duplicate category ID: {category.id}", category_id=category.id
                )
            by_id[category.id] = category

        roots: List[Category] = []
        children_of: Dict[str, List[Category]] = {c.id: [] for c in categories}
        for category in categories:
            if category.parent_id is None:
                roots.append(category)
            elif category.parent_id not in by_id:
                raise CategoryIntegrityError(
                    f"Category {category.id} references unknown parent {category.parent_id}",
                    category_id=category.id,
                    parent_id=category.parent_id,
                )
            else:
                children_of[category.parent_id].append(category)

        # Post-order traversal: every child is built before its parent
        built: Dict[str, SubcategoryAggregationResult] = {}
        for root in roots:
            stack = [(root, False)]
            while stack:
                category, children_done = stack.pop()
                if children_done:
                    children = tuple(built[c.id] for c in children_of[category.id])
                    built[category.id] = self._build_node(
                        category.id, flat.get(category.id), children, grand_total
                    )
                else:
                    stack.append((category, True))
                    for child in reversed(children_of[category.id]):
                        stack.append((child, False))

        # Categories unreachable from any root sit on a parent cycle
        unreachable = [c.id for c in categories if c.id not in built]
        if unreachable:
            raise CategoryIntegrityError(
                f"Category parent links form a cycle: {', '.join(unreachable)}",
                category_id=unreachable[0],
            )

        logger.debug(
            f"Aggregated {len(transactions)} transactions into "
            f"{len(built)} category nodes ({len(roots)} roots)"
        )
        return [built[root.id] for root in roots]

    def top_transactions(self, transactions: List, limit: int = 5) -> List:
        """Get the transactions with the largest absolute amounts.

        Ties keep their input order.

        Args:
            transactions: Transactions to choose from.
            limit: Maximum number of transactions to return.

        Returns:
            Up to limit transactions, largest absolute amount first.
        """
        if limit <= 0:
            return []
        return sorted(transactions, key=lambda t: abs(t.amount), reverse=True)[:limit]

    def _build_node(
        self,
        item_id: str,
        own: Optional[SubcategoryAggregationResult],
        children: tuple,
        grand_total: Decimal,
    ) -> SubcategoryAggregationResult:
        total_amount = own.total_amount if own else ZERO
        transaction_count = own.transaction_count if own else 0

        if not children:
            return SubcategoryAggregationResult(
                item_id=item_id,
                total_amount=total_amount,
                transaction_count=transaction_count,
                average_amount=own.average_amount if own else ZERO,
                percentage=own.percentage if own else ZERO,
            )

        total_amount += sum((child.total_amount for child in children), ZERO)
        transaction_count += sum(child.transaction_count for child in children)
        return SubcategoryAggregationResult(
            item_id=item_id,
            total_amount=total_amount,
            transaction_count=transaction_count,
            average_amount=calculate_average(total_amount, transaction_count),
            percentage=calculate_percentage(total_amount, grand_total),
            children=children,
        )
