from decimal import Decimal

import pytest

from errors import CategoryIntegrityError
from tests.factories.random_tree import gen_tree_with_transactions
from tests.helpers import make_category, make_transaction


def _expenses(transactions):
    return [t for t in transactions if t.category.type.value == "expense"]


def _walk(node):
    yield node
    for child in node.children:
        yield from _walk(child)


class TestAggregateHierarchy:
    """Tests for AggregationService.aggregate_hierarchy."""

    def test_three_level_rollup(self, services, sample_categories, sample_transactions):
        """Test that parents include their own and all descendants' transactions."""
        roots = services.aggregation.aggregate_hierarchy(
            _expenses(sample_transactions), sample_categories
        )

        food = roots[0]
        assert food.item_id == "food"
        assert food.total_amount == Decimal("-19000")
        assert food.transaction_count == 5
        assert food.average_amount == Decimal("-3800")
        assert food.percentage == Decimal("100.0")

        groceries, dining = food.children
        assert groceries.item_id == "groceries"
        assert groceries.total_amount == Decimal("-9000")
        assert groceries.transaction_count == 3
        assert groceries.average_amount == Decimal("-3000")
        assert groceries.percentage == Decimal("47.4")

        (organic,) = groceries.children
        assert organic.total_amount == Decimal("-3000")
        assert organic.percentage == Decimal("15.8")
        assert organic.children == ()

        assert dining.total_amount == Decimal("-8000")
        assert dining.percentage == Decimal("42.1")

    def test_roots_in_input_order(self, services, sample_categories, sample_transactions):
        """Test that roots keep the order of the category list."""
        roots = services.aggregation.aggregate_hierarchy(sample_transactions, sample_categories)

        assert [r.item_id for r in roots] == ["food", "salary"]

    def test_category_without_transactions(self, services, sample_categories, sample_transactions):
        """Test that a category with no transactions still gets a zero node."""
        roots = services.aggregation.aggregate_hierarchy(
            _expenses(sample_transactions), sample_categories
        )

        salary = roots[1]
        assert salary.item_id == "salary"
        assert salary.total_amount == 0
        assert salary.transaction_count == 0
        assert salary.average_amount == 0
        assert salary.percentage == 0

    def test_parent_without_own_transactions(self, services):
        """Test a parent whose total comes only from its children."""
        categories = [
            make_category("transport"),
            make_category("train", parent_id="transport"),
            make_category("taxi", parent_id="transport"),
        ]
        transactions = [
            make_transaction("a", -300, "train"),
            make_transaction("b", -2500, "taxi"),
        ]

        (transport,) = services.aggregation.aggregate_hierarchy(transactions, categories)

        assert transport.total_amount == Decimal("-2800")
        assert transport.transaction_count == 2
        assert transport.average_amount == Decimal("-1400")

    def test_no_categories(self, services, sample_transactions):
        """Test that no categories gives no nodes."""
        assert services.aggregation.aggregate_hierarchy(sample_transactions, []) == []

    def test_unknown_parent(self, services):
        """Test that a dangling parent reference is rejected."""
        categories = [make_category("orphan", parent_id="missing")]

        with pytest.raises(CategoryIntegrityError) as exc_info:
            services.aggregation.aggregate_hierarchy([], categories)

        assert exc_info.value.category_id == "orphan"
        assert exc_info.value.parent_id == "missing"

    def test_duplicate_id(self, services):
        """Test that duplicate category IDs are rejected."""
        categories = [make_category("food"), make_category("food")]

        with pytest.raises(CategoryIntegrityError, match="Duplicate"):
            services.aggregation.aggregate_hierarchy([], categories)

    def test_cycle(self, services):
        """Test that parent links forming a cycle are rejected."""
        categories = [
            make_category("root"),
            make_category("a", parent_id="b"),
            make_category("b", parent_id="a"),
        ]

        with pytest.raises(CategoryIntegrityError, match="cycle"):
            services.aggregation.aggregate_hierarchy([], categories)


class TestHierarchyProperties:
    """Invariants checked against randomly generated trees."""

    @pytest.mark.parametrize("seed", range(20))
    def test_parent_equals_own_plus_children(self, services, seed):
        """Test that every node's total is its own total plus its children's."""
        categories, transactions = gen_tree_with_transactions(seed)
        own = services.aggregation.aggregate_by_subcategory(transactions)

        roots = services.aggregation.aggregate_hierarchy(transactions, categories)

        for root in roots:
            for node in _walk(root):
                own_total = own[node.item_id].total_amount if node.item_id in own else 0
                own_count = own[node.item_id].transaction_count if node.item_id in own else 0
                assert node.total_amount == own_total + sum(
                    (c.total_amount for c in node.children), Decimal("0")
                )
                assert node.transaction_count == own_count + sum(
                    c.transaction_count for c in node.children
                )

    @pytest.mark.parametrize("seed", range(20))
    def test_roots_cover_every_transaction(self, services, seed):
        """Test that root totals add up to the total of all transactions."""
        categories, transactions = gen_tree_with_transactions(seed)

        roots = services.aggregation.aggregate_hierarchy(transactions, categories)

        assert sum(r.total_amount for r in roots) == sum(t.amount for t in transactions)
        assert sum(r.transaction_count for r in roots) == len(transactions)
        assert sum(len(list(_walk(r))) for r in roots) == len(categories)

    @pytest.mark.parametrize("seed", range(5))
    def test_deterministic(self, services, seed):
        """Test that the same input always gives the same tree."""
        categories, transactions = gen_tree_with_transactions(seed)

        first = services.aggregation.aggregate_hierarchy(transactions, categories)
        second = services.aggregation.aggregate_hierarchy(transactions, categories)

        assert first == second
