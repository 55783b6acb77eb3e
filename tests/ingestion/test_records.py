import json
from datetime import date, datetime
from decimal import Decimal

import pytest

from errors import InvalidCategoryTypeError, RecordValidationError
from ingestion.records import load_categories, load_transactions
from models.category import CategoryType


def _write(path, records):
    path.write_text(json.dumps(records, ensure_ascii=False), encoding="utf-8")
    return path


class TestLoadCategories:
    """Tests for loading a categories file."""

    def test_camel_case_keys(self, tmp_path):
        """Test that camelCase keys are accepted."""
        path = _write(
            tmp_path / "categories.json",
            [
                {"id": "food", "name": "食費", "type": "expense", "order": 1},
                {"id": "cafe", "name": "カフェ", "type": "expense", "parentId": "food", "isDefault": True},
            ],
        )

        food, cafe = load_categories(path)

        assert food.type == CategoryType.EXPENSE
        assert food.order == 1
        assert cafe.parent_id == "food"
        assert cafe.is_default is True
        assert cafe.is_system_defined is False

    def test_snake_case_keys(self, tmp_path):
        """Test that snake_case keys are accepted."""
        path = _write(
            tmp_path / "categories.json",
            [{"id": "cafe", "name": "Cafe", "type": "EXPENSE", "parent_id": "food", "keywords": ["coffee"]}],
        )

        (cafe,) = load_categories(path)

        assert cafe.parent_id == "food"
        assert cafe.keywords == ("coffee",)

    def test_missing_field(self, tmp_path):
        """Test that a record without a name reports its index."""
        path = _write(
            tmp_path / "categories.json",
            [{"id": "a", "name": "A", "type": "income"}, {"id": "b", "type": "income"}],
        )

        with pytest.raises(RecordValidationError, match="name") as exc_info:
            load_categories(path)

        assert exc_info.value.index == 1

    def test_unknown_type(self, tmp_path):
        """Test that an unknown category type is rejected."""
        path = _write(tmp_path / "categories.json", [{"id": "a", "name": "A", "type": "savings"}])

        with pytest.raises(InvalidCategoryTypeError):
            load_categories(path)

    def test_file_not_found(self, tmp_path):
        """Test that a missing file raises RecordValidationError."""
        with pytest.raises(RecordValidationError, match="not found"):
            load_categories(tmp_path / "missing.json")

    def test_not_a_list(self, tmp_path):
        """Test that a JSON object instead of a list is rejected."""
        path = tmp_path / "categories.json"
        path.write_text('{"id": "a"}', encoding="utf-8")

        with pytest.raises(RecordValidationError, match="list"):
            load_categories(path)


class TestLoadTransactions:
    """Tests for loading a transactions file."""

    def test_load(self, tmp_path):
        """Test a transaction with camelCase keys."""
        path = _write(
            tmp_path / "transactions.json",
            [
                {
                    "id": "t1",
                    "date": "2024-01-15",
                    "amount": -1200,
                    "categoryId": "expense-food",
                    "categoryType": "expense",
                    "description": "スーパー",
                    "institutionId": "bank-1",
                    "institutionType": "bank",
                }
            ],
        )

        (transaction,) = load_transactions(path)

        assert transaction.date == date(2024, 1, 15)
        assert transaction.amount == Decimal("-1200")
        assert transaction.category.id == "expense-food"
        assert transaction.category.type == CategoryType.EXPENSE
        assert transaction.institution_type == "bank"

    def test_datetime(self, tmp_path):
        """Test that a timestamp is kept as a datetime."""
        path = _write(
            tmp_path / "transactions.json",
            [{"id": "t1", "date": "2024-01-15T09:30:00", "amount": 100, "categoryId": "x", "categoryType": "income"}],
        )

        (transaction,) = load_transactions(path)

        assert transaction.date == datetime(2024, 1, 15, 9, 30)
        assert transaction.month_key == "2024-01"

    def test_fractional_amount(self, tmp_path):
        """Test that decimal amounts keep their exact value."""
        path = _write(
            tmp_path / "transactions.json",
            [{"id": "t1", "date": "2024-01-15", "amount": "12.34", "categoryId": "x", "categoryType": "income"}],
        )

        (transaction,) = load_transactions(path)

        assert transaction.amount == Decimal("12.34")

    def test_category_names_from_categories(self, tmp_path, services):
        """Test that missing category names are filled in from the categories."""
        path = _write(
            tmp_path / "transactions.json",
            [
                {"id": "t1", "date": "2024-01-15", "amount": -500, "categoryId": "expense-food-cafe", "categoryType": "expense"},
                {"id": "t2", "date": "2024-01-16", "amount": -500, "categoryId": "custom", "categoryType": "expense", "categoryName": "Mine"},
            ],
        )

        t1, t2 = load_transactions(path, services.categories.default_categories())

        assert t1.category.name == "カフェ"
        assert t2.category.name == "Mine"

    def test_invalid_date(self, tmp_path):
        """Test that an invalid date reports the record index."""
        path = _write(
            tmp_path / "transactions.json",
            [{"id": "t1", "date": "2024-13-01", "amount": 1, "categoryId": "x", "categoryType": "income"}],
        )

        with pytest.raises(RecordValidationError) as exc_info:
            load_transactions(path)

        assert exc_info.value.index == 0

    def test_missing_amount(self, tmp_path):
        """Test that a record without an amount is rejected."""
        path = _write(
            tmp_path / "transactions.json",
            [{"id": "t1", "date": "2024-01-01", "categoryId": "x", "categoryType": "income"}],
        )

        with pytest.raises(RecordValidationError, match="amount"):
            load_transactions(path)

    def test_malformed_json(self, tmp_path):
        """Test that invalid JSON raises RecordValidationError."""
        path = tmp_path / "transactions.json"
        path.write_text("[", encoding="utf-8")

        with pytest.raises(RecordValidationError, match="parsing"):
            load_transactions(path)

    def test_empty_file(self, tmp_path):
        """Test that an empty list loads no transactions."""
        path = _write(tmp_path / "transactions.json", [])

        assert load_transactions(path) == []
