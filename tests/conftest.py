"""Shared pytest fixtures for all tests."""

from datetime import date

import pytest

from config import Config, get_default_seed_path
from services.base import Services
from tests.helpers import make_category, make_transaction


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration writing logs to a temporary directory.

    Args:
        tmp_path: pytest tmp_path fixture for temporary directory.

    Returns:
        Config: Test configuration object.
    """
    return Config(
        base_dir=tmp_path / "kakeibo",
        log_level="DEBUG",
        log_dir=tmp_path / "kakeibo" / "logs",
        transfer_window_days=3,
        top_transactions_limit=5,
        moving_average_period=3,
        min_trend_months=6,
        categories_file=get_default_seed_path(),
    )


@pytest.fixture
def services(test_config):
    """Create a Services container with the test configuration.

    Args:
        test_config: Test configuration fixture.

    Returns:
        Services: Services container for testing.
    """
    return Services(test_config)


@pytest.fixture
def sample_categories():
    """A small three-level expense tree plus one income category.

    food
    ├── groceries
    │   └── organic
    └── dining
    salary
    """
    return [
        make_category("food", "expense", order=2),
        make_category("groceries", "expense", parent_id="food", order=1),
        make_category("organic", "expense", parent_id="groceries", order=1),
        make_category("dining", "expense", parent_id="food", order=2),
        make_category("salary", "income", order=1),
    ]


@pytest.fixture
def sample_transactions():
    """Transactions across two months tagged with the sample categories."""
    return [
        make_transaction("t1", 300000, "salary", "income", date(2024, 1, 25), "給与振込"),
        make_transaction("t2", -5000, "groceries", "expense", date(2024, 1, 10), "スーパー"),
        make_transaction("t3", -3000, "organic", "expense", date(2024, 1, 12), "オーガニック"),
        make_transaction("t4", -2000, "food", "expense", date(2024, 2, 3), "食費"),
        make_transaction("t5", -8000, "dining", "expense", date(2024, 2, 14), "レストラン"),
        make_transaction("t6", -1000, "groceries", "expense", date(2024, 2, 20), "コンビニ"),
    ]
