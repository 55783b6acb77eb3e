"""Helper utilities for tests."""

from datetime import date
from decimal import Decimal
from typing import Optional

from models.category import Category, CategoryRef, CategoryType
from models.transaction import Transaction


def make_category(
    category_id: str,
    category_type=CategoryType.EXPENSE,
    parent_id: Optional[str] = None,
    order: int = 0,
    name: Optional[str] = None,
    **kwargs,
) -> Category:
    """Create a Category with sensible defaults."""
    return Category(
        id=category_id,
        name=name or category_id,
        type=CategoryType.parse(category_type),
        parent_id=parent_id,
        order=order,
        **kwargs,
    )


def make_transaction(
    transaction_id: str,
    amount,
    category_id: str = "expense-food",
    category_type=CategoryType.EXPENSE,
    transaction_date: date = date(2024, 1, 15),
    description: str = "",
    institution_id: Optional[str] = None,
    institution_type: Optional[str] = None,
) -> Transaction:
    """Create a Transaction with sensible defaults.

    Args:
        transaction_id: Transaction ID.
        amount: Signed amount; converted to Decimal.
        category_id: ID of the category the transaction is tagged with.
        category_type: Type of that category.
        transaction_date: Date of the transaction.
        description: Free-text description.
        institution_id: Optional institution ID.
        institution_type: Optional institution type.
    """
    return Transaction(
        id=transaction_id,
        date=transaction_date,
        amount=Decimal(str(amount)),
        category=CategoryRef(
            id=category_id,
            name=category_id,
            type=CategoryType.parse(category_type),
        ),
        description=description,
        institution_id=institution_id,
        institution_type=institution_type,
    )
