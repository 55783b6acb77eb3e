"""Load category and transaction records from JSON files.

Expected format of a categories file:
    [{"id": "expense-food", "name": "Food", "type": "expense",
      "parentId": null, "order": 1}, ...]

Expected format of a transactions file:
    [{"id": "t1", "date": "2024-01-15", "amount": -1200,
      "categoryId": "expense-food", "categoryType": "expense",
      "description": "Supermarket", "institutionId": "bank-1"}, ...]

Both camelCase and snake_case keys are accepted.
"""

import datetime as dt
import json
from pathlib import Path
from decimal import Decimal
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from errors import RecordValidationError
from logger import get_logger
from models.category import Category, CategoryRef, CategoryType
from models.transaction import Transaction

logger = get_logger()


class CategoryRecord(BaseModel):
    """Single category record as stored in a categories file."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    type: str
    parent_id: Optional[str] = Field(default=None, alias="parentId")
    order: int = 0
    is_default: bool = Field(default=False, alias="isDefault")
    keywords: List[str] = Field(default_factory=list)

    def to_category(self) -> Category:
        return Category(
            id=self.id,
            name=self.name,
            type=CategoryType.parse(self.type),
            parent_id=self.parent_id,
            order=self.order,
            is_default=self.is_default,
            keywords=tuple(self.keywords),
        )


class TransactionRecord(BaseModel):
    """Single transaction record as stored in a transactions file."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    date: Union[dt.datetime, dt.date]
    amount: Decimal
    category_id: str = Field(alias="categoryId")
    category_type: str = Field(alias="categoryType")
    category_name: Optional[str] = Field(default=None, alias="categoryName")
    description: str = ""
    institution_id: Optional[str] = Field(default=None, alias="institutionId")
    institution_type: Optional[str] = Field(default=None, alias="institutionType")

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value):
        """Accept "YYYY-MM-DD" as a date and anything with a time as a datetime."""
        if isinstance(value, str):
            value = value.strip()
            if "T" in value or " " in value:
                return dt.datetime.fromisoformat(value)
            return dt.date.fromisoformat(value)
        return value

    def to_transaction(self, category_names: Optional[Dict[str, str]] = None) -> Transaction:
        name = self.category_name
        if name is None and category_names:
            name = category_names.get(self.category_id)
        return Transaction(
            id=self.id,
            date=self.date,
            amount=self.amount,
            category=CategoryRef(
                id=self.category_id,
                name=name or "",
                type=CategoryType.parse(self.category_type),
            ),
            description=self.description,
            institution_id=self.institution_id,
            institution_type=self.institution_type,
        )


def _read_json_list(path: Path) -> list:
    if not path.exists():
        raise RecordValidationError("File not found", source=path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise RecordValidationError(f"Error parsing JSON file: {e}", source=path) from e

    if not isinstance(data, list):
        raise RecordValidationError("Expected a JSON list of records", source=path)
    return data


def _first_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}" if location else first["msg"]


def load_categories(path: Path) -> List[Category]:
    """Load category records from a JSON file.

    Args:
        path: Path to the categories file.

    Returns:
        List of Category objects in file order.

    Raises:
        RecordValidationError: If the file is missing or a record is malformed.
        InvalidCategoryTypeError: If a record has an unknown category type.
    """
    categories = []
    for index, data in enumerate(_read_json_list(path)):
        try:
            record = CategoryRecord.model_validate(data)
        except ValidationError as e:
            raise RecordValidationError(_first_error(e), source=path, index=index) from e
        categories.append(record.to_category())

    logger.info(f"Loaded {len(categories)} categories from {path}")
    return categories


def load_transactions(
    path: Path, categories: Optional[List[Category]] = None
) -> List[Transaction]:
    """Load transaction records from a JSON file.

    Args:
        path: Path to the transactions file.
        categories: Optional categories used to fill in missing category names.

    Returns:
        List of Transaction objects in file order.

    Raises:
        RecordValidationError: If the file is missing or a record is malformed.
        InvalidCategoryTypeError: If a record has an unknown category type.
    """
    category_names = {c.id: c.name for c in categories or []}

    transactions = []
    for index, data in enumerate(_read_json_list(path)):
        try:
            record = TransactionRecord.model_validate(data)
        except ValidationError as e:
            raise RecordValidationError(_first_error(e), source=path, index=index) from e
        transactions.append(record.to_transaction(category_names))

    logger.info(f"Loaded {len(transactions)} transactions from {path}")
    return transactions
