"""Category models for transaction classification and aggregation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from errors import InvalidCategoryTypeError


class CategoryType(str, Enum):
    """The five fixed category types a transaction can belong to."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    REPAYMENT = "repayment"
    INVESTMENT = "investment"

    @classmethod
    def parse(cls, value) -> "CategoryType":
        """Convert a raw value into a CategoryType.

        Args:
            value: A CategoryType or its string value (case-insensitive).

        Returns:
            The matching CategoryType.

        Raises:
            InvalidCategoryTypeError: If value is not one of the five types.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidCategoryTypeError(value)


@dataclass(frozen=True)
class Category:
    """Represents a category record supplied to the core.

    Attributes:
        id: Unique identifier.
        name: Display name.
        type: One of the five category types.
        parent_id: Parent category ID, or None for a top-level category.
        order: Display order among siblings of the same parent.
        is_default: True for the fallback category of its type.
        is_system_defined: True for categories from the default seed.
        keywords: Description keywords used for subcategory matching.
    """

    id: str
    name: str
    type: CategoryType
    parent_id: Optional[str] = None
    order: int = 0
    is_default: bool = False
    is_system_defined: bool = False
    keywords: Tuple[str, ...] = ()

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None

    def ref(self) -> "CategoryRef":
        """Get the minimal projection carried by transactions."""
        return CategoryRef(id=self.id, name=self.name, type=self.type)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "parent_id": self.parent_id,
            "order": self.order,
        }


@dataclass(frozen=True)
class CategoryRef:
    """Minimal category projection attached to a transaction."""

    id: str
    name: str
    type: CategoryType


@dataclass
class CategoryNode:
    """A node of the two-level category tree."""

    category: Category
    children: List["CategoryNode"] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            **self.category.to_dict(),
            "children": [child.to_dict() for child in self.children],
        }
