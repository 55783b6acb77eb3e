"""Category service: tree building, default categories and lookups."""

import json
from pathlib import Path
from typing import Dict, List, Optional

from errors import RecordValidationError
from logger import get_logger
from models.category import Category, CategoryNode, CategoryType

logger = get_logger()

# Fallback category names per type, used when no category is flagged as default
DEFAULT_CATEGORY_NAMES: Dict[CategoryType, str] = {
    CategoryType.INCOME: "その他収入",
    CategoryType.EXPENSE: "その他支出",
    CategoryType.TRANSFER: "銀行間振替",
    CategoryType.REPAYMENT: "ローン返済",
    CategoryType.INVESTMENT: "株式投資",
}


class CategoryService:
    """Service for working with category records.

    All operations work on caller-supplied lists and never modify them.
    """

    def __init__(self, seed_path: Optional[Path] = None):
        """Initialize the category service.

        Args:
            seed_path: JSON file holding the default category set.
        """
        self.seed_path = seed_path

    def build_tree(self, categories: List[Category]) -> List[CategoryNode]:
        """Build a two-level parent/children tree from flat category records.

        Only direct children of top-level categories are nested; deeper
        descendants are not included. Roots and children are each sorted by
        their order field, keeping input order for ties.

        Args:
            categories: Flat list of categories.

        Returns:
            List of root CategoryNode objects.
        """
        tree = []
        for parent in categories:
            if not parent.is_top_level:
                continue
            children = sorted(
                (c for c in categories if c.parent_id == parent.id),
                key=lambda c: c.order,
            )
            tree.append(
                CategoryNode(
                    category=parent,
                    children=[CategoryNode(category=child) for child in children],
                )
            )

        return sorted(tree, key=lambda node: node.category.order)

    def find(self, categories: List[Category], category_id: str) -> Optional[Category]:
        """Get a single category by ID, or None if not present."""
        for category in categories:
            if category.id == category_id:
                return category
        return None

    def find_by_type(
        self, categories: List[Category], category_type
    ) -> List[Category]:
        """Get all categories of a type, ordered by their order field.

        Raises:
            InvalidCategoryTypeError: If category_type is not a known type.
        """
        category_type = CategoryType.parse(category_type)
        return sorted(
            (c for c in categories if c.type == category_type),
            key=lambda c: c.order,
        )

    def find_children(
        self, categories: List[Category], parent_id: str
    ) -> List[Category]:
        """Get the direct children of a category, ordered by their order field."""
        return sorted(
            (c for c in categories if c.parent_id == parent_id),
            key=lambda c: c.order,
        )

    def default_category_for(
        self, category_type, categories: List[Category]
    ) -> Category:
        """Get the fallback category for a category type.

        The category flagged is_default wins; otherwise the category named in
        DEFAULT_CATEGORY_NAMES is used.

        Args:
            category_type: The category type.
            categories: Candidate categories.

        Returns:
            The default Category for the type.

        Raises:
            InvalidCategoryTypeError: If category_type is not a known type.
            LookupError: If no default category exists for the type.
        """
        category_type = CategoryType.parse(category_type)
        candidates = [c for c in categories if c.type == category_type]

        for category in candidates:
            if category.is_default:
                return category

        default_name = DEFAULT_CATEGORY_NAMES[category_type]
        for category in candidates:
            if category.name == default_name:
                return category

        raise LookupError(
            f"Default category not found for category type: {category_type.value}"
        )

    def default_categories(self) -> List[Category]:
        """Load the default category set from the seed file.

        Child entries inherit their parent's type. Every seeded category is
        marked as system-defined.

        Returns:
            Flat list of Category objects, parents before their children.

        Raises:
            RecordValidationError: If the seed file is missing or malformed.
            InvalidCategoryTypeError: If an entry has an unknown type.
        """
        if self.seed_path is None or not self.seed_path.exists():
            raise RecordValidationError("Seed file not found", source=self.seed_path)

        try:
            with open(self.seed_path, "r", encoding="utf-8") as f:
                categories_data = json.load(f)
        except json.JSONDecodeError as e:
            raise RecordValidationError(
                f"Error parsing JSON file: {e}", source=self.seed_path
            ) from e

        categories = []
        for index, category_data in enumerate(categories_data):
            if not category_data.get("id") or not category_data.get("name"):
                raise RecordValidationError(
                    "Category entry needs an id and a name",
                    source=self.seed_path,
                    index=index,
                )
            parent = self._seed_category(category_data, None, None)
            categories.append(parent)

            for child_data in category_data.get("children", []):
                if not child_data.get("id") or not child_data.get("name"):
                    logger.warning(
                        f"Skipping child of '{parent.name}' with no id or name"
                    )
                    continue
                categories.append(self._seed_category(child_data, parent.id, parent.type))

        logger.debug(f"Loaded {len(categories)} default categories from {self.seed_path}")
        return categories

    def _seed_category(
        self,
        data: dict,
        parent_id: Optional[str],
        parent_type: Optional[CategoryType],
    ) -> Category:
        """Convert one seed entry into a Category."""
        category_type = CategoryType.parse(data.get("type", parent_type))
        return Category(
            id=data["id"],
            name=data["name"],
            type=category_type,
            parent_id=parent_id,
            order=int(data.get("order", 0)),
            is_default=bool(data.get("default", False)),
            is_system_defined=True,
            keywords=tuple(data.get("keywords", ())),
        )
