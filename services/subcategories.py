"""Merchant and keyword based subcategory matching within a category type."""

import re
import unicodedata
from typing import List, Optional

from logger import get_logger
from models.category import Category, CategoryType
from models.results import SubcategoryMatch
from services.categories import CategoryService
from services.merchants import MerchantService

logger = get_logger()

MIN_KEYWORD_CONFIDENCE = 0.7
DEFAULT_MATCH_CONFIDENCE = 0.5

# Keep word characters, whitespace, hiragana, katakana (with the long vowel mark) and kanji
_SYMBOLS = re.compile(r"[^\w\sぁ-んァ-ヶー一-龯]")


def normalize_text(text: str) -> str:
    """Normalize a description for keyword matching.

    Full-width letters and digits become half-width, text is lower-cased and
    symbols are removed.
    """
    text = unicodedata.normalize("NFKC", text).lower()
    return _SYMBOLS.sub("", text).strip()


class SubcategoryMatcher:
    """Chooses a category of a given type from a transaction description.

    A known merchant in the description decides first. Otherwise each
    candidate category scores the share of its keywords found in the
    description. The highest score wins; the first candidate wins a tie.
    """

    def __init__(
        self,
        category_service: CategoryService,
        merchant_service: Optional[MerchantService] = None,
    ):
        self.category_service = category_service
        self.merchant_service = merchant_service

    def match_merchant(
        self, description: str, category_type, categories: List[Category]
    ) -> Optional[SubcategoryMatch]:
        """Find a known merchant whose category is among the candidates.

        A merchant whose category is missing from categories, or belongs to
        another category type, does not match.

        Raises:
            InvalidCategoryTypeError: If category_type is not a known type.
        """
        category_type = CategoryType.parse(category_type)
        if self.merchant_service is None:
            return None

        merchant = self.merchant_service.match(description)
        if merchant is None:
            return None

        category = self.category_service.find(categories, merchant.default_category_id)
        if category is None or category.type != category_type:
            logger.debug(
                f"Merchant '{merchant.id}' has no {category_type.value} category "
                f"'{merchant.default_category_id}'"
            )
            return None

        return SubcategoryMatch(
            category=category,
            confidence=merchant.confidence,
            reason="merchant_match",
            merchant_id=merchant.id,
        )

    def match(
        self, description: str, category_type, categories: List[Category]
    ) -> Optional[SubcategoryMatch]:
        """Find the best keyword match among categories of a type.

        Args:
            description: Transaction description.
            category_type: Category type the transaction was classified as.
            categories: Candidate categories.

        Returns:
            SubcategoryMatch, or None if no keyword matched.

        Raises:
            InvalidCategoryTypeError: If category_type is not a known type.
        """
        category_type = CategoryType.parse(category_type)
        text = normalize_text(description or "")
        if not text:
            return None

        best = None
        best_score = 0.0
        for category in self.category_service.find_by_type(categories, category_type):
            score = self.calculate_match_score(text, category.keywords)
            if score > best_score:
                best, best_score = category, score

        if best is None:
            return None

        return SubcategoryMatch(
            category=best,
            confidence=max(best_score, MIN_KEYWORD_CONFIDENCE),
            reason="keyword_match",
            score=best_score,
        )

    def classify(
        self, description: str, category_type, categories: List[Category]
    ) -> SubcategoryMatch:
        """Choose a category for a description.

        A merchant match wins over a keyword match, and the type default is
        used when neither matches.

        Raises:
            InvalidCategoryTypeError: If category_type is not a known type.
            LookupError: If nothing matched and the type has no default category.
        """
        merchant_match = self.match_merchant(description, category_type, categories)
        if merchant_match:
            return merchant_match

        keyword_match = self.match(description, category_type, categories)
        if keyword_match:
            return keyword_match

        default = self.category_service.default_category_for(category_type, categories)
        logger.debug(f"No keyword match for '{description}', using '{default.name}'")
        return SubcategoryMatch(
            category=default,
            confidence=DEFAULT_MATCH_CONFIDENCE,
            reason="default",
        )

    def calculate_match_score(self, text: str, keywords) -> float:
        """Share of keywords found in already-normalized text, 0 when none."""
        if not keywords:
            return 0.0

        normalized = [normalize_text(keyword) for keyword in keywords]
        match_count = sum(1 for keyword in normalized if keyword and keyword in text)
        return match_count / len(keywords)

