"""Merchant service: loading the merchant master and matching descriptions."""

import json
from pathlib import Path
from typing import List, Optional

from errors import RecordValidationError
from logger import get_logger
from models.merchant import Merchant

logger = get_logger()


class MerchantService:
    """Service for looking up known merchants in transaction descriptions."""

    def __init__(self, seed_path: Optional[Path] = None):
        """Initialize the merchant service.

        Args:
            seed_path: JSON file holding the merchant master.
        """
        self.seed_path = seed_path
        self._merchants: Optional[List[Merchant]] = None

    def default_merchants(self) -> List[Merchant]:
        """Load the merchant master from the seed file.

        The file is read once and the result reused on later calls.

        Raises:
            RecordValidationError: If the seed file is missing or malformed.
        """
        if self._merchants is not None:
            return self._merchants

        if self.seed_path is None or not self.seed_path.exists():
            raise RecordValidationError("Seed file not found", source=self.seed_path)

        try:
            with open(self.seed_path, "r", encoding="utf-8") as f:
                merchants_data = json.load(f)
        except json.JSONDecodeError as e:
            raise RecordValidationError(
                f"Error parsing JSON file: {e}", source=self.seed_path
            ) from e

        merchants = []
        for index, data in enumerate(merchants_data):
            if not data.get("id") or not data.get("name") or not data.get("category"):
                raise RecordValidationError(
                    "Merchant entry needs an id, a name and a category",
                    source=self.seed_path,
                    index=index,
                )
            merchants.append(
                Merchant(
                    id=data["id"],
                    name=data["name"],
                    default_category_id=data["category"],
                    aliases=tuple(data.get("aliases", ())),
                    confidence=float(data.get("confidence", 0.95)),
                )
            )

        logger.debug(f"Loaded {len(merchants)} merchants from {self.seed_path}")
        self._merchants = merchants
        return merchants

    def match(
        self, description: str, merchants: Optional[List[Merchant]] = None
    ) -> Optional[Merchant]:
        """Find the first merchant whose name or alias occurs in a description.

        Args:
            description: Transaction description.
            merchants: Merchants to search. Defaults to the merchant master.

        Returns:
            The first matching Merchant, or None.
        """
        if not description:
            return None
        if merchants is None:
            merchants = self.default_merchants()

        for merchant in merchants:
            if merchant.matches_description(description):
                return merchant
        return None
