"""Merchant master records used ahead of keyword matching."""

import re
import unicodedata
from dataclasses import dataclass
from typing import Tuple

_WHITESPACE = re.compile(r"\s+")


def _compact(text: str) -> str:
    """Fold width and case, and drop all whitespace."""
    return _WHITESPACE.sub("", unicodedata.normalize("NFKC", text).lower())


@dataclass(frozen=True)
class Merchant:
    """A known merchant and the category its transactions usually belong to.

    Attributes:
        id: Unique identifier.
        name: Display name.
        aliases: Other spellings found in transaction descriptions.
        default_category_id: Category assigned to the merchant's transactions.
        confidence: Confidence reported when the merchant matches.
    """

    id: str
    name: str
    default_category_id: str
    aliases: Tuple[str, ...] = ()
    confidence: float = 0.95

    def matches_description(self, description: str) -> bool:
        """Check whether the name or an alias occurs in a description.

        Matching ignores case, full-width forms and whitespace, so
        "スターバックス 渋谷店" and "STARBUCKS COFFEE" both match.
        """
        text = _compact(description or "")
        if not text:
            return False

        for candidate in (self.name, *self.aliases):
            needle = _compact(candidate)
            if needle and needle in text:
                return True
        return False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "aliases": list(self.aliases),
            "default_category_id": self.default_category_id,
            "confidence": self.confidence,
        }
