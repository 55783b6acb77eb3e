import json

import pytest

from errors import RecordValidationError
from models.merchant import Merchant
from services.merchants import MerchantService


@pytest.fixture
def starbucks():
    return Merchant(
        id="starbucks",
        name="スターバックス",
        default_category_id="expense-food-cafe",
        aliases=("Starbucks", "スタバ"),
    )


class TestMatchesDescription:
    """Tests for Merchant.matches_description."""

    def test_name(self, starbucks):
        """Test that the merchant name inside a description matches."""
        assert starbucks.matches_description("スターバックス渋谷店") is True

    def test_alias(self, starbucks):
        """Test that an alias matches like the name."""
        assert starbucks.matches_description("スタバでラテ") is True

    def test_case_insensitive(self, starbucks):
        """Test that letter case is ignored."""
        assert starbucks.matches_description("STARBUCKS COFFEE") is True
        assert starbucks.matches_description("starbucks") is True

    def test_whitespace_ignored(self, starbucks):
        """Test that spaces in the description or the name do not matter."""
        assert starbucks.matches_description("スターバックス 渋谷店") is True
        assert starbucks.matches_description("スター バックス") is True
        assert starbucks.matches_description("Star bucks") is True

    def test_full_width(self, starbucks):
        """Test that full-width letters match half-width aliases."""
        assert starbucks.matches_description("ＳＴＡＲＢＵＣＫＳ") is True

    def test_other_merchant(self, starbucks):
        """Test that a different merchant does not match."""
        assert starbucks.matches_description("タリーズ") is False

    @pytest.mark.parametrize("description", ["", "   ", None])
    def test_empty_description(self, starbucks, description):
        """Test that an empty description never matches."""
        assert starbucks.matches_description(description) is False

    def test_to_dict(self, starbucks):
        """Test the JSON-ready form of a merchant."""
        assert starbucks.to_dict() == {
            "id": "starbucks",
            "name": "スターバックス",
            "aliases": ["Starbucks", "スタバ"],
            "default_category_id": "expense-food-cafe",
            "confidence": 0.95,
        }


class TestDefaultMerchants:
    """Tests for loading the merchant master."""

    def test_bundled_seed(self, services):
        """Test that the bundled seed loads and points at seeded categories."""
        merchants = services.merchants.default_merchants()
        category_ids = {c.id for c in services.categories.default_categories()}

        assert len(merchants) == 22
        assert {m.default_category_id for m in merchants} <= category_ids
        assert len({m.id for m in merchants}) == len(merchants)

    def test_loaded_once(self, services):
        """Test that repeated calls return the cached list."""
        assert services.merchants.default_merchants() is services.merchants.default_merchants()

    def test_confidence_default(self, tmp_path):
        """Test that an entry without a confidence gets 0.95."""
        path = tmp_path / "merchants.json"
        path.write_text(
            json.dumps([{"id": "m", "name": "Shop", "category": "c"}]), encoding="utf-8"
        )

        (merchant,) = MerchantService(seed_path=path).default_merchants()

        assert merchant.confidence == 0.95
        assert merchant.aliases == ()

    def test_missing_file(self, tmp_path):
        """Test that a missing seed file is an error."""
        with pytest.raises(RecordValidationError, match="not found"):
            MerchantService(seed_path=tmp_path / "missing.json").default_merchants()

    def test_invalid_json(self, tmp_path):
        """Test that unparseable JSON is an error."""
        path = tmp_path / "merchants.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(RecordValidationError, match="parsing"):
            MerchantService(seed_path=path).default_merchants()

    def test_entry_without_category(self, tmp_path):
        """Test that every entry needs a category."""
        path = tmp_path / "merchants.json"
        path.write_text(json.dumps([{"id": "m", "name": "Shop"}]), encoding="utf-8")

        with pytest.raises(RecordValidationError) as exc_info:
            MerchantService(seed_path=path).default_merchants()

        assert exc_info.value.index == 0


class TestMerchantMatch:
    """Tests for MerchantService.match."""

    def test_bundled_merchant(self, services):
        """Test matching against the bundled merchant master."""
        merchant = services.merchants.match("ＤＯＣＯＭＯ ご利用料金")

        assert merchant.id == "docomo"

    def test_first_match_wins(self, services):
        """Test that the first merchant in the list wins."""
        merchants = [
            Merchant(id="a", name="Shop", default_category_id="x"),
            Merchant(id="b", name="Shop", default_category_id="y"),
        ]

        assert services.merchants.match("shop", merchants).id == "a"

    def test_no_match(self, services):
        """Test that an unknown description has no merchant."""
        assert services.merchants.match("XYZ") is None

    def test_empty_description(self, services):
        """Test that an empty description has no merchant."""
        assert services.merchants.match("") is None
