"""Rule-based classification of transactions into the five category types.

Rules are evaluated in order and the first match wins:

1. Securities accounts are always investments.
2. Keyword dictionaries, checked from the most specific category type to the
   most generic (repayment, investment, transfer, income, expense).
3. The sign of the amount (deposit or withdrawal).
4. A low-confidence expense default.
"""

from collections import Counter
from datetime import datetime, time
from typing import Dict, List, Optional, Sequence, Tuple

from logger import get_logger
from models.category import CategoryType
from models.results import ClassificationResult

logger = get_logger()

SECURITIES_INSTITUTION_TYPE = "securities"

# Confidence calibration constants. These are tuned values, not derived ones.
SECURITIES_CONFIDENCE = 0.95
KEYWORD_BASE_CONFIDENCE = 0.80
KEYWORD_PREFIX_BOOST = 0.10
KEYWORD_LENGTH_BOOST = 0.05
KEYWORD_LENGTH_RATIO = 0.3
AMOUNT_SIGN_CONFIDENCE = 0.70
DEFAULT_CONFIDENCE = 0.50

HIGH_CONFIDENCE_THRESHOLD = 0.9
MEDIUM_CONFIDENCE_THRESHOLD = 0.7

DEFAULT_TRANSFER_WINDOW_DAYS = 3

# Evaluated in this order; within a type, keywords are tried in list order.
KEYWORD_RULES: Tuple[Tuple[CategoryType, Tuple[str, ...]], ...] = (
    (
        CategoryType.REPAYMENT,
        ("ローン", "返済", "loan", "repayment", "住宅ローン", "自動車ローン", "教育ローン"),
    ),
    (
        CategoryType.INVESTMENT,
        ("株式", "投資信託", "債券", "売買", "配当", "分配金", "株", "fund", "stock", "証券"),
    ),
    (
        CategoryType.TRANSFER,
        ("振替", "カード引落", "口座振替", "資金移動", "チャージ", "送金", "transfer", "口座間"),
    ),
    (
        CategoryType.INCOME,
        (
            "給与",
            "賞与",
            "ボーナス",
            "報酬",
            "利息",
            "売上",
            "還付",
            "キャッシュバック",
            "払戻",
            "返金",
            "振込",
            "salary",
            "bonus",
            "入金",
        ),
    ),
    (
        CategoryType.EXPENSE,
        (
            "購入",
            "支払",
            "決済",
            "引落",
            "コンビニ",
            "スーパー",
            "レストラン",
            "カフェ",
            "ガソリン",
            "公共料金",
            "携帯",
            "水道",
            "電気",
            "ガス",
        ),
    ),
)


def evaluate_confidence(confidence: float) -> str:
    """Map a confidence score to its band: "high", "medium" or "low"."""
    if confidence >= HIGH_CONFIDENCE_THRESHOLD:
        return "high"
    elif confidence >= MEDIUM_CONFIDENCE_THRESHOLD:
        return "medium"
    else:
        return "low"


def _result(category: CategoryType, confidence: float, reason: str) -> ClassificationResult:
    return ClassificationResult(
        category=category,
        confidence=confidence,
        confidence_level=evaluate_confidence(confidence),
        reason=reason,
    )


class ClassificationService:
    """Service for classifying transactions into category types."""

    def __init__(
        self,
        keyword_rules: Sequence[Tuple[CategoryType, Sequence[str]]] = KEYWORD_RULES,
        transfer_window_days: int = DEFAULT_TRANSFER_WINDOW_DAYS,
    ):
        """Initialize the classification service.

        Args:
            keyword_rules: Ordered (category type, keywords) pairs.
            transfer_window_days: Maximum day gap between two legs of a transfer.
        """
        self.keyword_rules = tuple(
            (CategoryType.parse(category_type), tuple(keywords))
            for category_type, keywords in keyword_rules
        )
        self.transfer_window_days = transfer_window_days

    def classify(self, transaction, institution_type: Optional[str] = None) -> ClassificationResult:
        """Classify a transaction into one of the five category types.

        Args:
            transaction: Object with amount and description attributes.
            institution_type: Type of the institution the transaction came from.

        Returns:
            ClassificationResult from the first rule that matched.
        """
        # 1. Institution type
        if institution_type == SECURITIES_INSTITUTION_TYPE:
            return _result(
                CategoryType.INVESTMENT,
                SECURITIES_CONFIDENCE,
                "securities account transaction",
            )

        # 2. Keyword matching
        keyword_match = self._match_keywords(transaction.description or "")
        if keyword_match:
            return keyword_match

        # 3. Amount sign
        amount_match = self._classify_by_amount(transaction.amount)
        if amount_match:
            return amount_match

        # 4. Default
        return _result(
            CategoryType.EXPENSE,
            DEFAULT_CONFIDENCE,
            "default classification (expense)",
        )

    def classify_many(
        self,
        transactions: List,
        institution_types: Optional[Dict[str, str]] = None,
    ) -> Dict[str, ClassificationResult]:
        """Classify a list of transactions.

        The institution type of each transaction is taken from its own
        institution_type attribute, or looked up by institution_id.

        Args:
            transactions: Transactions to classify.
            institution_types: Optional mapping of institution ID to type.

        Returns:
            Dictionary of transaction ID to ClassificationResult, in input order.
        """
        institution_types = institution_types or {}
        results = {}
        for transaction in transactions:
            institution_type = getattr(transaction, "institution_type", None)
            if institution_type is None:
                institution_type = institution_types.get(
                    getattr(transaction, "institution_id", None)
                )
            results[transaction.id] = self.classify(transaction, institution_type)

        bands = Counter(result.confidence_level for result in results.values())
        logger.info(
            f"Classified {len(results)} transactions "
            f"(high: {bands['high']}, medium: {bands['medium']}, low: {bands['low']})"
        )
        return results

    def evaluate_confidence(self, confidence: float) -> str:
        return evaluate_confidence(confidence)

    def is_transfer_pattern(self, transaction1, transaction2) -> bool:
        """Check whether two transactions look like both legs of one transfer.

        The amounts must match in absolute value with opposite signs, the
        institutions must differ, and the dates must be no more than
        transfer_window_days apart. Partial days count: a gap of 3.5 days
        fails a 3-day window.

        Args:
            transaction1: Object with amount, date and institution_id.
            transaction2: Object with amount, date and institution_id.

        Returns:
            True if the pair matches the transfer pattern.
        """
        if abs(transaction1.amount) != abs(transaction2.amount):
            return False

        if (transaction1.amount > 0 and transaction2.amount > 0) or (
            transaction1.amount < 0 and transaction2.amount < 0
        ):
            return False

        if transaction1.institution_id == transaction2.institution_id:
            return False

        return self._days_between(transaction1.date, transaction2.date) <= self.transfer_window_days

    def find_transfer_pairs(self, transactions: List) -> List[Tuple]:
        """Pair up transactions that look like the two legs of a transfer.

        Each transaction is used in at most one pair; earlier transactions are
        paired first with the earliest matching partner.

        Returns:
            List of (first, second) transaction tuples in input order.
        """
        pairs = []
        used = set()
        for i, first in enumerate(transactions):
            if i in used:
                continue
            for j in range(i + 1, len(transactions)):
                if j in used:
                    continue
                if self.is_transfer_pattern(first, transactions[j]):
                    pairs.append((first, transactions[j]))
                    used.update((i, j))
                    break

        logger.debug(f"Found {len(pairs)} transfer pairs in {len(transactions)} transactions")
        return pairs

    def _match_keywords(self, description: str) -> Optional[ClassificationResult]:
        """Classify by the first keyword found in the description."""
        normalized = description.lower()

        for category_type, keywords in self.keyword_rules:
            for keyword in keywords:
                if keyword.lower() in normalized:
                    confidence = self._keyword_confidence(normalized, keyword)
                    return _result(category_type, confidence, f'keyword match: "{keyword}"')

        return None

    def _classify_by_amount(self, amount) -> Optional[ClassificationResult]:
        if amount > 0:
            return _result(
                CategoryType.INCOME,
                AMOUNT_SIGN_CONFIDENCE,
                "deposit transaction (positive amount)",
            )
        if amount < 0:
            return _result(
                CategoryType.EXPENSE,
                AMOUNT_SIGN_CONFIDENCE,
                "withdrawal transaction (negative amount)",
            )
        return None

    def _keyword_confidence(self, description: str, keyword: str) -> float:
        confidence = KEYWORD_BASE_CONFIDENCE

        if description.startswith(keyword.lower()):
            confidence += KEYWORD_PREFIX_BOOST

        if len(keyword) / len(description) > KEYWORD_LENGTH_RATIO:
            confidence += KEYWORD_LENGTH_BOOST

        # Rounded so that e.g. 0.8 + 0.1 compares equal to 0.9
        return round(min(confidence, 1.0), 2)

    @staticmethod
    def _days_between(date1, date2) -> float:
        # A plain date counts as midnight so it can be compared with a datetime
        if not isinstance(date1, datetime):
            date1 = datetime.combine(date1, time.min)
        if not isinstance(date2, datetime):
            date2 = datetime.combine(date2, time.min)
        return abs((date1 - date2).total_seconds()) / 86400
