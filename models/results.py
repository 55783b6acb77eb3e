"""Result models produced by classification, aggregation and trend analysis.

All results are computed per call and never mutated after construction.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Tuple

from models.category import Category, CategoryType


def _number(value):
    """Render a Decimal as float for JSON output, leaving other values as is."""
    if isinstance(value, Decimal):
        return float(value)
    return value


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying a single transaction.

    Attributes:
        category: The assigned category type.
        confidence: Confidence score between 0.0 and 1.0.
        confidence_level: "high", "medium" or "low" band of the score.
        reason: Which rule produced the classification.
    """

    category: CategoryType
    confidence: float
    confidence_level: str
    reason: str

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "confidence": self.confidence,
            "confidence_level": self.confidence_level,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class CategoryAggregationResult:
    """Totals for one category type."""

    category: CategoryType
    total_amount: Decimal
    transaction_count: int
    percentage: Decimal

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "total_amount": _number(self.total_amount),
            "transaction_count": self.transaction_count,
            "percentage": _number(self.percentage),
        }


@dataclass(frozen=True)
class SubcategoryAggregationResult:
    """Totals for one category ID, optionally with rolled-up children.

    For a node with children, total_amount and transaction_count include the
    totals of every descendant.
    """

    item_id: str
    total_amount: Decimal
    transaction_count: int
    average_amount: Decimal
    percentage: Decimal
    children: Tuple["SubcategoryAggregationResult", ...] = ()

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "total_amount": _number(self.total_amount),
            "transaction_count": self.transaction_count,
            "average_amount": _number(self.average_amount),
            "percentage": _number(self.percentage),
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(frozen=True)
class MonthlyTrend:
    month: str  # YYYY-MM
    amount: Decimal
    count: int

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "amount": _number(self.amount),
            "count": self.count,
        }


@dataclass(frozen=True)
class TrendData:
    monthly: Tuple[MonthlyTrend, ...] = ()

    def to_dict(self) -> dict:
        return {"monthly": [m.to_dict() for m in self.monthly]}


@dataclass(frozen=True)
class MonthOverMonth:
    """Change of a monthly amount relative to the previous month.

    change_rate is a percentage with one decimal place, or None when the
    previous month's amount is zero.
    """

    month: str
    amount: Decimal
    previous_amount: Decimal
    change: Decimal
    change_rate: Optional[Decimal]

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "amount": _number(self.amount),
            "previous_amount": _number(self.previous_amount),
            "change": _number(self.change),
            "change_rate": _number(self.change_rate),
        }


@dataclass(frozen=True)
class MonthlyBalance:
    month: str
    income: Decimal
    expense: Decimal

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "income": _number(self.income),
            "expense": _number(self.expense),
            "balance": _number(self.balance),
        }


@dataclass(frozen=True)
class DataPoint:
    date: str  # YYYY-MM
    value: Optional[float]

    def to_dict(self) -> dict:
        return {"date": self.date, "value": self.value}


@dataclass(frozen=True)
class TrendLine:
    slope: float
    intercept: float
    points: Tuple[DataPoint, ...] = ()

    def to_dict(self) -> dict:
        return {
            "slope": self.slope,
            "intercept": self.intercept,
            "points": [p.to_dict() for p in self.points],
        }


@dataclass(frozen=True)
class TrendStatistics:
    mean: float
    standard_deviation: float
    coefficient_of_variation: float

    def to_dict(self) -> dict:
        return {
            "mean": self.mean,
            "standard_deviation": self.standard_deviation,
            "coefficient_of_variation": self.coefficient_of_variation,
        }


@dataclass(frozen=True)
class Insight:
    type: str  # "trend", "pattern" or "anomaly"
    severity: str  # "info", "warning" or "critical"
    title: str
    description: str
    recommendation: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            "type": self.type,
            "severity": self.severity,
            "title": self.title,
            "description": self.description,
        }
        if self.recommendation:
            result["recommendation"] = self.recommendation
        return result


@dataclass(frozen=True)
class TrendAnalysis:
    """Full trend analysis of monthly income, expense or balance."""

    start: str
    end: str
    target: str
    actual: Tuple[DataPoint, ...]
    moving_average_period: int
    moving_average: Tuple[DataPoint, ...]
    trend_line: TrendLine
    statistics: TrendStatistics
    insights: List[Insight] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "period": {"start": self.start, "end": self.end},
            "target": self.target,
            "actual": [p.to_dict() for p in self.actual],
            "moving_average": {
                "period": self.moving_average_period,
                "data": [p.to_dict() for p in self.moving_average],
            },
            "trend_line": self.trend_line.to_dict(),
            "statistics": self.statistics.to_dict(),
            "insights": [i.to_dict() for i in self.insights],
        }


@dataclass(frozen=True)
class SubcategoryMatch:
    """Subcategory chosen for a transaction description."""

    category: Category
    confidence: float
    reason: str  # "merchant_match", "keyword_match" or "default"
    score: float = 0.0
    merchant_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "category_id": self.category.id,
            "category_name": self.category.name,
            "confidence": self.confidence,
            "reason": self.reason,
            "score": self.score,
            "merchant_id": self.merchant_id,
        }
