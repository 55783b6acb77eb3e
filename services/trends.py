"""Monthly trend calculation and trend statistics."""

import statistics as stats
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from dateutil.relativedelta import relativedelta

from logger import get_logger
from models.category import CategoryType
from models.results import (
    DataPoint,
    Insight,
    MonthlyBalance,
    MonthlyTrend,
    MonthOverMonth,
    TrendAnalysis,
    TrendData,
    TrendLine,
    TrendStatistics,
)
from services.aggregation import ZERO, calculate_percentage, to_decimal

logger = get_logger()

TREND_TARGETS = ("income", "expense", "balance")

# A slope within this share of the absolute mean counts as flat
SLOPE_THRESHOLD_RATIO = 0.01
HIGH_VOLATILITY_CV = 0.3
STABLE_CV = 0.1


def as_date(value) -> date:
    """Drop the time component of a datetime; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def month_key(value) -> str:
    """Format a date as "YYYY-MM"."""
    return f"{value.year:04d}-{value.month:02d}"


class TrendService:
    """Service for monthly trends and the statistics derived from them."""

    def __init__(self, moving_average_period: int = 6, min_trend_months: int = 6):
        """Initialize the trend service.

        Args:
            moving_average_period: Default window of the moving average, in months.
            min_trend_months: Minimum months of data required by analyze().
        """
        self.moving_average_period = moving_average_period
        self.min_trend_months = min_trend_months

    def calculate_trend(self, transactions: List, start_date, end_date) -> TrendData:
        """Total transactions per calendar month within a date range.

        Transactions outside [start_date, end_date] are ignored. Both bounds
        are inclusive and compared by calendar day.

        Args:
            transactions: Transactions to bucket.
            start_date: First day of the range (date or datetime).
            end_date: Last day of the range (date or datetime).

        Returns:
            TrendData with one entry per month present, oldest first.

        Raises:
            ValueError: If start_date is after end_date.
        """
        start, end = as_date(start_date), as_date(end_date)
        if start > end:
            raise ValueError(f"Start date {start} is after end date {end}")

        amounts: Dict[str, Decimal] = {}
        counts: Dict[str, int] = {}
        for transaction in transactions:
            if not start <= as_date(transaction.date) <= end:
                continue
            month = month_key(transaction.date)
            amounts[month] = amounts.get(month, ZERO) + to_decimal(transaction.amount)
            counts[month] = counts.get(month, 0) + 1

        monthly = tuple(
            MonthlyTrend(month=month, amount=amounts[month], count=counts[month])
            for month in sorted(amounts)
        )
        return TrendData(monthly=monthly)

    def month_over_month(self, trend: TrendData) -> List[MonthOverMonth]:
        """Change of each month's amount against the month before it.

        The first month has no predecessor and is not included. The change
        rate is None when the previous amount is zero.
        """
        changes = []
        for previous, current in zip(trend.monthly, trend.monthly[1:]):
            change = current.amount - previous.amount
            change_rate = None
            if previous.amount != 0:
                change_rate = calculate_percentage(change, abs(previous.amount))
            changes.append(
                MonthOverMonth(
                    month=current.month,
                    amount=current.amount,
                    previous_amount=previous.amount,
                    change=change,
                    change_rate=change_rate,
                )
            )
        return changes

    def monthly_balances(
        self, transactions: List, start_month: date, end_month: date
    ) -> List[MonthlyBalance]:
        """Income, expense and balance for every month in a range.

        Months without transactions are included with zero amounts. Expense
        amounts are summed as absolute values so that the balance is
        income minus spending whatever sign convention the source uses.

        Args:
            transactions: Transactions to summarize.
            start_month: Start of period (day component ignored).
            end_month: End of period (day component ignored).

        Returns:
            List of MonthlyBalance objects, oldest first.
        """
        income: Dict[str, Decimal] = {}
        expense: Dict[str, Decimal] = {}

        current = as_date(start_month).replace(day=1)
        last = as_date(end_month).replace(day=1)
        while current <= last:
            income[month_key(current)] = ZERO
            expense[month_key(current)] = ZERO
            current += relativedelta(months=1)

        for transaction in transactions:
            month = month_key(transaction.date)
            if month not in income:
                continue
            if transaction.category.type == CategoryType.INCOME:
                income[month] += to_decimal(transaction.amount)
            elif transaction.category.type == CategoryType.EXPENSE:
                expense[month] += abs(to_decimal(transaction.amount))

        return [
            MonthlyBalance(month=month, income=income[month], expense=expense[month])
            for month in income
        ]

    def moving_average(self, values: Sequence, period: int) -> List[Optional[float]]:
        """Simple moving average.

        Positions before the first full window are None.
        """
        if not values or period <= 0:
            return []

        values = [float(v) for v in values]
        result: List[Optional[float]] = []
        for i in range(len(values)):
            if i < period - 1:
                result.append(None)
            else:
                result.append(sum(values[i - period + 1 : i + 1]) / period)
        return result

    def trend_line(self, values: Sequence, months: Sequence[str]) -> TrendLine:
        """Least-squares trend line over x = 1..n.

        Returns a flat line without points when the inputs are empty or of
        different lengths.
        """
        if not values or not months or len(values) != len(months):
            return TrendLine(slope=0.0, intercept=0.0)

        values = [float(v) for v in values]
        if len(values) < 2:
            slope, intercept = 0.0, values[0]
        else:
            slope, intercept = stats.linear_regression(range(1, len(values) + 1), values)

        points = tuple(
            DataPoint(date=month, value=slope * (i + 1) + intercept)
            for i, month in enumerate(months)
        )
        return TrendLine(slope=slope, intercept=intercept, points=points)

    def standard_deviation(self, values: Sequence, mean: Optional[float] = None) -> float:
        """Population standard deviation, 0 for empty input."""
        if not values:
            return 0.0

        return stats.pstdev([float(v) for v in values], mu=mean)

    def coefficient_of_variation(
        self,
        values: Sequence,
        mean: Optional[float] = None,
        std_dev: Optional[float] = None,
    ) -> float:
        """Standard deviation relative to the absolute mean.

        Returns 0 for empty input or a zero mean.
        """
        if not values:
            return 0.0

        if mean is None:
            mean = stats.fmean(values)
        if mean == 0:
            return 0.0

        if std_dev is None:
            std_dev = self.standard_deviation(values, mean)
        return std_dev / abs(mean)

    def analyze(
        self,
        transactions: List,
        start_month: date,
        end_month: date,
        target: str = "balance",
        period: Optional[int] = None,
    ) -> TrendAnalysis:
        """Analyze the monthly trend of income, expense or balance.

        Args:
            transactions: Transactions to analyze.
            start_month: Start of period (day component ignored).
            end_month: End of period (day component ignored).
            target: "income", "expense" or "balance".
            period: Moving average window; defaults to the configured period.

        Returns:
            TrendAnalysis with actual values, moving average, trend line,
            statistics and insights.

        Raises:
            ValueError: If the target is unknown, the range is reversed, or it
                        covers fewer than min_trend_months months.
        """
        if target not in TREND_TARGETS:
            raise ValueError(f"Unknown trend target: {target}")
        if as_date(start_month).replace(day=1) > as_date(end_month).replace(day=1):
            raise ValueError("Start month is after end month")

        period = period or self.moving_average_period
        balances = self.monthly_balances(transactions, start_month, end_month)
        if len(balances) < self.min_trend_months:
            raise ValueError(
                f"At least {self.min_trend_months} months of data are required"
            )

        months = [b.month for b in balances]
        values = [float(getattr(b, target)) for b in balances]

        moving_average = self.moving_average(values, period)
        trend_line = self.trend_line(values, months)
        mean = stats.fmean(values)
        std_dev = self.standard_deviation(values, mean)
        cv = self.coefficient_of_variation(values, mean, std_dev)

        insights = self._insights(target, trend_line.slope, mean, cv, len(values))
        logger.debug(
            f"Trend analysis for {target}: {len(values)} months, "
            f"slope {trend_line.slope:.2f}, {len(insights)} insights"
        )

        return TrendAnalysis(
            start=months[0],
            end=months[-1],
            target=target,
            actual=tuple(DataPoint(date=m, value=v) for m, v in zip(months, values)),
            moving_average_period=period,
            moving_average=tuple(
                DataPoint(date=m, value=v) for m, v in zip(months, moving_average)
            ),
            trend_line=trend_line,
            statistics=TrendStatistics(
                mean=mean,
                standard_deviation=std_dev,
                coefficient_of_variation=cv,
            ),
            insights=insights,
        )

    def _insights(
        self, target: str, slope: float, mean: float, cv: float, month_count: int
    ) -> List[Insight]:
        insights = []
        threshold = abs(mean) * SLOPE_THRESHOLD_RATIO
        increasing = slope > threshold
        decreasing = slope < -threshold

        if target == "expense" and increasing:
            insights.append(
                Insight(
                    type="trend",
                    severity="warning",
                    title="Spending is increasing",
                    description=f"Spending has risen steadily over the last {month_count} months.",
                    recommendation="Review the category breakdown to find what is driving the increase.",
                )
            )

        if target == "income" and decreasing:
            insights.append(
                Insight(
                    type="trend",
                    severity="warning",
                    title="Income is decreasing",
                    description=f"Income has fallen steadily over the last {month_count} months.",
                    recommendation="Review your sources of income.",
                )
            )

        if target == "balance" and decreasing:
            insights.append(
                Insight(
                    type="trend",
                    severity="critical",
                    title="Balance is worsening",
                    description=f"The monthly balance has declined over the last {month_count} months.",
                    recommendation="Cut back spending or look for ways to increase income.",
                )
            )

        if cv > HIGH_VOLATILITY_CV:
            insights.append(
                Insight(
                    type="anomaly",
                    severity="info",
                    title="High month-to-month volatility",
                    description="Monthly amounts vary widely.",
                    recommendation="Leave some slack in your budget.",
                )
            )

        if abs(slope) < threshold and cv < STABLE_CV:
            insights.append(
                Insight(
                    type="pattern",
                    severity="info",
                    title="Stable trend",
                    description=f"Amounts have been stable over the last {month_count} months.",
                )
            )

        return insights
