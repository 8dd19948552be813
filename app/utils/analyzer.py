from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, asdict
from datetime import date
from typing import Any, Dict, List, Optional

from app.models.insight import InsightKind
from app.utils.months import month_of, parse_date, parse_month, previous_month

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategorySpend:
    """Spent vs. budget for a single category in one month."""

    category: str
    month: str
    spent: float
    budget_amount: float
    remaining: float
    over: float
    # None means "no budget": spend exists but there is nothing to divide by.
    percentage: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Insight:
    """A single advisory message; the UI maps ``kind`` to icon and colour."""

    kind: InsightKind
    title: str
    description: str
    category: Optional[str] = None
    value: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return {k: v for k, v in data.items() if v is not None}


class FinanceAnalyzer:
    """
    Dashboard analytics over snapshots of transactions and budgets.

    The analyzer only holds rule configuration. Every method is a pure
    function of its arguments, and the month being analysed is always passed
    in explicitly, so the same inputs always give the same output.
    """

    def __init__(
        self,
        insight_limit: int = 6,
        alert_percent: float = 80.0,
        on_track_percent: float = 50.0,
        trend_change_percent: float = 20.0,
        top_share_percent: float = 40.0,
        trend_months: int = 6,
    ) -> None:
        self._insight_limit = insight_limit
        self._alert_percent = alert_percent
        self._on_track_percent = on_track_percent
        self._trend_change_percent = trend_change_percent
        self._top_share_percent = top_share_percent
        self._trend_months = trend_months

    @classmethod
    def from_settings(cls, settings) -> "FinanceAnalyzer":
        return cls(
            insight_limit=settings.INSIGHT_LIMIT,
            alert_percent=settings.BUDGET_ALERT_PERCENT,
            on_track_percent=settings.ON_TRACK_PERCENT,
            trend_change_percent=settings.TREND_CHANGE_PERCENT,
            top_share_percent=settings.TOP_CATEGORY_SHARE_PERCENT,
            trend_months=settings.TREND_MONTHS,
        )

    @staticmethod
    def _amount(item: Dict[str, Any]) -> float:
        return float(item.get("amount", 0))

    # ------------------------------------------------------------------
    # Filter / group
    # ------------------------------------------------------------------
    def expenses_for_month(self, transactions: List[Dict[str, Any]], month: str) -> List[Dict[str, Any]]:
        return [
            txn
            for txn in transactions
            if txn.get("type") == "expense" and month_of(txn.get("date")) == month
        ]

    def category_totals(self, transactions: List[Dict[str, Any]], month: Optional[str]) -> Dict[str, float]:
        """Expense totals per category for ``month``, in first-encounter order."""
        if month is None:
            return {}
        totals: Dict[str, float] = defaultdict(float)
        for txn in self.expenses_for_month(transactions, month):
            totals[txn["category"]] += self._amount(txn)
        return dict(totals)

    @staticmethod
    def budgets_for_month(budgets: List[Dict[str, Any]], month: str) -> Dict[str, float]:
        """Budget amount per category for ``month``. The first match wins on duplicates."""
        active: Dict[str, float] = {}
        for budget in budgets:
            if budget.get("month") != month:
                continue
            active.setdefault(budget["category"], float(budget.get("amount", 0)))
        return active

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------
    def aggregate(
        self,
        transactions: List[Dict[str, Any]],
        budgets: List[Dict[str, Any]],
        month: str,
    ) -> Dict[str, CategorySpend]:
        if parse_month(month) is None:
            logger.warning(f"Ignoring malformed month key: {month!r}")
            return {}

        spent_by_category = self.category_totals(transactions, month)
        budget_by_category = self.budgets_for_month(budgets, month)

        categories = list(spent_by_category)
        categories += [cat for cat in budget_by_category if cat not in spent_by_category]

        result: Dict[str, CategorySpend] = {}
        for category in categories:
            spent = spent_by_category.get(category, 0.0)
            budget_amount = budget_by_category.get(category, 0.0)
            if spent == 0 and budget_amount == 0:
                continue

            if budget_amount > 0:
                percentage = spent / budget_amount * 100
                over = max(0.0, spent - budget_amount)
            else:
                percentage = 0.0 if spent == 0 else None
                over = 0.0

            result[category] = CategorySpend(
                category=category,
                month=month,
                spent=spent,
                budget_amount=budget_amount,
                remaining=max(0.0, budget_amount - spent),
                over=over,
                percentage=percentage,
            )
        return result

    def budget_comparison(
        self,
        transactions: List[Dict[str, Any]],
        budgets: List[Dict[str, Any]],
        month: str,
    ) -> List[Dict[str, Any]]:
        return [row.to_dict() for row in self.aggregate(transactions, budgets, month).values()]

    # ------------------------------------------------------------------
    # Insight rules
    # ------------------------------------------------------------------
    def derive_insights(
        self,
        transactions: List[Dict[str, Any]],
        budgets: List[Dict[str, Any]],
        month: str,
    ) -> List[Insight]:
        """
        Apply the rules in priority order (budget thresholds, month-over-month
        trends, dominant category) and keep the first ``insight_limit``.
        """
        if parse_month(month) is None:
            logger.warning(f"Ignoring malformed month key: {month!r}")
            return []

        current = self.category_totals(transactions, month)
        previous = self.category_totals(transactions, previous_month(month))

        insights: List[Insight] = []
        insights.extend(self._budget_insights(current, budgets, month))
        insights.extend(self._trend_insights(current, previous))
        top = self._top_category_insight(current)
        if top is not None:
            insights.append(top)
        return insights[: self._insight_limit]

    def _budget_insights(
        self,
        current: Dict[str, float],
        budgets: List[Dict[str, Any]],
        month: str,
    ) -> List[Insight]:
        insights: List[Insight] = []
        for category, amount in self.budgets_for_month(budgets, month).items():
            if amount <= 0:
                continue
            spent = current.get(category, 0.0)
            percentage = spent / amount * 100

            if percentage > 100:
                over_percentage = (spent - amount) / amount * 100
                insights.append(
                    Insight(
                        kind=InsightKind.WARNING,
                        title="Budget Exceeded",
                        description=f"You've exceeded your {category} budget by {over_percentage:.1f}%",
                        category=category,
                        value=over_percentage,
                    )
                )
            elif percentage > self._alert_percent:
                insights.append(
                    Insight(
                        kind=InsightKind.CAUTION,
                        title="Budget Alert",
                        description=f"You've used {percentage:.1f}% of your {category} budget",
                        category=category,
                        value=percentage,
                    )
                )
            elif percentage < self._on_track_percent:
                insights.append(
                    Insight(
                        kind=InsightKind.SUCCESS,
                        title="On Track",
                        description=f"Great job! You're only using {percentage:.1f}% of your {category} budget",
                        category=category,
                        value=percentage,
                    )
                )
        return insights

    def _trend_insights(self, current: Dict[str, float], previous: Dict[str, float]) -> List[Insight]:
        # Only categories spent on this month; one that dropped to zero gets no trend message.
        categories = [cat for cat in current if previous.get(cat, 0) > 0]

        insights: List[Insight] = []
        for category in categories:
            before = previous[category]
            change = (current.get(category, 0.0) - before) / before * 100
            if abs(change) <= self._trend_change_percent:
                continue

            increased = change > 0
            insights.append(
                Insight(
                    kind=InsightKind.WARNING if increased else InsightKind.INFO,
                    title=f"{category} Spending {'Increased' if increased else 'Decreased'}",
                    description=f"{abs(change):.1f}% {'increase' if increased else 'decrease'} from last month",
                    category=category,
                    value=change,
                )
            )
        return insights

    @staticmethod
    def _top_category(totals: Dict[str, float]) -> Optional[tuple]:
        if not totals:
            return None
        # Highest spend; equal amounts resolve to the alphabetically first name.
        return min(totals.items(), key=lambda item: (-item[1], item[0]))

    def _top_category_insight(self, current: Dict[str, float]) -> Optional[Insight]:
        top = self._top_category(current)
        total = sum(current.values())
        if top is None or total <= 0:
            return None

        name, amount = top
        share = amount / total * 100
        if share <= self._top_share_percent:
            return None
        return Insight(
            kind=InsightKind.INFO,
            title="Top Spending Category",
            description=f"{name} accounts for {share:.1f}% of your spending this month",
            category=name,
            value=share,
        )

    # ------------------------------------------------------------------
    # Dashboard charts and cards
    # ------------------------------------------------------------------
    def monthly_expenses(
        self,
        transactions: List[Dict[str, Any]],
        months: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Expense totals per month, oldest first, limited to the last ``months``."""
        window = self._trend_months if months is None else months
        if window <= 0:
            return []

        totals: Dict[str, float] = defaultdict(float)
        for txn in transactions:
            if txn.get("type") != "expense":
                continue
            key = month_of(txn.get("date"))
            if key is None:
                continue
            totals[key] += self._amount(txn)

        return [{"month": key, "amount": amount} for key, amount in sorted(totals.items())[-window:]]

    def category_breakdown(
        self,
        transactions: List[Dict[str, Any]],
        month: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Expense share per category, largest first. ``month=None`` covers all time."""
        if month is not None and parse_month(month) is None:
            return []

        totals: Dict[str, float] = defaultdict(float)
        for txn in transactions:
            if txn.get("type") != "expense":
                continue
            if month is not None and month_of(txn.get("date")) != month:
                continue
            totals[txn["category"]] += self._amount(txn)

        grand_total = sum(totals.values())
        ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
        return [
            {
                "category": category,
                "amount": amount,
                "percentage": amount / grand_total * 100 if grand_total > 0 else 0.0,
            }
            for category, amount in ordered
        ]

    def summary(self, transactions: List[Dict[str, Any]], month: str) -> Dict[str, Any]:
        in_month = [txn for txn in transactions if month_of(txn.get("date")) == month]
        total_income = sum(self._amount(txn) for txn in in_month if txn.get("type") == "income")
        total_expenses = sum(self._amount(txn) for txn in in_month if txn.get("type") == "expense")

        top = self._top_category(self.category_totals(transactions, month))
        recent = None
        if transactions:
            recent = max(transactions, key=lambda txn: parse_date(txn.get("date")) or date.min)

        return {
            "month": month,
            "total_income": total_income,
            "total_expenses": total_expenses,
            "net_income": total_income - total_expenses,
            "transaction_count": len(in_month),
            "top_category": {"name": top[0], "amount": top[1]} if top else None,
            "recent_transaction": recent,
        }

    def dashboard(
        self,
        transactions: List[Dict[str, Any]],
        budgets: List[Dict[str, Any]],
        month: str,
    ) -> Dict[str, Any]:
        return {
            "month": month,
            "summary": self.summary(transactions, month),
            "budget_comparison": self.budget_comparison(transactions, budgets, month),
            "insights": [insight.to_dict() for insight in self.derive_insights(transactions, budgets, month)],
            "monthly_expenses": self.monthly_expenses(transactions),
            "category_breakdown": self.category_breakdown(transactions, month),
        }
