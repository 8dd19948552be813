from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class InsightKind(str, Enum):
    WARNING = "warning"
    CAUTION = "caution"
    SUCCESS = "success"
    INFO = "info"


class InsightPublic(BaseModel):
    kind: InsightKind
    title: str
    description: str
    category: Optional[str] = None
    value: Optional[float] = None


class CategorySpendPublic(BaseModel):
    category: str
    month: str
    spent: float
    budget_amount: float
    remaining: float
    over: float
    percentage: Optional[float] = None


class MonthlyExpensePublic(BaseModel):
    month: str
    amount: float


class CategoryBreakdownPublic(BaseModel):
    category: str
    amount: float
    percentage: float


class TopCategoryPublic(BaseModel):
    name: str
    amount: float


class SummaryPublic(BaseModel):
    month: str
    total_income: float
    total_expenses: float
    net_income: float
    transaction_count: int
    top_category: Optional[TopCategoryPublic] = None
    recent_transaction: Optional[dict] = None


class DashboardPublic(BaseModel):
    month: str
    summary: SummaryPublic
    budget_comparison: List[CategorySpendPublic]
    insights: List[InsightPublic]
    monthly_expenses: List[MonthlyExpensePublic]
    category_breakdown: List[CategoryBreakdownPublic]
