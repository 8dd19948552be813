"""
Dashboard Router
Chart and insight payloads computed from the current transaction/budget snapshot
"""
import logging
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, HTTPException, Query

from app.core.config import settings
from app.db import dynamo
from app.models.insight import (
    CategoryBreakdownPublic,
    CategorySpendPublic,
    DashboardPublic,
    InsightPublic,
    MonthlyExpensePublic,
)
from app.utils.analyzer import FinanceAnalyzer
from app.utils.months import current_month, parse_month

router = APIRouter()
logger = logging.getLogger(__name__)
finance_analyzer = FinanceAnalyzer.from_settings(settings)


def _resolve_month(month: Optional[str]) -> str:
    if month is None:
        return current_month()
    if parse_month(month) is None:
        raise HTTPException(status_code=400, detail="month must use YYYY-MM format")
    return month


def _load_transactions() -> List[Dict]:
    transactions = dynamo.list_transactions()
    if transactions is None:
        raise HTTPException(status_code=500, detail="Failed to fetch transactions")
    return transactions


def _load_snapshot(month: str) -> Tuple[List[Dict], List[Dict]]:
    transactions = _load_transactions()
    budgets = dynamo.list_budgets(month)
    if budgets is None:
        raise HTTPException(status_code=500, detail="Failed to fetch budgets")
    return transactions, budgets


@router.get("/", response_model=DashboardPublic)
def get_dashboard(month: Optional[str] = Query(default=None, description="YYYY-MM, defaults to the current month")):
    month = _resolve_month(month)
    transactions, budgets = _load_snapshot(month)
    logger.info(f"Building dashboard for {month}: {len(transactions)} transactions, {len(budgets)} budgets")
    return finance_analyzer.dashboard(transactions, budgets, month)


@router.get("/budget-comparison", response_model=List[CategorySpendPublic])
def get_budget_comparison(month: Optional[str] = Query(default=None, description="YYYY-MM")):
    month = _resolve_month(month)
    transactions, budgets = _load_snapshot(month)
    return finance_analyzer.budget_comparison(transactions, budgets, month)


@router.get("/insights", response_model=List[InsightPublic])
def get_insights(month: Optional[str] = Query(default=None, description="YYYY-MM")):
    month = _resolve_month(month)
    transactions, budgets = _load_snapshot(month)
    return [insight.to_dict() for insight in finance_analyzer.derive_insights(transactions, budgets, month)]


@router.get("/monthly-expenses", response_model=List[MonthlyExpensePublic])
def get_monthly_expenses(months: Optional[int] = Query(default=None, ge=1, le=60)):
    return finance_analyzer.monthly_expenses(_load_transactions(), months)


@router.get("/category-breakdown", response_model=List[CategoryBreakdownPublic])
def get_category_breakdown(month: Optional[str] = Query(default=None, description="YYYY-MM, omit for all time")):
    if month is not None and parse_month(month) is None:
        raise HTTPException(status_code=400, detail="month must use YYYY-MM format")
    return finance_analyzer.category_breakdown(_load_transactions(), month)
