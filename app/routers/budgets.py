import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from app.db import dynamo
from app.models.budget import BudgetPublic, BudgetUpsert
from app.utils.months import parse_month

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_model=List[BudgetPublic])
def list_budgets(month: Optional[str] = Query(default=None, description="YYYY-MM")):
    if month is not None and parse_month(month) is None:
        raise HTTPException(status_code=400, detail="month must use YYYY-MM format")

    budgets = dynamo.list_budgets(month)
    if budgets is None:
        raise HTTPException(status_code=500, detail="Failed to fetch budgets")
    return budgets


@router.post("/", response_model=BudgetPublic)
def upsert_budget(budget: BudgetUpsert):
    """
    Set the budget for a category in a month. An existing budget for the
    same (category, month) is updated in place.
    """
    saved = dynamo.upsert_budget(budget.category, budget.amount, budget.month)
    if not saved:
        raise HTTPException(status_code=500, detail="Failed to create/update budget")
    logger.info(f"Budget for {budget.category} in {budget.month} set to {budget.amount}")
    return BudgetPublic(**saved)
