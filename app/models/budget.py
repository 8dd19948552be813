from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.utils.months import parse_month


class BudgetUpsert(BaseModel):
    category: str = Field(min_length=1)
    amount: float = Field(gt=0)
    month: str  # YYYY-MM

    @field_validator("month")
    @classmethod
    def month_must_be_key(cls, value: str) -> str:
        if parse_month(value) is None:
            raise ValueError("month must use YYYY-MM format")
        return value


class BudgetPublic(BaseModel):
    category: str
    amount: float
    month: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
