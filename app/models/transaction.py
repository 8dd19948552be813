from datetime import datetime
from typing import Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from app.utils.months import parse_date

TransactionType = Literal["income", "expense"]

CATEGORIES = (
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Healthcare",
    "Education",
    "Travel",
    "Groceries",
    "Other",
)


def _utc_now() -> str:
    return datetime.utcnow().isoformat()


class TransactionCreate(BaseModel):
    amount: float = Field(gt=0)
    description: str = Field(min_length=1)
    category: str = Field(min_length=1)
    date: str
    type: TransactionType

    @field_validator("date")
    @classmethod
    def date_must_parse(cls, value: str) -> str:
        if parse_date(value) is None:
            raise ValueError("date must be an ISO date or datetime")
        return value


class TransactionUpdate(TransactionCreate):
    """PUT replaces every user-editable field, like the create payload."""


class TransactionInDB(TransactionCreate):
    transaction_id: str = Field(default_factory=lambda: uuid4().hex)
    created_at: str = Field(default_factory=_utc_now)
    updated_at: str = Field(default_factory=_utc_now)


class TransactionPublic(BaseModel):
    transaction_id: str
    amount: float
    description: str
    category: str
    date: str
    type: TransactionType
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
