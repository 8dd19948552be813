from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App settings
    PROJECT_NAME: str = "FinanceDashboard"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # DynamoDB
    DYNAMO_REGION: str = Field(default="eu-west-1")
    DYNAMO_ENDPOINT_URL: Optional[str] = Field(default=None)  # e.g. http://localhost:8001 for DynamoDB Local
    DYNAMO_TRANSACTIONS_TABLE: str = Field(default="finance-dashboard-transactions")
    DYNAMO_BUDGETS_TABLE: str = Field(default="finance-dashboard-budgets")

    # Insight rules
    INSIGHT_LIMIT: int = 6
    BUDGET_ALERT_PERCENT: float = 80.0
    ON_TRACK_PERCENT: float = 50.0
    TREND_CHANGE_PERCENT: float = 20.0
    TOP_CATEGORY_SHARE_PERCENT: float = 40.0
    TREND_MONTHS: int = 6

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()
