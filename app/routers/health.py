"""
Health Check Router
Simple health check endpoint
"""
from fastapi import APIRouter
from datetime import datetime
import logging
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.db import dynamo

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check():
    """
    Health check endpoint.
    Returns API status.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "timestamp": datetime.utcnow().isoformat()
    }


def _table_status(table, name: str) -> dict:
    try:
        table.scan(Limit=1)
        return {"name": name, "status": "accessible", "region": settings.DYNAMO_REGION}
    except (ClientError, BotoCoreError) as e:
        logger.error(f"DynamoDB check failed for {name}: {str(e)}")
        return {"name": name, "status": "error", "error": str(e)}


@router.get("/status")
def storage_status():
    """
    Check that both DynamoDB tables (transactions and budgets) are reachable.
    """
    tables = {
        "transactions": _table_status(dynamo.transactions_table, settings.DYNAMO_TRANSACTIONS_TABLE),
        "budgets": _table_status(dynamo.budgets_table, settings.DYNAMO_BUDGETS_TABLE),
    }
    connected = all(table["status"] == "accessible" for table in tables.values())

    return {
        "timestamp": datetime.utcnow().isoformat(),
        "services": {"dynamodb": {"connected": connected, "tables": tables}},
        "overall_status": "healthy" if connected else "degraded",
    }
