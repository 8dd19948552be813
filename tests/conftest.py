import os

import pytest
from fastapi.testclient import TestClient

# Fake credentials so the boto3 resource never reaches for a real profile.
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")

from app.db import dynamo
from app.main import app


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def store(monkeypatch):
    """In-memory stand-in for the DynamoDB helpers used by the routers."""
    data = {"transactions": {}, "budgets": {}}

    def list_transactions():
        return sorted(data["transactions"].values(), key=lambda t: t["date"], reverse=True)

    def put_transaction(item):
        data["transactions"][item["transaction_id"]] = dict(item)
        return True

    def get_transaction(transaction_id):
        item = data["transactions"].get(transaction_id)
        return dict(item) if item else None

    def update_transaction(transaction_id, updates):
        if transaction_id not in data["transactions"]:
            return None
        data["transactions"][transaction_id].update(updates)
        return dict(data["transactions"][transaction_id])

    def delete_transaction(transaction_id):
        return data["transactions"].pop(transaction_id, None) is not None

    def list_budgets(month=None):
        return [b for b in data["budgets"].values() if month is None or b["month"] == month]

    def upsert_budget(category, amount, month):
        key = (month, category)
        existing = data["budgets"].get(key, {"created_at": "2024-01-01T00:00:00"})
        data["budgets"][key] = dict(existing, category=category, amount=amount, month=month)
        return dict(data["budgets"][key])

    for name, fn in {
        "list_transactions": list_transactions,
        "put_transaction": put_transaction,
        "get_transaction": get_transaction,
        "update_transaction": update_transaction,
        "delete_transaction": delete_transaction,
        "list_budgets": list_budgets,
        "upsert_budget": upsert_budget,
    }.items():
        monkeypatch.setattr(dynamo, name, fn)
    return data
