from decimal import Decimal

import pytest
from botocore.stub import ANY, Stubber

from app.db import dynamo


@pytest.fixture
def stubber():
    # Both tables come from the same resource, so they share one client.
    with Stubber(dynamo.transactions_table.meta.client) as stub:
        yield stub
        stub.assert_no_pending_responses()


def test_convert_for_dynamo_and_back():
    item = {"amount": 12.5, "tags": [1.25, "x"], "nested": {"value": 3.0}, "count": 2}
    converted = dynamo._convert_for_dynamo(item)
    assert converted == {
        "amount": Decimal("12.5"),
        "tags": [Decimal("1.25"), "x"],
        "nested": {"value": Decimal("3.0")},
        "count": 2,
    }

    restored = dynamo._from_dynamo(converted)
    assert restored["amount"] == 12.5
    assert isinstance(restored["nested"]["value"], int)
    assert restored["tags"] == [1.25, "x"]


def test_list_transactions_reads_every_page(stubber):
    stubber.add_response(
        "scan",
        {
            "Items": [{"transaction_id": {"S": "a"}, "amount": {"N": "12.5"}, "date": {"S": "2024-02-01"}}],
            "LastEvaluatedKey": {"transaction_id": {"S": "a"}},
        },
        {"TableName": dynamo.transactions_table.name},
    )
    stubber.add_response(
        "scan",
        {"Items": [{"transaction_id": {"S": "b"}, "amount": {"N": "40"}, "date": {"S": "2024-03-01"}}]},
        {"TableName": dynamo.transactions_table.name, "ExclusiveStartKey": {"transaction_id": {"S": "a"}}},
    )

    transactions = dynamo.list_transactions()
    assert [t["transaction_id"] for t in transactions] == ["b", "a"]
    assert transactions[0]["amount"] == 40
    assert transactions[1]["amount"] == 12.5


def test_list_transactions_failure_returns_none(stubber):
    stubber.add_client_error("scan", service_error_code="ResourceNotFoundException", http_status_code=400)
    assert dynamo.list_transactions() is None


def test_list_budgets_query_reads_every_page(stubber):
    stubber.add_response(
        "query",
        {
            "Items": [{"month": {"S": "2024-03"}, "category": {"S": "Food"}, "amount": {"N": "100"}}],
            "LastEvaluatedKey": {"month": {"S": "2024-03"}, "category": {"S": "Food"}},
        },
    )
    stubber.add_response(
        "query",
        {"Items": [{"month": {"S": "2024-03"}, "category": {"S": "Rent"}, "amount": {"N": "900.5"}}]},
    )

    budgets = dynamo.list_budgets("2024-03")
    assert [(b["category"], b["amount"]) for b in budgets] == [("Food", 100), ("Rent", 900.5)]


def test_put_transaction_sends_decimals(stubber):
    stubber.add_response(
        "put_item",
        {},
        {
            "TableName": dynamo.transactions_table.name,
            "Item": {"transaction_id": {"S": "t1"}, "amount": {"N": "12.5"}, "category": {"S": "Food"}},
        },
    )
    assert dynamo.put_transaction({"transaction_id": "t1", "amount": 12.5, "category": "Food"}) is True


def test_get_transaction(stubber):
    stubber.add_response("get_item", {"Item": {"transaction_id": {"S": "t1"}, "amount": {"N": "7.25"}}})
    stubber.add_response("get_item", {})

    assert dynamo.get_transaction("t1") == {"transaction_id": "t1", "amount": 7.25}
    assert dynamo.get_transaction("missing") is None


def test_get_transaction_failure_raises(stubber):
    stubber.add_client_error("get_item", service_error_code="AccessDeniedException", http_status_code=400)
    with pytest.raises(dynamo.StorageError):
        dynamo.get_transaction("t1")


def test_update_transaction_requires_existing_item(stubber):
    stubber.add_response(
        "update_item",
        {"Attributes": {"transaction_id": {"S": "t1"}, "amount": {"N": "75.5"}}},
        {
            "TableName": dynamo.transactions_table.name,
            "Key": {"transaction_id": {"S": "t1"}},
            "UpdateExpression": "SET #f0 = :v0, #f1 = :v1",
            "ConditionExpression": "attribute_exists(#pk)",
            "ExpressionAttributeNames": {"#pk": "transaction_id", "#f0": "amount", "#f1": "updated_at"},
            "ExpressionAttributeValues": {":v0": {"N": "75.5"}, ":v1": {"S": ANY}},
            "ReturnValues": "ALL_NEW",
        },
    )
    assert dynamo.update_transaction("t1", {"amount": 75.5}) == {"transaction_id": "t1", "amount": 75.5}


def test_update_transaction_error_codes(stubber):
    stubber.add_client_error(
        "update_item", service_error_code="ConditionalCheckFailedException", http_status_code=400
    )
    stubber.add_client_error(
        "update_item", service_error_code="ProvisionedThroughputExceededException", http_status_code=400
    )

    assert dynamo.update_transaction("missing", {"amount": 1.0}) is None
    with pytest.raises(dynamo.StorageError):
        dynamo.update_transaction("t1", {"amount": 1.0})


def test_update_transaction_without_changes_skips_write(stubber):
    assert dynamo.update_transaction("t1", {}) is None


def test_delete_transaction(stubber):
    stubber.add_response("delete_item", {"Attributes": {"transaction_id": {"S": "t1"}}})
    stubber.add_response("delete_item", {})
    stubber.add_client_error("delete_item", service_error_code="ThrottlingException", http_status_code=400)

    assert dynamo.delete_transaction("t1") is True
    assert dynamo.delete_transaction("missing") is False
    with pytest.raises(dynamo.StorageError):
        dynamo.delete_transaction("t1")


def test_upsert_budget_keeps_created_at(stubber):
    stubber.add_response(
        "update_item",
        {
            "Attributes": {
                "month": {"S": "2024-03"},
                "category": {"S": "Food"},
                "amount": {"N": "150.0"},
                "created_at": {"S": "2024-01-01T00:00:00"},
                "updated_at": {"S": "2024-03-10T09:00:00"},
            }
        },
        {
            "TableName": dynamo.budgets_table.name,
            "Key": {"month": {"S": "2024-03"}, "category": {"S": "Food"}},
            "UpdateExpression": "SET #amount = :amount, #updated = :now, #created = if_not_exists(#created, :now)",
            "ExpressionAttributeNames": {"#amount": "amount", "#updated": "updated_at", "#created": "created_at"},
            "ExpressionAttributeValues": {":amount": {"N": "150.0"}, ":now": {"S": ANY}},
            "ReturnValues": "ALL_NEW",
        },
    )

    saved = dynamo.upsert_budget("Food", 150.0, "2024-03")
    assert saved["amount"] == 150
    assert saved["created_at"] == "2024-01-01T00:00:00"


def test_upsert_budget_failure_returns_none(stubber):
    stubber.add_client_error("update_item", service_error_code="ValidationException", http_status_code=400)
    assert dynamo.upsert_budget("Food", 150.0, "2024-03") is None
