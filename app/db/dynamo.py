import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from app.core.config import settings

logger = logging.getLogger(__name__)

# Initialize DynamoDB resource
dynamodb = boto3.resource(
    "dynamodb",
    region_name=settings.DYNAMO_REGION,
    endpoint_url=settings.DYNAMO_ENDPOINT_URL,
)

# Get table references
# transactions: PK transaction_id
# budgets:      PK month (YYYY-MM), SK category -> one budget per (category, month)
transactions_table = dynamodb.Table(settings.DYNAMO_TRANSACTIONS_TABLE)
budgets_table = dynamodb.Table(settings.DYNAMO_BUDGETS_TABLE)


class StorageError(Exception):
    """The table could not be read or written (throttling, permissions, missing table)."""


def _error_message(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Message", str(e))


def _error_code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "")


def _read_all(operation, **kwargs) -> List[Dict[str, Any]]:
    """Call a scan/query method following LastEvaluatedKey until every page is read."""
    items: List[Dict[str, Any]] = []
    while True:
        response = operation(**kwargs)
        items.extend(response.get("Items", []))
        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return items
        kwargs["ExclusiveStartKey"] = last_key


# ----------------------------------------------------------------------
# Transactions
# ----------------------------------------------------------------------
def list_transactions() -> Optional[List[Dict[str, Any]]]:
    """All transactions, newest date first. None when the table can't be read."""
    try:
        items = [_from_dynamo(item) for item in _read_all(transactions_table.scan)]
    except ClientError as e:
        logger.error(f"list_transactions failed: {_error_message(e)}")
        return None
    return sorted(items, key=lambda item: item.get("date", ""), reverse=True)


def get_transaction(transaction_id: str) -> Optional[Dict[str, Any]]:
    """Fetch one transaction, None when it doesn't exist. Raises StorageError on read failure."""
    try:
        response = transactions_table.get_item(Key={"transaction_id": transaction_id})
    except ClientError as e:
        logger.error(f"get_transaction failed: {_error_message(e)}")
        raise StorageError(_error_message(e)) from e
    item = response.get("Item")
    return _from_dynamo(item) if item else None


def put_transaction(transaction_item: dict) -> bool:
    """Insert a new transaction."""
    try:
        transactions_table.put_item(Item=_convert_for_dynamo(transaction_item))
        return True
    except ClientError as e:
        logger.error(f"put_transaction failed: {_error_message(e)}")
        return False


def update_transaction(transaction_id: str, updates: dict) -> Optional[Dict[str, Any]]:
    """
    Apply updates to an existing transaction and bump updated_at.
    Returns the updated item, or None when it doesn't exist.
    Raises StorageError for any other write failure.
    """
    if not updates:
        return None

    updates = dict(updates, updated_at=datetime.utcnow().isoformat())

    update_expression_parts = []
    expression_attribute_values = {}
    expression_attribute_names = {"#pk": "transaction_id"}

    for idx, (key, value) in enumerate(updates.items()):
        placeholder = f"#f{idx}"
        value_placeholder = f":v{idx}"
        update_expression_parts.append(f"{placeholder} = {value_placeholder}")
        expression_attribute_names[placeholder] = key
        expression_attribute_values[value_placeholder] = value

    update_expression = "SET " + ", ".join(update_expression_parts)

    try:
        response = transactions_table.update_item(
            Key={"transaction_id": transaction_id},
            UpdateExpression=update_expression,
            ConditionExpression="attribute_exists(#pk)",
            ExpressionAttributeNames=expression_attribute_names,
            ExpressionAttributeValues=_convert_for_dynamo(expression_attribute_values),
            ReturnValues="ALL_NEW",
        )
        attributes = response.get("Attributes")
        return _from_dynamo(attributes) if attributes else None
    except ClientError as e:
        if _error_code(e) == "ConditionalCheckFailedException":
            return None
        logger.error(f"update_transaction failed: {_error_message(e)}")
        raise StorageError(_error_message(e)) from e


def delete_transaction(transaction_id: str) -> bool:
    """Delete a transaction. False when it didn't exist; StorageError when the delete fails."""
    try:
        response = transactions_table.delete_item(
            Key={"transaction_id": transaction_id},
            ReturnValues="ALL_OLD",
        )
    except ClientError as e:
        logger.error(f"delete_transaction failed: {_error_message(e)}")
        raise StorageError(_error_message(e)) from e
    return "Attributes" in response


# ----------------------------------------------------------------------
# Budgets
# ----------------------------------------------------------------------
def list_budgets(month: Optional[str] = None) -> Optional[List[Dict[str, Any]]]:
    """Budgets for one month (query on the partition key) or all of them."""
    try:
        if month:
            items = _read_all(budgets_table.query, KeyConditionExpression=Key("month").eq(month))
        else:
            items = _read_all(budgets_table.scan)
        return [_from_dynamo(item) for item in items]
    except ClientError as e:
        logger.error(f"list_budgets failed: {_error_message(e)}")
        return None


def upsert_budget(category: str, amount: float, month: str) -> Optional[Dict[str, Any]]:
    """
    Create or replace the budget for (category, month).
    created_at is written once; later writes only move amount and updated_at.
    """
    now = datetime.utcnow().isoformat()
    try:
        response = budgets_table.update_item(
            Key={"month": month, "category": category},
            UpdateExpression="SET #amount = :amount, #updated = :now, #created = if_not_exists(#created, :now)",
            ExpressionAttributeNames={
                "#amount": "amount",
                "#updated": "updated_at",
                "#created": "created_at",
            },
            ExpressionAttributeValues=_convert_for_dynamo({":amount": amount, ":now": now}),
            ReturnValues="ALL_NEW",
        )
        attributes = response.get("Attributes")
        return _from_dynamo(attributes) if attributes else None
    except ClientError as e:
        logger.error(f"upsert_budget failed: {_error_message(e)}")
        return None


def _convert_for_dynamo(obj: Any):
    """
    Recursively convert floats to Decimal for DynamoDB compatibility.
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _convert_for_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_for_dynamo(v) for v in obj]
    return obj


def _from_dynamo(obj: Any):
    """
    Recursively convert Decimal instances back to native Python numeric types.
    """
    if isinstance(obj, list):
        return [_from_dynamo(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    return obj
