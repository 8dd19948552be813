import logging
from typing import List

from fastapi import APIRouter, HTTPException, status

from app.db import dynamo
from app.models.transaction import (
    CATEGORIES,
    TransactionCreate,
    TransactionInDB,
    TransactionPublic,
    TransactionUpdate,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_model=List[TransactionPublic])
def list_transactions():
    """All transactions, newest first."""
    transactions = dynamo.list_transactions()
    if transactions is None:
        raise HTTPException(status_code=500, detail="Failed to fetch transactions")
    return transactions


@router.post("/", response_model=TransactionPublic, status_code=status.HTTP_201_CREATED)
def create_transaction(transaction: TransactionCreate):
    transaction_db = TransactionInDB(**transaction.model_dump())
    success = dynamo.put_transaction(transaction_db.model_dump())
    if not success:
        raise HTTPException(status_code=500, detail="Failed to create transaction")
    logger.info(f"Created {transaction_db.type} transaction {transaction_db.transaction_id}")
    return TransactionPublic(**transaction_db.model_dump())


@router.get("/{transaction_id}", response_model=TransactionPublic)
def get_transaction(transaction_id: str):
    try:
        transaction = dynamo.get_transaction(transaction_id)
    except dynamo.StorageError:
        raise HTTPException(status_code=500, detail="Failed to fetch transaction")
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return TransactionPublic(**transaction)


@router.put("/{transaction_id}", response_model=TransactionPublic)
def update_transaction(transaction_id: str, transaction_update: TransactionUpdate):
    try:
        updated = dynamo.update_transaction(transaction_id, transaction_update.model_dump())
    except dynamo.StorageError:
        raise HTTPException(status_code=500, detail="Failed to update transaction")
    if not updated:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return TransactionPublic(**updated)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(transaction_id: str):
    try:
        deleted = dynamo.delete_transaction(transaction_id)
    except dynamo.StorageError:
        raise HTTPException(status_code=500, detail="Failed to delete transaction")
    if not deleted:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return None


categories_router = APIRouter()


@categories_router.get("/", response_model=List[str])
def list_categories():
    """The built-in category set offered by the transaction form."""
    return list(CATEGORIES)
