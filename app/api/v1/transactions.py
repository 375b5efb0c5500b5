"""
Transaction API endpoints: record stock movements and read the ledger.
"""
from typing import Optional
import uuid
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.security import get_current_user_id
from app.models.transaction import Transaction
from app.schemas.transaction import (
    TransactionCreate,
    TransactionResponse,
    TransactionWithProduct,
    TransactionFilter,
    TransactionType,
    SortOrder,
)
from app.services.ledger import TransactionLedger, TransactionIntent

router = APIRouter(prefix="/transactions", tags=["Transactions"])


def _with_product(transaction: Transaction) -> TransactionWithProduct:
    product = transaction.product
    return TransactionWithProduct(
        **TransactionResponse.model_validate(transaction).model_dump(),
        product_name=product.name if product else None,
        product_sku=product.sku if product else None,
    )


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction_data: TransactionCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Record a transaction and apply it to the product's stock.

    - **type**: 'buy' adds stock, 'sell' removes it, 'adjustment' follows **direction**
    - **quantity**: Positive integer
    - **price_per_unit**: Defaults to the product price
    """
    ledger = TransactionLedger(db)
    return ledger.record(
        TransactionIntent(
            product_id=transaction_data.product_id,
            type=transaction_data.type,
            quantity=transaction_data.quantity,
            price_per_unit=transaction_data.price_per_unit,
            notes=transaction_data.notes,
            direction=transaction_data.direction,
            user_id=user_id,
        )
    )


@router.get("", response_model=list[TransactionWithProduct])
def list_transactions(
    product_id: Optional[uuid.UUID] = None,
    type: Optional[TransactionType] = None,
    order: SortOrder = SortOrder.DESC,
    limit: Optional[int] = Query(None, ge=1, le=500),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    List transactions, newest first unless **order**=asc.

    - **product_id**: Filter by product
    - **type**: Filter by type (buy/sell/adjustment)
    """
    query = TransactionLedger(db).list(
        TransactionFilter(product_id=product_id, type=type),
        ordering=order,
    )
    rows = query.offset(offset).limit(limit or settings.transactions_page_size)
    return [_with_product(t) for t in rows]


@router.get("/{transaction_id}", response_model=TransactionWithProduct)
def get_transaction(
    transaction_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get a specific transaction."""
    return _with_product(TransactionLedger(db).get(transaction_id))
