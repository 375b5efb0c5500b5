"""
Pydantic schemas for the Transaction ledger.
"""
from typing import Optional
from datetime import datetime
import uuid
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum

# DECIMAL(12,2)
MAX_TOTAL = Decimal("9999999999.99")


class TransactionType(str, Enum):
    """Ledger transaction types."""
    BUY = "buy"
    SELL = "sell"
    ADJUSTMENT = "adjustment"


class AdjustmentDirection(str, Enum):
    """Which way an adjustment moves stock."""
    INCREASE = "increase"
    DECREASE = "decrease"


class SortOrder(str, Enum):
    """Ordering by creation time."""
    DESC = "desc"
    ASC = "asc"


class TransactionCreate(BaseModel):
    """Schema for recording a transaction.

    Range checks (quantity > 0, price >= 0) are enforced by the ledger so that
    every caller gets the same error.
    """
    product_id: uuid.UUID
    type: TransactionType
    quantity: int
    price_per_unit: Optional[Decimal] = Field(
        None,
        description="Defaults to the product's current price when omitted"
    )
    direction: Optional[AdjustmentDirection] = Field(
        None,
        description="Required for adjustments unless a default direction is configured"
    )
    notes: Optional[str] = None


class TransactionResponse(BaseModel):
    """Schema for transaction response."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    type: TransactionType
    quantity: int
    price_per_unit: Decimal
    total_amount: Decimal
    stock_delta: int
    notes: Optional[str] = None
    user_id: str
    created_at: datetime


class TransactionWithProduct(TransactionResponse):
    """Transaction with the product columns the history table shows."""
    product_name: Optional[str] = None
    product_sku: Optional[str] = None


class TransactionFilter(BaseModel):
    """Optional filters for listing transactions."""
    product_id: Optional[uuid.UUID] = None
    type: Optional[TransactionType] = None
