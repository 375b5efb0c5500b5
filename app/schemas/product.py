"""
Pydantic schemas for Product model.
"""
from datetime import datetime
import uuid
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict

# Column limits: Integer and DECIMAL(10,2)
MAX_QUANTITY = 2**31 - 1
MAX_PRICE = Decimal("99999999.99")


class ProductBase(BaseModel):
    """Base product schema."""
    sku: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=500)
    price: Decimal = Field(default=Decimal("0.00"), ge=0, max_digits=10, decimal_places=2)


class ProductCreate(ProductBase):
    """Schema for creating a product."""
    quantity: int = Field(default=0, ge=0, le=MAX_QUANTITY)


class ProductResponse(ProductBase):
    """Schema for product response."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    quantity: int
    version: int
    created_at: datetime
    updated_at: datetime
