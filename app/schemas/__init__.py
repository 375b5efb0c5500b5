"""
Pydantic schemas for request/response validation.
"""
from app.schemas.product import ProductBase, ProductCreate, ProductResponse
from app.schemas.transaction import (
    TransactionType, AdjustmentDirection, SortOrder, TransactionCreate,
    TransactionResponse, TransactionWithProduct, TransactionFilter
)
from app.schemas.activity import (
    EntityType, AuditAction, CreatedDetails, UpdatedDetails, DeletedDetails,
    AuditDetails, parse_details, ActivityResponse
)

__all__ = [
    # Product schemas
    "ProductBase", "ProductCreate", "ProductResponse",

    # Transaction schemas
    "TransactionType", "AdjustmentDirection", "SortOrder", "TransactionCreate",
    "TransactionResponse", "TransactionWithProduct", "TransactionFilter",

    # Activity schemas
    "EntityType", "AuditAction", "CreatedDetails", "UpdatedDetails", "DeletedDetails",
    "AuditDetails", "parse_details", "ActivityResponse",
]
