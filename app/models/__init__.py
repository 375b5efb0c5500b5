"""
SQLAlchemy models for the inventory ledger.
Import all models here to ensure they're registered with SQLAlchemy.
"""
from app.models.product import Product
from app.models.transaction import Transaction
from app.models.activity_log import ActivityLogEntry

__all__ = [
    "Product",
    "Transaction",
    "ActivityLogEntry",
]
