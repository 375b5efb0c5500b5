"""API v1 Router."""
from fastapi import APIRouter

from app.api.v1 import products, transactions, activity

api_router = APIRouter(prefix="/api/v1")

# Include all route modules
api_router.include_router(products.router)
api_router.include_router(transactions.router)
api_router.include_router(activity.router)

__all__ = ["api_router"]
