"""
Product endpoints used alongside the ledger: seed a product and read stock.
"""
import uuid
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import get_current_user_id
from app.schemas.product import ProductCreate, ProductResponse
from app.services.catalog import ProductCatalog

router = APIRouter(prefix="/products", tags=["Products"])


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    product_data: ProductCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Create a product with its opening stock.

    - **sku**: Unique, cannot be changed later
    - **quantity**: Opening stock (default 0)
    """
    return ProductCatalog(db).create(product_data, user_id=user_id)


@router.get("", response_model=list[ProductResponse])
def list_products(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """List products by name."""
    return ProductCatalog(db).list(limit=limit, offset=offset)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get a product with its current quantity."""
    return ProductCatalog(db).get(product_id)
