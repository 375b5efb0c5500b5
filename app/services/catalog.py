"""
Product catalog access used by the ledger.

Only the pieces the ledger needs live here: reads, a minimal create for
seeding stock, and the guarded quantity write. Editing names, SKUs or prices
belongs to the catalog service proper.
"""
import uuid
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.errors import DuplicateResourceError, NotFoundError, PersistenceError
from app.logging_config import get_logger
from app.models.product import Product
from app.schemas.activity import CreatedDetails, EntityType
from app.schemas.product import ProductCreate
from app.services.audit import AuditTrail

logger = get_logger("catalog")

CENT = Decimal("0.01")


class ProductCatalog:
    """Product reads and the compare-and-swap quantity update."""

    def __init__(self, session: Session, audit: Optional[AuditTrail] = None):
        self.session = session
        self.audit = audit or AuditTrail(session)

    def get(self, product_id: uuid.UUID) -> Product:
        """Load a product with its current quantity and version.

        Raises:
            NotFoundError: If no product has this id
            PersistenceError: If the read fails
        """
        try:
            product = self.session.get(Product, product_id, populate_existing=True)
        except SQLAlchemyError as exc:
            logger.error(f"[CATALOG] Could not read product id={product_id}", exc_info=True)
            raise PersistenceError("could not read product", original_error=str(exc)) from exc
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def get_by_sku(self, sku: str) -> Optional[Product]:
        return self.session.query(Product).filter(Product.sku == sku).first()

    def list(self, limit: int = 100, offset: int = 0) -> list[Product]:
        return (
            self.session.query(Product)
            .order_by(Product.name.asc(), Product.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def create(self, data: ProductCreate, user_id: Optional[str] = None) -> Product:
        """Create a product and its INSERT audit entry in one commit."""
        if self.get_by_sku(data.sku) is not None:
            raise DuplicateResourceError("Product", "sku", data.sku)

        product = Product(
            sku=data.sku,
            name=data.name,
            price=data.price.quantize(CENT, rounding=ROUND_HALF_UP),
            quantity=data.quantity,
        )
        self.session.add(product)
        try:
            self.session.flush()
            self.audit.append(
                EntityType.PRODUCTS,
                product.id,
                CreatedDetails(snapshot=product.snapshot()),
                user_id=user_id,
            )
            self.session.commit()
        except IntegrityError as exc:
            # Lost a race with another insert of the same SKU
            self.session.rollback()
            raise DuplicateResourceError("Product", "sku", data.sku) from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(f"[CATALOG] Could not create product sku={data.sku}", exc_info=True)
            raise PersistenceError("could not create product", original_error=str(exc)) from exc

        logger.info(f"[CATALOG] Created product id={product.id}, sku={product.sku}, qty={product.quantity}")
        return product

    def update_quantity(self, product: Product, new_quantity: int) -> bool:
        """
        Write ``new_quantity`` only if the product still has the version it was read with.

        The ORM adds ``AND version = <read version>`` to the UPDATE and bumps the
        version. Returns False when another writer got there first; the caller
        must then roll back the session.
        """
        product.quantity = new_quantity
        try:
            self.session.flush()
        except StaleDataError:
            logger.debug(f"[CATALOG] Stale version for product id={product.id}")
            return False
        return True
