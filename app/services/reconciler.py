"""
Stock reconciliation: applies a transaction's quantity change to its product.

The product write is a compare-and-swap on ``Product.version``. The ledger
record, the quantity update and the audit entries are committed in a single
database transaction; when another writer changed the product in between,
everything is rolled back and the reconciliation starts over from a fresh
read, a bounded number of times.
"""
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.config import settings
from app.errors import (
    AppException,
    ConflictError,
    InsufficientStockError,
    PersistenceError,
    ValidationError,
)
from app.logging_config import get_logger
from app.models.product import Product
from app.schemas.activity import EntityType, UpdatedDetails
from app.schemas.product import MAX_QUANTITY
from app.schemas.transaction import AdjustmentDirection, TransactionType
from app.services.audit import AuditTrail
from app.services.catalog import ProductCatalog

logger = get_logger("reconciler")

# Called inside the unit of work once the product write succeeded
RecordWriter = Callable[[Product, int], Any]


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a committed reconciliation."""

    product_id: uuid.UUID
    old_quantity: int
    new_quantity: int
    delta: int
    attempts: int
    record: Any = None


def signed_delta(
    txn_type: TransactionType,
    quantity: int,
    direction: Optional[AdjustmentDirection] = None,
) -> int:
    """
    Quantity change implied by a transaction.

    buy adds, sell removes, and an adjustment goes the way its ``direction``
    says. Buys and sells have a fixed direction, so passing one is an error.

    Raises:
        ValidationError: On a missing or contradictory direction
    """
    txn_type = TransactionType(txn_type)

    if txn_type is TransactionType.ADJUSTMENT:
        if direction is None:
            raise ValidationError(
                "Adjustment direction is required",
                errors=[{"field": "direction", "message": "must be 'increase' or 'decrease'"}]
            )
        direction = AdjustmentDirection(direction)
        return quantity if direction is AdjustmentDirection.INCREASE else -quantity

    if direction is not None:
        raise ValidationError(
            f"Direction is only accepted for adjustments, not '{txn_type.value}'",
            errors=[{"field": "direction", "message": "not allowed for this transaction type"}]
        )

    return quantity if txn_type is TransactionType.BUY else -quantity


class StockReconciler:
    """Applies quantity deltas to products under optimistic concurrency."""

    def __init__(
        self,
        session: Session,
        catalog: Optional[ProductCatalog] = None,
        audit: Optional[AuditTrail] = None,
        max_attempts: Optional[int] = None,
    ):
        self.session = session
        self.audit = audit or AuditTrail(session)
        self.catalog = catalog or ProductCatalog(session, self.audit)
        self.max_attempts = max_attempts or settings.reconcile_max_attempts

    def apply_delta(
        self,
        product_id: uuid.UUID,
        txn_type: TransactionType,
        quantity: int,
        *,
        user_id: str,
        direction: Optional[AdjustmentDirection] = None,
        record: Optional[RecordWriter] = None,
    ) -> ReconcileResult:
        """
        Apply the signed change for ``txn_type`` to the product and commit.

        ``record`` is invoked with the product and the delta after the guarded
        quantity write; whatever it adds to the session is committed in the
        same transaction, and its return value is handed back in the result.

        Raises:
            ValidationError: Bad adjustment direction
            NotFoundError: Unknown product
            InsufficientStockError: The change would make the quantity negative
            ConflictError: The product kept changing underneath us
            PersistenceError: The database rejected the write
        """
        delta = signed_delta(txn_type, quantity, direction)

        for attempt in range(1, self.max_attempts + 1):
            try:
                result = self._attempt(product_id, delta, user_id, record, attempt)
            except AppException:
                self.session.rollback()
                raise
            except StaleDataError:
                # Version moved between our flush and commit
                self.session.rollback()
                result = None
            except SQLAlchemyError as exc:
                self.session.rollback()
                logger.error(
                    f"[RECONCILE] Storage failure for product_id={product_id}, delta={delta}",
                    exc_info=True
                )
                raise PersistenceError("could not commit stock change", original_error=str(exc)) from exc
            except Exception:
                # Product UPDATE may already be flushed
                self.session.rollback()
                raise

            if result is not None:
                return result

            logger.warning(
                f"[RECONCILE] Version conflict on product_id={product_id}, "
                f"attempt {attempt}/{self.max_attempts}"
            )

        raise ConflictError(product_id, self.max_attempts)

    def _attempt(
        self,
        product_id: uuid.UUID,
        delta: int,
        user_id: str,
        record: Optional[RecordWriter],
        attempt: int,
    ) -> Optional[ReconcileResult]:
        """One read-check-write pass. Returns None when the CAS lost."""
        product = self.catalog.get(product_id)
        old_quantity = product.quantity
        new_quantity = old_quantity + delta

        if new_quantity < 0:
            raise InsufficientStockError(product_id, old_quantity, delta)
        if new_quantity > MAX_QUANTITY:
            raise ValidationError(
                f"Stock would exceed {MAX_QUANTITY}",
                errors=[{"field": "quantity", "message": "resulting stock is too large"}]
            )

        if not self.catalog.update_quantity(product, new_quantity):
            self.session.rollback()
            return None

        written = record(product, delta) if record is not None else None

        self.audit.append(
            EntityType.PRODUCTS,
            product.id,
            UpdatedDetails(old={"quantity": old_quantity}, new={"quantity": new_quantity}),
            user_id=user_id,
        )
        self.session.commit()

        logger.info(
            f"[RECONCILE] product_id={product_id} quantity {old_quantity} -> {new_quantity} "
            f"(delta={delta}, attempt={attempt})"
        )
        return ReconcileResult(
            product_id=product.id,
            old_quantity=old_quantity,
            new_quantity=new_quantity,
            delta=delta,
            attempts=attempt,
            record=written,
        )
