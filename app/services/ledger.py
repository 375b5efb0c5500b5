"""
Transaction ledger: validates intents and records buy/sell/adjustment events.

Money rule: ``total_amount = quantity * price_per_unit`` rounded to cents with
ROUND_HALF_UP. The same rule is used for every derived amount.
"""
import uuid
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from app.core.config import settings
from app.errors import NotFoundError, PersistenceError, ValidationError
from app.logging_config import get_logger
from app.models.product import Product
from app.models.transaction import Transaction
from app.schemas.activity import CreatedDetails, EntityType
from app.schemas.product import MAX_PRICE, MAX_QUANTITY
from app.schemas.transaction import (
    AdjustmentDirection,
    MAX_TOTAL,
    SortOrder,
    TransactionFilter,
    TransactionType,
)
from app.services.audit import AuditTrail
from app.services.catalog import ProductCatalog
from app.services.reconciler import StockReconciler

logger = get_logger("ledger")

CENT = Decimal("0.01")


@dataclass(frozen=True)
class TransactionIntent:
    """A caller's request to record one transaction."""

    product_id: uuid.UUID
    type: TransactionType
    quantity: int
    user_id: str
    price_per_unit: Optional[Union[Decimal, int, float, str]] = None
    notes: Optional[str] = None
    direction: Optional[AdjustmentDirection] = None


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Coerce to Decimal without float noise (0.1 stays 0.1)."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValidationError("Price must be a number")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(
            f"Price '{value}' is not a number",
            errors=[{"field": "price_per_unit", "message": "not a number"}]
        )


def compute_total(quantity: int, price_per_unit: Decimal) -> Decimal:
    """Line total rounded half-up to cents."""
    return (Decimal(quantity) * price_per_unit).quantize(CENT, rounding=ROUND_HALF_UP)


def check_total(quantity: int, price_per_unit: Decimal) -> None:
    """
    Raises:
        ValidationError: If the line total does not fit the ledger column
    """
    if Decimal(quantity) * price_per_unit > MAX_TOTAL:
        raise ValidationError(
            f"Total amount exceeds {MAX_TOTAL}",
            errors=[{"field": "total_amount", "message": f"must not exceed {MAX_TOTAL}"}]
        )


class TransactionLedger:
    """Entry point for recording and reading transactions."""

    def __init__(
        self,
        session: Session,
        reconciler: Optional[StockReconciler] = None,
        default_direction: Optional[str] = None,
    ):
        self.session = session
        self.audit = AuditTrail(session)
        self.catalog = ProductCatalog(session, self.audit)
        self.reconciler = reconciler or StockReconciler(session, self.catalog, self.audit)
        direction = default_direction if default_direction is not None else settings.default_adjustment_direction
        self.default_direction = AdjustmentDirection(direction) if direction else None

    def _validate(self, intent: TransactionIntent) -> tuple[TransactionType, Optional[Decimal]]:
        errors = []

        try:
            txn_type = TransactionType(intent.type)
        except ValueError:
            raise ValidationError(
                f"Unknown transaction type '{intent.type}'",
                errors=[{"field": "type", "message": "must be one of buy, sell, adjustment"}]
            )

        if isinstance(intent.quantity, bool) or not isinstance(intent.quantity, int):
            errors.append({"field": "quantity", "message": "must be an integer"})
        elif intent.quantity <= 0:
            errors.append({"field": "quantity", "message": "must be greater than 0"})
        elif intent.quantity > MAX_QUANTITY:
            errors.append({"field": "quantity", "message": f"must not exceed {MAX_QUANTITY}"})

        price = None
        if intent.price_per_unit is not None:
            price = to_money(intent.price_per_unit)
            if not price.is_finite():
                errors.append({"field": "price_per_unit", "message": "must be a finite number"})
            elif price < 0:
                errors.append({"field": "price_per_unit", "message": "must be greater than or equal to 0"})
            elif price > MAX_PRICE:
                errors.append({"field": "price_per_unit", "message": f"must not exceed {MAX_PRICE}"})

        if errors:
            raise ValidationError("Invalid transaction", errors=errors)

        if price is not None:
            check_total(intent.quantity, price)

        return txn_type, price

    def record(self, intent: TransactionIntent) -> Transaction:
        """
        Validate and commit a transaction together with its stock change.

        On success the product's quantity, the new ledger row and both audit
        entries (transaction INSERT, product UPDATE) are committed at once.

        Raises:
            ValidationError: Quantity <= 0, negative price, bad direction
            NotFoundError: Unknown product
            InsufficientStockError: A sell/decrease larger than the stock
            ConflictError: Concurrent updates exhausted the retries
            PersistenceError: The database write failed
        """
        txn_type, price = self._validate(intent)

        direction = intent.direction
        if txn_type is TransactionType.ADJUSTMENT and direction is None:
            direction = self.default_direction

        def write_record(product: Product, delta: int) -> Transaction:
            # Blank price on the form means "use the catalog price"
            unit_price = price if price is not None else product.price
            unit_price = unit_price.quantize(CENT, rounding=ROUND_HALF_UP)
            check_total(intent.quantity, unit_price)
            transaction = Transaction(
                id=uuid.uuid4(),
                product_id=product.id,
                type=txn_type.value,
                quantity=intent.quantity,
                price_per_unit=unit_price,
                total_amount=compute_total(intent.quantity, unit_price),
                stock_delta=delta,
                notes=intent.notes or None,
                user_id=intent.user_id,
            )
            self.session.add(transaction)
            self.audit.append(
                EntityType.TRANSACTIONS,
                transaction.id,
                CreatedDetails(snapshot=transaction.snapshot()),
                user_id=intent.user_id,
            )
            return transaction

        result = self.reconciler.apply_delta(
            intent.product_id,
            txn_type,
            intent.quantity,
            user_id=intent.user_id,
            direction=direction,
            record=write_record,
        )
        transaction = result.record

        logger.info(
            f"[LEDGER] Recorded {transaction.type} id={transaction.id} product_id={transaction.product_id} "
            f"qty={transaction.quantity} total={transaction.total_amount} "
            f"stock {result.old_quantity} -> {result.new_quantity}"
        )
        return transaction

    def get(self, transaction_id: uuid.UUID) -> Transaction:
        """
        Raises:
            NotFoundError: If no transaction has this id
            PersistenceError: If the read fails
        """
        try:
            transaction = self.session.get(Transaction, transaction_id)
        except SQLAlchemyError as exc:
            logger.error(f"[LEDGER] Could not read transaction id={transaction_id}", exc_info=True)
            raise PersistenceError("could not read transaction", original_error=str(exc)) from exc
        if transaction is None:
            raise NotFoundError("Transaction", transaction_id)
        return transaction

    def list(
        self,
        filters: Optional[TransactionFilter] = None,
        ordering: SortOrder = SortOrder.DESC,
    ) -> Query:
        """
        Transactions ordered by creation time, newest first by default.

        The query is lazy and restartable: iterate it, slice it, or call
        ``.all()``; every iteration re-reads. Products are loaded alongside
        so rows can show name and SKU.
        """
        query = self.session.query(Transaction).options(joinedload(Transaction.product))

        if filters is not None:
            if filters.product_id is not None:
                query = query.filter(Transaction.product_id == filters.product_id)
            if filters.type is not None:
                query = query.filter(Transaction.type == TransactionType(filters.type).value)

        if SortOrder(ordering) is SortOrder.ASC:
            query = query.order_by(Transaction.created_at.asc(), Transaction.id.asc())
        else:
            query = query.order_by(Transaction.created_at.desc(), Transaction.id.desc())

        return query
