"""
Transaction model: the immutable ledger of stock movements.
"""
from typing import Optional
import uuid
from decimal import Decimal
from sqlalchemy import String, Integer, DECIMAL, ForeignKey, Index, Text, Uuid, CheckConstraint, event
from sqlalchemy.orm import Mapped, mapped_column, object_session, relationship

from app.core.database import Base
from app.errors import ImmutableRecordError


class Transaction(Base):
    """A recorded buy, sell or adjustment. Rows are never updated or deleted."""

    __tablename__ = "transactions"

    # Foreign keys
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False
    )

    # Transaction details
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # 'buy', 'sell', 'adjustment'
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price_per_unit: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), nullable=False)

    # Signed change applied to the product's quantity
    stock_delta: Mapped[int] = mapped_column(Integer, nullable=False)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Acting user, as supplied by the access layer
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)

    # Relationships
    product = relationship("Product", back_populates="transactions")

    # Indexes
    __table_args__ = (
        CheckConstraint("quantity > 0", name="quantity_positive"),
        CheckConstraint("price_per_unit >= 0", name="price_non_negative"),
        Index("idx_transactions_product", "product_id"),
        Index("idx_transactions_type", "type"),
        Index("idx_transactions_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, type={self.type}, qty={self.quantity})>"

    def snapshot(self) -> dict:
        """JSON-safe view of the recorded fields, used for audit details."""
        return {
            "product_id": str(self.product_id),
            "type": self.type,
            "quantity": self.quantity,
            "price_per_unit": str(self.price_per_unit),
            "total_amount": str(self.total_amount),
            "stock_delta": self.stock_delta,
            "notes": self.notes,
        }


@event.listens_for(Transaction, "before_update")
def _refuse_update(mapper, connection, target):
    session = object_session(target)
    # Relationship bookkeeping marks rows dirty without touching columns
    if session is not None and not session.is_modified(target, include_collections=False):
        return
    raise ImmutableRecordError("Transaction", target.id, "updated")


@event.listens_for(Transaction, "before_delete")
def _refuse_delete(mapper, connection, target):
    raise ImmutableRecordError("Transaction", target.id, "deleted")
