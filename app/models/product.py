"""
Product model for inventory management.
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import String, Integer, DECIMAL, DateTime, CheckConstraint, Index, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, utcnow


class Product(Base):
    """Product stock record; quantity is only written by stock reconciliation."""

    __tablename__ = "products"

    # Product identification
    sku: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)

    # Pricing
    price: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), default=Decimal("0.00"), nullable=False)

    # Stock information
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Optimistic lock marker, bumped by the ORM on every UPDATE
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False
    )

    # Relationships
    transactions = relationship("Transaction", back_populates="product")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        CheckConstraint("price >= 0", name="price_non_negative"),
        Index("idx_products_name", "name"),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, sku={self.sku}, name={self.name}, qty={self.quantity})>"

    def snapshot(self) -> dict:
        """JSON-safe view of the catalog fields, used for audit details."""
        return {
            "sku": self.sku,
            "name": self.name,
            "price": str(self.price),
            "quantity": self.quantity,
        }
