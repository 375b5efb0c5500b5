"""Tests for database models and constraints."""
import pytest
import uuid
from decimal import Decimal
from sqlalchemy.exc import IntegrityError

from app.errors import ImmutableRecordError
from app.models import Product, Transaction, ActivityLogEntry
from app.schemas.transaction import TransactionType
from app.services.ledger import TransactionIntent, TransactionLedger


class TestProductModel:
    """Tests for Product model."""

    def test_create_product(self, test_db):
        """Test creating a basic product."""
        product = Product(sku="TEST001", name="Test Product", price=Decimal("1.50"), quantity=3)
        test_db.add(product)
        test_db.commit()

        assert product.id is not None
        assert product.created_at is not None
        assert product.version == 1

    def test_unique_sku_constraint(self, test_db):
        """Test that SKU must be unique."""
        test_db.add(Product(sku="DUP001", name="Product 1"))
        test_db.commit()

        test_db.add(Product(sku="DUP001", name="Product 2"))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()

    def test_negative_quantity_rejected(self, test_db):
        """Test that the database refuses negative stock."""
        test_db.add(Product(sku="NEG001", name="Negative", quantity=-1))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()

    def test_version_bumped_on_update(self, test_db):
        """Test that every UPDATE increments the version."""
        product = Product(sku="VER001", name="Versioned", quantity=5)
        test_db.add(product)
        test_db.commit()

        product.quantity = 6
        test_db.commit()
        assert product.version == 2

        product.quantity = 7
        test_db.commit()
        assert product.version == 3

    def test_snapshot_is_json_safe(self, test_db):
        """Test the audit snapshot of a product."""
        product = Product(sku="SNAP01", name="Snapshot", price=Decimal("12.30"), quantity=4)
        test_db.add(product)
        test_db.commit()

        assert product.snapshot() == {
            "sku": "SNAP01",
            "name": "Snapshot",
            "price": "12.30",
            "quantity": 4,
        }


class TestTransactionModel:
    """Tests for Transaction model."""

    def test_non_positive_quantity_rejected(self, test_db, sample_products):
        """Test that a ledger row needs a positive quantity."""
        test_db.add(Transaction(
            product_id=sample_products[0].id,
            type="buy",
            quantity=0,
            price_per_unit=Decimal("1.00"),
            total_amount=Decimal("0.00"),
            stock_delta=0,
            user_id="admin",
        ))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()

    def test_product_relationship(self, test_db, sample_products):
        """Test that a transaction links back to its product."""
        transaction = Transaction(
            product_id=sample_products[1].id,
            type="sell",
            quantity=2,
            price_per_unit=Decimal("2.50"),
            total_amount=Decimal("5.00"),
            stock_delta=-2,
            user_id="admin",
        )
        test_db.add(transaction)
        test_db.commit()

        assert transaction.product.sku == "B2"
        assert transaction in sample_products[1].transactions


class TestActivityLogModel:
    """Tests for ActivityLogEntry model."""

    def test_details_round_trip_json(self, test_db):
        """Test that nested details are stored and read back as JSON."""
        entity_id = uuid.uuid4()
        entry = ActivityLogEntry(
            entity_type="products",
            entity_id=entity_id,
            action="UPDATE",
            details={"old": {"quantity": 1}, "new": {"quantity": 2}},
            user_id=None,
        )
        test_db.add(entry)
        test_db.commit()
        test_db.expire_all()

        loaded = test_db.get(ActivityLogEntry, entry.id)
        assert loaded.details["new"]["quantity"] == 2
        assert loaded.entity_id == entity_id
        assert loaded.user_id is None


class TestAppendOnly:
    """Ledger rows and audit entries cannot be changed once written."""

    @pytest.fixture
    def recorded(self, test_db, sample_products):
        return TransactionLedger(test_db).record(TransactionIntent(
            product_id=sample_products[0].id, type=TransactionType.BUY, quantity=2, user_id="admin"
        ))

    def test_transaction_update_refused(self, test_db, recorded):
        recorded.notes = "edited later"
        with pytest.raises(ImmutableRecordError):
            test_db.commit()
        test_db.rollback()

        assert test_db.get(Transaction, recorded.id, populate_existing=True).notes is None

    def test_transaction_delete_refused(self, test_db, recorded):
        test_db.delete(recorded)
        with pytest.raises(ImmutableRecordError):
            test_db.commit()
        test_db.rollback()

        assert test_db.query(Transaction).count() == 1

    def test_audit_entry_update_refused(self, test_db, recorded):
        entry = test_db.query(ActivityLogEntry).filter_by(entity_id=recorded.id).one()
        entry.user_id = "someone-else"
        with pytest.raises(ImmutableRecordError):
            test_db.commit()
        test_db.rollback()

    def test_audit_entry_delete_refused(self, test_db, recorded):
        entry = test_db.query(ActivityLogEntry).filter_by(entity_id=recorded.id).one()
        test_db.delete(entry)
        with pytest.raises(ImmutableRecordError):
            test_db.commit()
        test_db.rollback()

        assert test_db.query(ActivityLogEntry).filter_by(entity_id=recorded.id).count() == 1

    def test_loading_relationships_is_not_a_change(self, test_db, sample_products, recorded):
        """Test that touching the product's history does not trip the guard."""
        product = sample_products[0]
        assert recorded in product.transactions

        TransactionLedger(test_db).record(TransactionIntent(
            product_id=product.id, type=TransactionType.SELL, quantity=1, user_id="admin"
        ))
        assert product.quantity == 11
