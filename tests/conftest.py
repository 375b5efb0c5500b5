"""Shared test fixtures for all tests."""
import os
import tempfile

# Must be set before the app reads its settings
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="inventory-ledger-logs-")
os.environ.pop("DEFAULT_ADJUSTMENT_DIRECTION", None)

import pytest
from decimal import Decimal
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.database import Base, build_engine, get_db
from app.main import app
from app.schemas.product import ProductCreate
from app.services.catalog import ProductCatalog


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh in-memory SQLite database for each test."""
    engine = build_engine("sqlite:///:memory:")
    TestingSessionLocal = sessionmaker(
        bind=engine, autoflush=False, expire_on_commit=False
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def file_sessions(tmp_path):
    """Session factory on a file-backed SQLite database, for multi-session tests."""
    engine = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    try:
        yield factory
    finally:
        engine.dispose()


@pytest.fixture(scope="function")
def client(test_db):
    """Create a test client with dependency override."""
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_products(test_db):
    """Create sample products for testing."""
    catalog = ProductCatalog(test_db)
    return [
        catalog.create(
            ProductCreate(sku="A1", name="Ayran 250ml", price=Decimal("5.00"), quantity=10),
            user_id="admin"
        ),
        catalog.create(
            ProductCreate(sku="B2", name="Simit", price=Decimal("2.50"), quantity=40),
            user_id="admin"
        ),
        catalog.create(
            ProductCreate(sku="C3", name="Cay 500g", price=Decimal("89.90"), quantity=0),
            user_id="admin"
        ),
    ]


@pytest.fixture
def auth():
    """Basic auth tuple for API tests."""
    return (settings.admin_username, settings.admin_password)


@pytest.fixture
def invalid_auth():
    """Wrong password for testing auth failures."""
    return (settings.admin_username, "wrongpassword")
