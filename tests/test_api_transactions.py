"""Tests for transaction and product API endpoints."""
import pytest
import uuid
from decimal import Decimal
from sqlalchemy.exc import OperationalError

from app.models import Product, Transaction


class TestCreateTransactionAPI:
    """Tests for POST /api/v1/transactions."""

    def test_record_buy(self, client, test_db, sample_products, auth):
        """Test recording a buy through the API."""
        product = sample_products[0]
        response = client.post(
            "/api/v1/transactions",
            json={
                "product_id": str(product.id),
                "type": "buy",
                "quantity": 5,
                "price_per_unit": "4.00",
                "notes": "Weekly delivery"
            },
            auth=auth
        )

        assert response.status_code == 201
        data = response.json()
        assert data["type"] == "buy"
        assert Decimal(data["total_amount"]) == Decimal("20.00")
        assert data["stock_delta"] == 5
        assert data["user_id"] == auth[0]
        assert data["notes"] == "Weekly delivery"
        assert test_db.get(Product, product.id).quantity == 15

    def test_record_adjustment(self, client, test_db, sample_products, auth):
        """Test an adjustment with an explicit direction."""
        response = client.post(
            "/api/v1/transactions",
            json={
                "product_id": str(sample_products[1].id),
                "type": "adjustment",
                "quantity": 3,
                "direction": "decrease"
            },
            auth=auth
        )

        assert response.status_code == 201
        assert response.json()["stock_delta"] == -3
        assert Decimal(response.json()["price_per_unit"]) == Decimal("2.50")

    def test_adjustment_without_direction(self, client, sample_products, auth):
        """Test that a directionless adjustment is a 422."""
        response = client.post(
            "/api/v1/transactions",
            json={"product_id": str(sample_products[1].id), "type": "adjustment", "quantity": 3},
            auth=auth
        )
        assert response.status_code == 422
        assert response.json()["details"]["validation_errors"][0]["field"] == "direction"

    def test_oversell_conflict(self, client, test_db, sample_products, auth):
        """Test that selling more than is in stock is refused."""
        response = client.post(
            "/api/v1/transactions",
            json={"product_id": str(sample_products[0].id), "type": "sell", "quantity": 11},
            auth=auth
        )

        assert response.status_code == 409
        body = response.json()
        assert "Insufficient stock" in body["error"]
        assert body["details"]["available"] == 10
        assert body["path"] == "/api/v1/transactions"
        assert test_db.query(Transaction).count() == 0

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity(self, client, sample_products, auth, quantity):
        """Test that the ledger's range check surfaces as 422."""
        response = client.post(
            "/api/v1/transactions",
            json={"product_id": str(sample_products[0].id), "type": "buy", "quantity": quantity},
            auth=auth
        )
        assert response.status_code == 422
        assert response.json()["error"] == "Invalid transaction"

    def test_negative_price(self, client, sample_products, auth):
        response = client.post(
            "/api/v1/transactions",
            json={
                "product_id": str(sample_products[0].id),
                "type": "buy",
                "quantity": 1,
                "price_per_unit": "-1.00"
            },
            auth=auth
        )
        assert response.status_code == 422

    def test_unknown_type(self, client, sample_products, auth):
        """Test that request validation rejects unknown types."""
        response = client.post(
            "/api/v1/transactions",
            json={"product_id": str(sample_products[0].id), "type": "refund", "quantity": 1},
            auth=auth
        )
        assert response.status_code == 422
        assert response.json()["error"] == "Validation failed"

    def test_unknown_product(self, client, sample_products, auth):
        response = client.post(
            "/api/v1/transactions",
            json={"product_id": str(uuid.uuid4()), "type": "buy", "quantity": 1},
            auth=auth
        )
        assert response.status_code == 404

    def test_price_beyond_column(self, client, test_db, sample_products, auth):
        """Test that an oversized price is a 422 and stock is untouched."""
        response = client.post(
            "/api/v1/transactions",
            json={
                "product_id": str(sample_products[1].id),
                "type": "sell",
                "quantity": 4,
                "price_per_unit": "1e30"
            },
            auth=auth
        )

        assert response.status_code == 422
        assert response.json()["details"]["validation_errors"][0]["field"] == "price_per_unit"
        assert test_db.get(Product, sample_products[1].id, populate_existing=True).quantity == 40
        assert test_db.query(Transaction).count() == 0

    def test_storage_failure_on_listing(self, client, test_db, auth, monkeypatch):
        """Test that a failed read is reported as a storage failure."""
        def failing_query(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(test_db, "query", failing_query)
        response = client.get("/api/v1/transactions", auth=auth)

        assert response.status_code == 503
        assert response.json()["error"].startswith("Storage failure")


class TestListTransactionsAPI:
    """Tests for GET /api/v1/transactions."""

    @pytest.fixture
    def recorded(self, client, sample_products, auth):
        a, b, _ = sample_products
        payloads = [
            {"product_id": str(a.id), "type": "buy", "quantity": 2},
            {"product_id": str(b.id), "type": "sell", "quantity": 1},
            {"product_id": str(a.id), "type": "sell", "quantity": 3},
        ]
        ids = []
        for payload in payloads:
            response = client.post("/api/v1/transactions", json=payload, auth=auth)
            assert response.status_code == 201
            ids.append(response.json()["id"])
        return ids

    def test_list_includes_product(self, client, recorded, auth):
        response = client.get("/api/v1/transactions", auth=auth)

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 3
        assert {row["product_sku"] for row in data} == {"A1", "B2"}
        assert all(row["product_name"] for row in data)

    def test_order_parameter(self, client, recorded, auth):
        newest = [r["id"] for r in client.get("/api/v1/transactions", auth=auth).json()]
        oldest = [r["id"] for r in client.get("/api/v1/transactions?order=asc", auth=auth).json()]
        assert newest == list(reversed(oldest))

    def test_filter_by_type(self, client, recorded, auth):
        data = client.get("/api/v1/transactions?type=sell", auth=auth).json()
        assert len(data) == 2
        assert all(row["type"] == "sell" for row in data)

    def test_filter_by_product(self, client, sample_products, recorded, auth):
        data = client.get(
            f"/api/v1/transactions?product_id={sample_products[0].id}", auth=auth
        ).json()
        assert [row["product_sku"] for row in data] == ["A1", "A1"]

    def test_pagination(self, client, recorded, auth):
        first = client.get("/api/v1/transactions?limit=2", auth=auth).json()
        rest = client.get("/api/v1/transactions?limit=2&offset=2", auth=auth).json()
        assert len(first) == 2
        assert len(rest) == 1
        assert {r["id"] for r in first + rest} == set(recorded)

    def test_get_one(self, client, recorded, auth):
        response = client.get(f"/api/v1/transactions/{recorded[1]}", auth=auth)
        assert response.status_code == 200
        assert response.json()["product_sku"] == "B2"

    def test_get_missing(self, client, auth):
        response = client.get(f"/api/v1/transactions/{uuid.uuid4()}", auth=auth)
        assert response.status_code == 404


class TestProductAPI:
    """Tests for the product endpoints used to seed stock."""

    def test_create_product(self, client, auth):
        response = client.post(
            "/api/v1/products",
            json={"sku": "NEW001", "name": "New Product", "price": "3.75", "quantity": 12},
            auth=auth
        )

        assert response.status_code == 201
        data = response.json()
        assert data["sku"] == "NEW001"
        assert data["quantity"] == 12
        assert data["version"] == 1

    def test_duplicate_sku(self, client, sample_products, auth):
        response = client.post(
            "/api/v1/products",
            json={"sku": "A1", "name": "Copy"},
            auth=auth
        )
        assert response.status_code == 409

    @pytest.mark.parametrize("price", ["1e30", "123456789.00", "1.001"])
    def test_price_must_fit_column(self, client, auth, price):
        response = client.post(
            "/api/v1/products",
            json={"sku": "BIG", "name": "Too expensive", "price": price},
            auth=auth
        )
        assert response.status_code == 422

    def test_negative_opening_stock(self, client, auth):
        response = client.post(
            "/api/v1/products",
            json={"sku": "NEG", "name": "Negative", "quantity": -1},
            auth=auth
        )
        assert response.status_code == 422

    def test_stock_visible_after_sale(self, client, sample_products, auth):
        product_id = str(sample_products[1].id)
        client.post(
            "/api/v1/transactions",
            json={"product_id": product_id, "type": "sell", "quantity": 10},
            auth=auth
        )

        data = client.get(f"/api/v1/products/{product_id}", auth=auth).json()
        assert data["quantity"] == 30
        assert data["version"] == 2

    def test_list_products(self, client, sample_products, auth):
        data = client.get("/api/v1/products", auth=auth).json()
        assert [p["name"] for p in data] == ["Ayran 250ml", "Cay 500g", "Simit"]
