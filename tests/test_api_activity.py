"""Tests for the activity feed endpoint."""
import pytest


class TestActivityAPI:
    """Tests for GET /api/v1/activity."""

    @pytest.fixture
    def sale(self, client, sample_products, auth):
        response = client.post(
            "/api/v1/transactions",
            json={"product_id": str(sample_products[0].id), "type": "sell", "quantity": 4},
            auth=auth
        )
        assert response.status_code == 201
        return response.json()

    def test_feed_describes_entries(self, client, sale, auth):
        response = client.get("/api/v1/activity", auth=auth)

        assert response.status_code == 200
        descriptions = [row["description"] for row in response.json()]
        assert "Recorded sell transaction" in descriptions
        assert "Updated product" in descriptions
        assert "Created product: Ayran 250ml (A1)" in descriptions

    def test_feed_labels(self, client, sale, auth):
        data = client.get("/api/v1/activity", auth=auth).json()
        labels = {row["action"]: row["label"] for row in data}
        assert labels == {"INSERT": "Created", "UPDATE": "Updated"}

    def test_sale_entries(self, client, sale, auth):
        """Test the two entries committed with the sale."""
        data = client.get("/api/v1/activity", auth=auth).json()

        inserts = [r for r in data if r["entity_type"] == "transactions"]
        updates = [r for r in data if r["action"] == "UPDATE"]
        assert len(inserts) == 1
        assert inserts[0]["entity_id"] == sale["id"]
        assert len(updates) == 1
        assert updates[0]["details"] == {"old": {"quantity": 10}, "new": {"quantity": 6}}
        assert updates[0]["user_id"] == auth[0]

    def test_limit(self, client, sale, auth):
        data = client.get("/api/v1/activity?limit=2", auth=auth).json()
        assert len(data) == 2

    def test_order(self, client, sale, auth):
        newest = [r["id"] for r in client.get("/api/v1/activity", auth=auth).json()]
        oldest = [r["id"] for r in client.get("/api/v1/activity?order=asc", auth=auth).json()]
        assert newest == list(reversed(oldest))
        assert len(newest) == 5

    def test_repeated_reads_agree(self, client, sale, auth):
        first = client.get("/api/v1/activity", auth=auth).json()
        second = client.get("/api/v1/activity", auth=auth).json()
        assert first == second

    def test_empty_feed(self, client, auth):
        response = client.get("/api/v1/activity", auth=auth)
        assert response.status_code == 200
        assert response.json() == []
