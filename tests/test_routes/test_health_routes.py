# tests/test_routes/test_health_routes.py
import pytest


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_database_health_lists_tables(client):
    response = await client.get("/health/db")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    for table in ("products", "sales", "sale_items", "orders", "vendor_order_counters"):
        assert table in data["tables"]
