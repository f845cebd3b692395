# tests/test_routes/test_webhook_routes.py
import hashlib
import hmac
import json
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from upleer.core.config import get_webhook_secret
from upleer.core.enums import ProductStatus
from upleer.main import app
from upleer.models import Order, Product, Sale


@pytest.fixture
async def catalog(make_user, make_product):
    await make_user("A1")
    await make_product("A1", product_id=5, title="Apostila X")


async def _count(session_factory, model):
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(model))


@pytest.mark.asyncio
async def test_batch_webhook_creates_sale(client, catalog, sample_vendor_entry, session_factory):
    response = await client.post("/api/webhook/sales/batch", json=[sample_vendor_entry])

    assert response.status_code == 200
    data = response.json()
    assert data["orderId"] == "O1"
    assert data["totalVendors"] == 1
    assert data["totalQuantity"] == 2
    assert data["totalValue"] == 100.0
    assert data["vendors"][0]["vendorOrderNumber"] == 1
    assert await _count(session_factory, Sale) == 1
    assert await _count(session_factory, Order) == 1


@pytest.mark.asyncio
async def test_batch_webhook_accepts_wrapped_payload(client, catalog, sample_vendor_entry):
    response = await client.post("/api/webhook/sales/batch", json={"data": [sample_vendor_entry]})

    assert response.status_code == 200
    assert response.json()["totalVendors"] == 1


@pytest.mark.asyncio
async def test_batch_webhook_all_entries_failed(client, catalog, sample_vendor_entry):
    sample_vendor_entry["produtos"][0]["id_produto_interno"] = "999"

    response = await client.post("/api/webhook/sales/batch", json=[sample_vendor_entry])

    assert response.status_code == 400
    data = response.json()
    assert data["totalVendors"] == 0
    assert data["totalErrors"] == 1
    assert data["errors"][0]["author"] == "A1"


@pytest.mark.asyncio
async def test_batch_webhook_duplicate_is_ok(client, catalog, sample_vendor_entry, session_factory):
    first = await client.post("/api/webhook/sales/batch", json=[sample_vendor_entry])
    second = await client.post("/api/webhook/sales/batch", json=[sample_vendor_entry])

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["totalDuplicates"] == 1
    assert await _count(session_factory, Sale) == 1


@pytest.mark.asyncio
async def test_batch_webhook_invalid_json(client):
    response = await client.post(
        "/api/webhook/sales/batch",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_batch_webhook_unknown_shape(client):
    response = await client.post("/api/webhook/sales/batch", json={"pedido": "O1"})
    assert response.status_code == 400
    assert "data" in response.json()["detail"]


class TestSignature:
    @pytest.fixture(autouse=True)
    def secret(self):
        app.dependency_overrides[get_webhook_secret] = lambda: "s3cret"
        yield
        app.dependency_overrides.pop(get_webhook_secret, None)

    @pytest.mark.asyncio
    async def test_missing_signature(self, client, sample_vendor_entry):
        response = await client.post("/api/webhook/sales/batch", json=[sample_vendor_entry])
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_wrong_signature(self, client, sample_vendor_entry):
        response = await client.post(
            "/api/webhook/sales/batch",
            json=[sample_vendor_entry],
            headers={"X-Webhook-Signature": "0" * 64},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_valid_signature(self, client, catalog, sample_vendor_entry):
        body = json.dumps([sample_vendor_entry]).encode("utf-8")
        signature = hmac.new(b"s3cret", body, hashlib.sha256).hexdigest()

        response = await client.post(
            "/api/webhook/sales/batch",
            content=body,
            headers={"Content-Type": "application/json", "X-Webhook-Signature": signature},
        )
        assert response.status_code == 200
        assert response.json()["totalVendors"] == 1


@pytest.mark.asyncio
async def test_single_sale_webhook(client, catalog, session_factory):
    response = await client.post("/api/webhook/sales", json={
        "productId": 5,
        "buyerName": "Leo",
        "buyerEmail": "leo@x.com",
        "salePrice": "59,90",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["authorId"] == "A1"
    assert data["salePrice"] == 59.9
    assert data["commission"] == 8.99
    assert data["authorEarnings"] == 50.91
    assert data["vendorOrderLabel"] == "#001"
    assert await _count(session_factory, Order) == 0


@pytest.mark.asyncio
async def test_single_sale_webhook_validation(client, catalog):
    response = await client.post("/api/webhook/sales", json={"productId": 5, "buyerName": "Leo"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_single_sale_webhook_unknown_product(client, catalog):
    response = await client.post("/api/webhook/sales", json={
        "productId": 404, "buyerName": "Leo", "buyerEmail": "leo@x.com", "salePrice": 10,
    })
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_product_status_webhook(client, make_user, make_product, session_factory):
    await make_user("A1")
    product = await make_product("A1", status=ProductStatus.PENDING)

    response = await client.patch(
        f"/api/webhook/products/{product.id}/status",
        json={"status": "published", "publicUrl": "https://loja.example.com/p/1"},
    )

    assert response.status_code == 200
    assert response.json()["previousStatus"] == "pending"
    assert response.json()["status"] == "published"
    async with session_factory() as session:
        stored = await session.get(Product, product.id)
        assert stored.status == ProductStatus.PUBLISHED
        assert stored.public_url == "https://loja.example.com/p/1"


@pytest.mark.asyncio
async def test_product_status_webhook_rejects_bad_transition(client, make_user, make_product):
    await make_user("A1")
    product = await make_product("A1", status=ProductStatus.PUBLISHED)

    response = await client.patch(f"/api/webhook/products/{product.id}/status", json={"status": "rejected"})

    assert response.status_code == 409
    assert response.json()["currentStatus"] == "published"


@pytest.mark.asyncio
async def test_product_status_webhook_outside_vocabulary(client, make_user, make_product):
    await make_user("A1")
    product = await make_product("A1", status=ProductStatus.PENDING)

    response = await client.patch(f"/api/webhook/products/{product.id}/status", json={"status": "approved"})
    assert response.status_code == 400

    response = await client.patch(f"/api/webhook/products/{product.id}/status", json={"status": "sold"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_product_status_webhook_unknown_product(client):
    response = await client.patch("/api/webhook/products/404/status", json={"status": "published"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_order_status_update(client, catalog, sample_vendor_entry, session_factory):
    await client.post("/api/webhook/sales/batch", json=[sample_vendor_entry])

    response = await client.patch("/api/orders/O1/status", json={"status_pagamento": "approved", "status_envio": "shipped"})

    assert response.status_code == 200
    order = response.json()["order"]
    assert order["status_pagamento"] == "approved"
    assert order["status_envio"] == "shipped"
    async with session_factory() as session:
        sale = (await session.execute(select(Sale))).scalar_one()
        assert sale.payment_status == "aprovado"
        assert sale.sale_price == Decimal("100.00")


@pytest.mark.asyncio
async def test_order_status_update_needs_fields(client):
    response = await client.patch("/api/orders/O1/status", json={})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_order_status_update_unknown_order(client):
    response = await client.patch("/api/orders/NOPE/status", json={"status": "completed"})
    assert response.status_code == 404
