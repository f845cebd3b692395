# tests/test_routes/test_product_routes.py
from datetime import timedelta

import pytest

from upleer.core.enums import ProductStatus

NEW_PRODUCT = {
    "title": "Apostila de Química",
    "author": "Ana Souza",
    "genre": "educação",
    "pdfUrl": "https://storage.example.com/quimica.pdf",
    "pageCount": 50,
    "authorEarnings": 20,
}


@pytest.mark.asyncio
async def test_requires_session(client):
    response = await client.get("/api/products")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_rejects_tampered_cookie(client, make_user, login):
    await make_user("A1")
    cookies = await login("A1")
    client.cookies.set("upleer.sid", cookies["upleer.sid"] + "x")

    response = await client.get("/api/products")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_rejects_expired_session(client, make_user, authenticate):
    await make_user("A1")
    await authenticate("A1", expires_in=timedelta(seconds=-5))

    response = await client.get("/api/products")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_product_prices_from_author_earnings(client, make_user, authenticate):
    await make_user("A1")
    await authenticate("A1")

    response = await client.post("/api/products", json=NEW_PRODUCT)

    assert response.status_code == 201
    data = response.json()
    assert data["authorId"] == "A1"
    assert data["status"] == "pending"
    assert data["authorEarnings"] == 20.0
    assert data["platformCommission"] == 20.9
    assert data["salePrice"] == 40.9
    assert data["baseCost"] == 14.9
    assert data["commissionRate"] == 30.0


@pytest.mark.asyncio
async def test_create_product_validation(client, make_user, authenticate):
    await make_user("A1")
    await authenticate("A1")

    response = await client.post("/api/products", json={**NEW_PRODUCT, "authorEarnings": -1})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_pricing_preview(client, make_user, authenticate):
    await make_user("A1")
    await authenticate("A1")

    response = await client.post("/api/products/pricing", json={"pageCount": 50, "authorEarnings": "20.00"})

    assert response.status_code == 200
    assert response.json() == {
        "pageCount": 50,
        "authorEarnings": 20.0,
        "fixedFee": 9.9,
        "printingCostPerPage": 0.1,
        "commissionRate": 30.0,
        "printingCost": 5.0,
        "commissionAmount": 6.0,
        "platformCommission": 20.9,
        "salePrice": 40.9,
    }


@pytest.mark.asyncio
async def test_list_only_own_products(client, make_user, make_product, authenticate):
    await make_user("A1")
    await make_user("A2")
    mine = await make_product("A1", title="Minha")
    await make_product("A2", title="De outro")
    await authenticate("A1")

    response = await client.get("/api/products")

    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [mine.id]


@pytest.mark.asyncio
async def test_other_authors_product_is_forbidden(client, make_user, make_product, authenticate):
    await make_user("A1")
    await make_user("A2")
    theirs = await make_product("A2")
    await authenticate("A1")

    assert (await client.get(f"/api/products/{theirs.id}")).status_code == 403
    assert (await client.patch(f"/api/products/{theirs.id}", json={"title": "x"})).status_code == 403
    assert (await client.get("/api/products/9999")).status_code == 404


@pytest.mark.asyncio
async def test_update_reprices(client, make_user, make_product, authenticate):
    await make_user("A1")
    product = await make_product("A1", status=ProductStatus.PENDING)
    await authenticate("A1")

    response = await client.patch(f"/api/products/{product.id}", json={"title": "Nova", "authorEarnings": 30})

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Nova"
    assert data["authorEarnings"] == 30.0
    assert data["platformCommission"] == 23.9
    assert data["salePrice"] == 53.9
