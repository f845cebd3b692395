# tests/test_routes/test_dashboard_routes.py
import pytest

from upleer.core.enums import ProductStatus, UserRole


@pytest.fixture
async def sold(client, make_user, make_product, sample_vendor_entry):
    """A1 has one published product and one sale of two copies, A2 has nothing."""
    await make_user("A1")
    await make_user("A2")
    await make_product("A1", product_id=5, title="Apostila X")
    await make_product("A1", title="Em revisão", status=ProductStatus.PENDING)
    response = await client.post("/api/webhook/sales/batch", json=[sample_vendor_entry])
    assert response.status_code == 200
    return response.json()["vendors"][0]["saleId"]


@pytest.mark.asyncio
async def test_list_sales(client, sold, authenticate):
    await authenticate("A1")

    response = await client.get("/api/sales")

    assert response.status_code == 200
    [sale] = response.json()
    assert sale["id"] == sold
    assert sale["orderId"] == "O1"
    assert sale["productTitle"] == "Apostila X"
    assert sale["vendorOrderNumber"] == 1
    assert sale["salePrice"] == 100.0
    assert sale["commission"] == 15.0
    assert sale["authorEarnings"] == 85.0


@pytest.mark.asyncio
async def test_other_author_sees_no_sales(client, sold, authenticate):
    await authenticate("A2")

    assert (await client.get("/api/sales")).json() == []
    assert (await client.get(f"/api/sales/{sold}")).status_code == 403


@pytest.mark.asyncio
async def test_sale_detail(client, sold, authenticate):
    await authenticate("A1")

    response = await client.get(f"/api/sales/{sold}")

    assert response.status_code == 200
    data = response.json()
    assert data["order"]["id"] == "O1"
    assert data["order"]["clienteNome"] == "Ana"
    assert [(i["productId"], i["quantity"], i["price"]) for i in data["items"]] == [("5", 2, 50.0)]


@pytest.mark.asyncio
async def test_admin_can_read_any_sale(client, sold, make_user, authenticate):
    await make_user("ADM", role=UserRole.ADMIN.value)
    await authenticate("ADM")

    response = await client.get(f"/api/sales/{sold}")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_missing_sale(client, sold, authenticate):
    await authenticate("A1")
    assert (await client.get("/api/sales/9999")).status_code == 404


@pytest.mark.asyncio
async def test_dashboard_stats(client, sold, authenticate):
    await authenticate("A1")

    response = await client.get("/api/analytics/stats")

    assert response.status_code == 200
    assert response.json() == {
        "totalSales": 1,
        "totalRevenue": 100.0,
        "totalEarnings": 85.0,
        "activeProducts": 1,
        "pendingProducts": 1,
    }


@pytest.mark.asyncio
async def test_sales_data(client, sold, authenticate):
    await authenticate("A1")

    response = await client.get("/api/analytics/sales-data", params={"months": 3})

    assert response.status_code == 200
    buckets = response.json()
    assert len(buckets) == 3
    assert [b["sales"] for b in buckets] == [0, 0, 1]
    assert buckets[-1]["revenue"] == 85.0


@pytest.mark.asyncio
async def test_sales_data_month_range(client, sold, authenticate):
    await authenticate("A1")

    assert (await client.get("/api/analytics/sales-data", params={"months": 0})).status_code == 422
    assert (await client.get("/api/analytics/sales-data", params={"months": 37})).status_code == 422
