# tests/test_routes/test_admin_routes.py
import httpx
import pytest
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.core.enums import ProductStatus, UserRole
from upleer.dependencies import get_db
from upleer.main import app
from upleer.models import ProdutoNuvemshopMapping
from upleer.routes.integrations import get_endpoint_tester
from upleer.services.endpoint_tester import EndpointTester


@pytest.fixture
async def admin(client, make_user, authenticate):
    await make_user("ADM", role=UserRole.ADMIN.value)
    await authenticate("ADM")
    return client


def _tester_with(handler):
    def _override(db: AsyncSession = Depends(get_db)):
        return EndpointTester(db, transport=httpx.MockTransport(handler))
    return _override


@pytest.mark.asyncio
async def test_authors_are_not_admins(client, make_user, authenticate):
    await make_user("A1")
    await authenticate("A1")

    assert (await client.get("/api/admin/products")).status_code == 403
    assert (await client.get("/api/integrations")).status_code == 403


@pytest.mark.asyncio
async def test_admin_requires_session(client):
    assert (await client.get("/api/admin/users")).status_code == 401


@pytest.mark.asyncio
async def test_list_products_by_status(admin, make_user, make_product):
    await make_user("A1")
    await make_product("A1", status=ProductStatus.PENDING)
    await make_product("A1", status=ProductStatus.PENDING)
    await make_product("A1", status=ProductStatus.PUBLISHED)

    response = await admin.get("/api/admin/products", params={"status": "pending", "page_size": 1})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["totalPages"] == 2
    assert data["hasNext"] is True
    assert [p["status"] for p in data["items"]] == ["pending"]


@pytest.mark.asyncio
async def test_change_product_status(admin, make_user, make_product):
    await make_user("A1")
    product = await make_product("A1", status=ProductStatus.PENDING)

    response = await admin.patch(f"/api/admin/products/{product.id}/status", json={"status": "Approved"})
    assert response.status_code == 200
    assert response.json()["status"] == "approved"

    response = await admin.patch(f"/api/admin/products/{product.id}/status", json={"status": "approved"})
    assert response.status_code == 200
    assert response.json()["changed"] is False

    response = await admin.patch(f"/api/admin/products/{product.id}/status", json={"status": "pending"})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_list_users(admin, make_user):
    await make_user("A1")

    response = await admin.get("/api/admin/users")

    assert response.status_code == 200
    assert sorted(u["id"] for u in response.json()) == ["A1", "ADM"]


@pytest.mark.asyncio
async def test_integration_lifecycle(admin):
    response = await admin.post("/api/integrations", json={
        "name": "Correios",
        "baseUrl": "https://api.example.com/",
        "authType": "bearer",
        "authConfig": {"token": "t-1"},
    })
    assert response.status_code == 201
    integration = response.json()
    assert integration["baseUrl"] == "https://api.example.com"
    assert "authConfig" not in integration

    response = await admin.patch(f"/api/integrations/{integration['id']}", json={"name": "Correios v2"})
    assert response.json()["name"] == "Correios v2"

    response = await admin.post(f"/api/integrations/{integration['id']}/endpoints", json={
        "name": "Rastreio", "endpoint": "/track", "method": "get",
    })
    assert response.status_code == 201
    endpoint = response.json()
    assert endpoint["method"] == "GET"

    listed = await admin.get(f"/api/integrations/{integration['id']}/endpoints")
    assert [e["id"] for e in listed.json()] == [endpoint["id"]]

    response = await admin.delete(f"/api/integrations/{integration['id']}")
    assert response.status_code == 204
    assert (await admin.get(f"/api/integrations/{integration['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_endpoint_test_route(admin):
    integration = (await admin.post("/api/integrations", json={
        "name": "Loja", "baseUrl": "https://loja.example.com", "authType": "api_key",
        "authConfig": {"apiKey": "k"},
    })).json()

    def handler(request):
        return httpx.Response(200, json={"pong": request.headers["x-api-key"]})

    app.dependency_overrides[get_endpoint_tester] = _tester_with(handler)

    response = await admin.post(f"/api/integrations/{integration['id']}/test", json={"method": "GET", "path": "/ping"})

    assert response.status_code == 200
    assert response.json()["body"] == {"pong": "k"}

    logs = (await admin.get("/api/integrations/logs")).json()
    assert len(logs) == 1
    assert logs[0]["url"] == "https://loja.example.com/ping"
    assert logs[0]["responseStatus"] == 200


@pytest.mark.asyncio
async def test_endpoint_test_route_upstream_failure(admin):
    integration = (await admin.post("/api/integrations", json={
        "name": "Loja", "baseUrl": "https://loja.example.com", "authType": "bearer",
    })).json()

    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    app.dependency_overrides[get_endpoint_tester] = _tester_with(handler)

    response = await admin.post(f"/api/integrations/{integration['id']}/test", json={"method": "GET"})

    assert response.status_code == 502
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_endpoint_test_route_unknown_integration(admin):
    response = await admin.post("/api/integrations/404/test", json={"method": "GET"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_store_mappings_keep_column_names(admin, session_factory):
    async with session_factory() as session:
        session.add_all([
            ProdutoNuvemshopMapping(
                id_produto_interno="5", id_autor="A1",
                produto_id_nuvemshop="NS-10", variant_id_nuvemshop="V-1", sku="UPL-5",
            ),
            ProdutoNuvemshopMapping(
                id_produto_interno="6", id_autor="A2",
                produto_id_nuvemshop="NS-11", variant_id_nuvemshop="V-2",
            ),
        ])
        await session.commit()

    response = await admin.get("/api/admin/nuvemshop-mappings", params={"product_id": 5})

    assert response.status_code == 200
    [mapping] = response.json()
    assert mapping["id_produto_interno"] == "5"
    assert mapping["produto_id_nuvemshop"] == "NS-10"
    assert mapping["variant_id_nuvemshop"] == "V-1"
