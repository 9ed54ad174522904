import pytest
import pytest_asyncio
from unittest.mock import AsyncMock

from httpx import ASGITransport, AsyncClient

from procurement.main import create_app
from procurement.models.purchase_order import LineItem, PurchaseOrder
from procurement.services.auth import ACCESS, create_token


@pytest.fixture
def app(test_settings, mock_db):
    return create_app(test_settings, database=mock_db)


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers(mock_db, user, test_settings):
    mock_db.users.get = AsyncMock(return_value=user)
    token = create_token(user.id, ACCESS, test_settings)
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_protected_route_requires_token(client, mock_db):
    response = await client.get("/api/suppliers/")
    assert response.status_code == 401
    assert response.json() == {"message": "Authentication required"}
    mock_db.suppliers.list.assert_not_called()


@pytest.mark.asyncio
async def test_invalid_token_rejected(client):
    response = await client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert "message" in response.json()


@pytest.mark.asyncio
async def test_me_hides_password_hash(client, auth_headers, user):
    response = await client.get("/api/auth/me", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["_id"] == user.id
    assert body["username"] == "alice"
    assert "passwordHash" not in body


@pytest.mark.asyncio
async def test_register_returns_token_pair(client, mock_db):
    mock_db.users.get_by_username = AsyncMock(return_value=None)
    mock_db.users.get_by_email = AsyncMock(return_value=None)

    async def _insert(user):
        user.id = "65f0000000000000000000c1"
        return user

    mock_db.users.create = AsyncMock(side_effect=_insert)

    response = await client.post("/api/auth/register", json={
        "username": "bob", "email": "bob@example.com", "password": "long-enough",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["_id"] == "65f0000000000000000000c1"
    assert body["username"] == "bob"
    assert body["token"] and body["refreshToken"]


@pytest.mark.asyncio
async def test_login_is_rate_limited(client, mock_db):
    mock_db.users.get_by_username = AsyncMock(return_value=None)
    credentials = {"username": "alice", "password": "wrong-password"}

    statuses = [(await client.post("/api/auth/login", json=credentials)).status_code for _ in range(5)]
    blocked = await client.post("/api/auth/login", json=credentials)

    assert statuses == [401] * 5
    assert blocked.status_code == 429
    assert blocked.json()["message"].startswith("Too many login attempts")
    assert int(blocked.headers["Retry-After"]) > 0
    assert mock_db.users.get_by_username.await_count == 5


@pytest.mark.asyncio
async def test_create_purchase_order(client, mock_db, auth_headers, supplier, make_item):
    paper = make_item(supplier.id, item_no="ITEM000001", unit_price=10.0)
    pens = make_item(supplier.id, item_no="ITEM000002", unit_price=5.0)
    mock_db.suppliers.get = AsyncMock(return_value=supplier)
    mock_db.items.get_many = AsyncMock(return_value={paper.id: paper, pens.id: pens})
    mock_db.purchase_orders.latest = AsyncMock(return_value=None)

    async def _insert(order):
        order.id = "65f0000000000000000000a1"
        return order

    mock_db.purchase_orders.create = AsyncMock(side_effect=_insert)

    response = await client.post("/api/purchase-order/add", headers=auth_headers, json={
        "supplierId": supplier.id,
        "items": [
            {"itemId": paper.id, "orderQty": 3, "discount": 2},
            {"itemId": pens.id, "orderQty": 4, "itemAmount": 999},
        ],
    })

    assert response.status_code == 200
    body = response.json()
    assert body["_id"] == "65f0000000000000000000a1"
    assert body["orderNo"] == "PO000001"
    assert body["itemTotal"] == 50.0
    assert body["discount"] == 2.0
    assert body["netAmount"] == 48.0
    assert body["totalItems"] == 7
    assert body["items"][1]["itemAmount"] == 20.0


@pytest.mark.asyncio
async def test_create_purchase_order_requires_lines(client, mock_db, auth_headers):
    response = await client.post("/api/purchase-order/add", headers=auth_headers, json={
        "supplierId": "65f0000000000000000000ff", "items": [],
    })

    assert response.status_code == 400
    assert "message" in response.json()
    mock_db.purchase_orders.create.assert_not_called()


@pytest.mark.asyncio
async def test_create_purchase_order_excessive_discount(client, mock_db, auth_headers, supplier, make_item):
    paper = make_item(supplier.id, unit_price=10.0)
    mock_db.suppliers.get = AsyncMock(return_value=supplier)
    mock_db.items.get_many = AsyncMock(return_value={paper.id: paper})

    response = await client.post("/api/purchase-order/add", headers=auth_headers, json={
        "supplierId": supplier.id,
        "items": [{"itemId": paper.id, "orderQty": 1, "discount": 11}],
    })

    assert response.status_code == 400
    assert response.json() == {"message": "Discount cannot exceed the item amount"}


@pytest.mark.asyncio
async def test_unknown_purchase_order(client, mock_db, auth_headers):
    mock_db.purchase_orders.get = AsyncMock(return_value=None)

    response = await client.get("/api/purchase-order/not-a-valid-id", headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"message": "Purchase order not found"}


@pytest.mark.asyncio
async def test_delete_purchase_order(client, mock_db, auth_headers, supplier):
    removed = PurchaseOrder(
        id="65f0000000000000000000a1", order_no="PO000001",
        supplier=supplier.id, supplier_display_name=supplier.supplier_name,
    )
    mock_db.purchase_orders.delete = AsyncMock(return_value=removed)

    response = await client.delete(f"/api/purchase-order/{removed.id}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "Purchase order deleted successfully"}


@pytest.mark.asyncio
async def test_total_route_is_not_an_order_id(client, mock_db, auth_headers):
    mock_db.purchase_orders.totals = AsyncMock(return_value={"totalAmount": 148.5, "count": 3})

    response = await client.get("/api/purchase-order/total", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"totalAmount": 148.5, "count": 3}
    mock_db.purchase_orders.get.assert_not_called()


@pytest.mark.asyncio
async def test_list_purchase_orders_is_public(client, mock_db, supplier, make_item):
    paper = make_item(supplier.id)
    order = PurchaseOrder(
        id="65f0000000000000000000a1", order_no="PO000001",
        supplier=supplier.id, supplier_display_name=supplier.supplier_name,
        items=[LineItem(item=paper.id, order_qty=2, unit_price=10.0, item_amount=20.0, net_amount=20.0)],
        item_total=20.0, net_amount=20.0,
    )
    mock_db.purchase_orders.list = AsyncMock(return_value=[order])
    mock_db.suppliers.get_many = AsyncMock(return_value={supplier.id: supplier})
    mock_db.items.get_many = AsyncMock(return_value={paper.id: paper})

    response = await client.get("/api/purchase-order/")

    assert response.status_code == 200
    [body] = response.json()
    assert body["supplier"]["supplierNo"] == "SUP-000001"
    assert body["items"][0]["item"]["itemNo"] == "ITEM000001"
    assert body["items"][0]["itemId"] == paper.id


@pytest.mark.asyncio
async def test_order_pdf_export(client, mock_db, auth_headers, supplier):
    order = PurchaseOrder(
        id="65f0000000000000000000a1", order_no="PO000001",
        supplier=supplier.id, supplier_display_name=supplier.supplier_name,
    )
    mock_db.purchase_orders.get = AsyncMock(return_value=order)
    mock_db.suppliers.get_many = AsyncMock(return_value={supplier.id: supplier})
    mock_db.items.get_many = AsyncMock(return_value={})

    response = await client.get(f"/api/purchase-order/{order.id}/pdf", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_item_listing_is_public_and_paged(client, mock_db, make_item):
    mock_db.items.list = AsyncMock(return_value=[make_item()])
    mock_db.items.count = AsyncMock(return_value=11)

    response = await client.get("/api/items/", params={"page": 2, "limit": 5, "minPrice": 1})

    assert response.status_code == 200
    body = response.json()
    assert body["currentPage"] == 2
    assert body["totalPages"] == 3
    assert body["totalItems"] == 11
    assert body["data"][0]["itemNo"] == "ITEM000001"
    assert mock_db.items.list.call_args.kwargs["skip"] == 5


@pytest.mark.asyncio
async def test_item_listing_rejects_bad_sort(client):
    response = await client.get("/api/items/", params={"sort": "bogus"})

    assert response.status_code == 400
    assert response.json() == {"message": "Cannot sort by 'bogus'"}


@pytest.mark.asyncio
async def test_create_supplier_validation_error(client, auth_headers):
    response = await client.post("/api/suppliers/", headers=auth_headers, json={
        "supplierName": "Acme",
        "address": "1 Road",
        "country": "United States",
        "taxNo": "1",
        "mobileNo": "abc",
        "email": "acme@example.com",
    })

    assert response.status_code == 400
    body = response.json()
    assert body["message"].startswith("mobileNo")
    assert body["errors"]


@pytest.mark.asyncio
async def test_unhandled_error_is_500(test_settings, mock_db, auth_headers):
    mock_db.purchase_orders.totals = AsyncMock(side_effect=RuntimeError("connection lost"))
    transport = ASGITransport(app=create_app(test_settings, database=mock_db), raise_app_exceptions=False)

    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/api/purchase-order/total", headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}
