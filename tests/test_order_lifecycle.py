import asyncio

import pytest

from services.order_service.models import utcnow
from services.order_service.repository import OrderRepository
from services.order_service.schemas import OrderStatusUpdate
from services.order_service.service import OrderService
from shared.config.database import AsyncSessionLocal
from shared.errors import AlreadyCancelledError, ConflictError

from conftest import RecordingNotifier, auth_headers, make_product, order_payload, stock_of


async def place(client, customer, *items) -> dict:
    response = await client.post("/api/orders/", json=order_payload(*items), headers=auth_headers(customer))
    assert response.status_code == 201
    return response.json()


async def set_status(order_id: int, status: str) -> None:
    async with AsyncSessionLocal() as session:
        await OrderService.update_status(
            session, order_id, OrderStatusUpdate(status=status), RecordingNotifier()
        )


async def test_cancel_restores_stock(client, db, customer):
    product = await make_product(db, stock=5)
    order = await place(client, customer, (product.id, 3))

    response = await client.post(
        f"/api/orders/{order['id']}/cancel",
        json={"reason": "changed my mind"},
        headers=auth_headers(customer),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "cancelled"
    assert body["cancelled_by"] == customer.id
    assert body["cancellation_reason"] == "changed my mind"
    assert body["cancelled_at"] is not None
    assert await stock_of(product.id) == 5


async def test_cancel_without_body(client, db, customer):
    product = await make_product(db, stock=5)
    order = await place(client, customer, (product.id, 1))

    response = await client.post(f"/api/orders/{order['id']}/cancel", headers=auth_headers(customer))

    assert response.status_code == 200
    assert response.json()["cancellation_reason"] is None


async def test_second_cancel_does_not_restore_twice(client, db, customer):
    product = await make_product(db, stock=5)
    order = await place(client, customer, (product.id, 3))
    headers = auth_headers(customer)

    await client.post(f"/api/orders/{order['id']}/cancel", headers=headers)
    again = await client.post(f"/api/orders/{order['id']}/cancel", headers=headers)

    assert again.status_code == 409
    assert again.json()["error"] == "already_cancelled"
    assert await stock_of(product.id) == 5


async def test_concurrent_cancels_restore_exactly_once(client, db, customer):
    product = await make_product(db, stock=5)
    order = await place(client, customer, (product.id, 3))

    async def cancel():
        async with AsyncSessionLocal() as session:
            try:
                await OrderService.cancel_order(session, order["id"], customer.id)
                return "cancelled"
            except AlreadyCancelledError:
                return "already"

    outcomes = await asyncio.gather(cancel(), cancel())

    assert sorted(outcomes) == ["already", "cancelled"]
    assert await stock_of(product.id) == 5


async def test_delivered_order_cannot_be_cancelled(client, db, customer):
    product = await make_product(db, stock=5)
    order = await place(client, customer, (product.id, 2))
    await set_status(order["id"], "delivered")

    response = await client.post(f"/api/orders/{order['id']}/cancel", headers=auth_headers(customer))

    assert response.status_code == 409
    assert response.json()["error"] == "terminal_state"
    assert await stock_of(product.id) == 3


async def test_shipped_order_can_still_be_cancelled(client, db, customer):
    product = await make_product(db, stock=5)
    order = await place(client, customer, (product.id, 2))
    await set_status(order["id"], "shipped")

    response = await client.post(f"/api/orders/{order['id']}/cancel", headers=auth_headers(customer))

    assert response.status_code == 200
    assert await stock_of(product.id) == 5


async def test_cancel_skips_products_deleted_since_placement(client, db, customer, admin):
    kept = await make_product(db, name="Kept", stock=5)
    gone = await make_product(db, name="Gone", stock=5)
    order = await place(client, customer, (kept.id, 2), (gone.id, 1))
    deleted = await client.delete(f"/api/products/{gone.id}", headers=auth_headers(admin))
    assert deleted.status_code == 200

    response = await client.post(f"/api/orders/{order['id']}/cancel", headers=auth_headers(customer))

    assert response.status_code == 200
    assert await stock_of(kept.id) == 5


async def test_only_buyer_or_admin_may_cancel(client, db, customer, other_customer, admin):
    product = await make_product(db, stock=5)
    order = await place(client, customer, (product.id, 1))

    stranger = await client.post(f"/api/orders/{order['id']}/cancel", headers=auth_headers(other_customer))
    assert stranger.status_code == 403
    assert await stock_of(product.id) == 4

    by_admin = await client.post(f"/api/orders/{order['id']}/cancel", headers=auth_headers(admin))
    assert by_admin.status_code == 200
    assert by_admin.json()["cancelled_by"] == admin.id


async def test_cancel_unknown_order(client, db, customer):
    response = await client.post("/api/orders/999/cancel", headers=auth_headers(customer))

    assert response.status_code == 404


async def test_status_moves_forward_and_notifies(client, db, customer, admin, notifier):
    product = await make_product(db, stock=5)
    order = await place(client, customer, (product.id, 1))
    headers = auth_headers(admin)

    shipped = await client.put(
        f"/api/orders/{order['id']}/status",
        json={"status": "shipped", "tracking_number": "1Z999"},
        headers=headers,
    )
    assert shipped.status_code == 200
    assert shipped.json()["status"] == "shipped"
    assert shipped.json()["tracking_number"] == "1Z999"

    backwards = await client.put(
        f"/api/orders/{order['id']}/status", json={"status": "processing"}, headers=headers
    )
    assert backwards.status_code == 422
    assert backwards.json()["error"] == "validation_error"

    assert ("order_status", "alice@shopper.io") in notifier.sent


async def test_status_update_rejects_cancelled_and_unknown_fields(client, db, customer, admin):
    product = await make_product(db, stock=5)
    order = await place(client, customer, (product.id, 1))
    headers = auth_headers(admin)

    smuggled = await client.put(
        f"/api/orders/{order['id']}/status", json={"total_amount": 0}, headers=headers
    )
    assert smuggled.status_code == 422

    cancel_via_status = await client.put(
        f"/api/orders/{order['id']}/status", json={"status": "cancelled"}, headers=headers
    )
    assert cancel_via_status.status_code == 422

    await client.post(f"/api/orders/{order['id']}/cancel", headers=headers)
    after_cancel = await client.put(
        f"/api/orders/{order['id']}/status", json={"status": "processing"}, headers=headers
    )
    assert after_cancel.status_code == 409
    assert after_cancel.json()["error"] == "terminal_state"


async def test_customers_cannot_update_status(client, db, customer):
    product = await make_product(db, stock=5)
    order = await place(client, customer, (product.id, 1))

    response = await client.put(
        f"/api/orders/{order['id']}/status", json={"status": "shipped"}, headers=auth_headers(customer)
    )

    assert response.status_code == 403


async def test_order_visibility(client, db, customer, other_customer, admin):
    product = await make_product(db, stock=10)
    mine = await place(client, customer, (product.id, 1))
    await place(client, other_customer, (product.id, 1))

    own_list = await client.get("/api/orders/", headers=auth_headers(customer))
    assert [o["id"] for o in own_list.json()["data"]] == [mine["id"]]
    assert own_list.json()["pagination"] == {"page": 1, "limit": 10, "total": 1, "pages": 1}

    admin_list = await client.get("/api/orders/", headers=auth_headers(admin))
    assert admin_list.json()["pagination"]["total"] == 2

    stranger = await client.get(f"/api/orders/{mine['id']}", headers=auth_headers(other_customer))
    assert stranger.status_code == 403


async def test_list_orders_filters_by_status(client, db, customer):
    product = await make_product(db, stock=10)
    first = await place(client, customer, (product.id, 1))
    await place(client, customer, (product.id, 1))
    headers = auth_headers(customer)
    await client.post(f"/api/orders/{first['id']}/cancel", headers=headers)

    response = await client.get("/api/orders/", params={"status": "cancelled"}, headers=headers)

    assert [o["id"] for o in response.json()["data"]] == [first["id"]]


async def test_delivered_order_rejects_status_change(client, db, customer, admin):
    product = await make_product(db, stock=5)
    order = await place(client, customer, (product.id, 1))
    await set_status(order["id"], "delivered")
    headers = auth_headers(admin)

    response = await client.put(f"/api/orders/{order['id']}/status", json={"status": "shipped"}, headers=headers)
    tracking = await client.put(
        f"/api/orders/{order['id']}/status", json={"tracking_number": "1Z000"}, headers=headers
    )

    assert response.status_code == 409
    assert response.json()["error"] == "terminal_state"
    assert response.json()["state"] == "delivered"
    assert tracking.status_code == 200
    assert tracking.json()["status"] == "delivered"


async def test_stale_status_update_is_a_conflict(client, db, customer, admin, monkeypatch):
    product = await make_product(db, stock=5)
    order = await place(client, customer, (product.id, 2))
    real_save = OrderRepository.save_order

    async def save_after_concurrent_cancel(session, stale_order):
        async with AsyncSessionLocal() as other:
            await OrderRepository.mark_cancelled(other, stale_order.id, "pending", admin.id, None, utcnow())
            await other.commit()
        return await real_save(session, stale_order)

    monkeypatch.setattr(OrderRepository, "save_order", staticmethod(save_after_concurrent_cancel))

    async with AsyncSessionLocal() as session:
        with pytest.raises(ConflictError):
            await OrderService.update_status(
                session, order["id"], OrderStatusUpdate(status="shipped"), RecordingNotifier()
            )

    async with AsyncSessionLocal() as session:
        stored = await OrderRepository.get_order(session, order["id"])
        assert stored.status == "cancelled"
