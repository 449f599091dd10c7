"""Tests for order items and the kitchen queue."""

import pytest
from httpx import AsyncClient


async def _open(client: AsyncClient, headers, table: int) -> int:
    resp = await client.post("/api/orders", json={"table_number": table}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["order_id"]


async def _add(client: AsyncClient, headers, order_id: int, item_id: int, quantity: int = 1, **extra):
    return await client.post(
        f"/api/orders/{order_id}/items",
        json={"item_id": item_id, "quantity": quantity, **extra},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_add_item_and_list_for_order(async_client: AsyncClient, make_item, customer_headers):
    dish = await make_item("Dumplings", 6.0)
    order_id = await _open(async_client, customer_headers, 10)

    resp = await _add(async_client, customer_headers, order_id, dish.id, 3, custom_instructions="no chili")
    assert resp.status_code == 201

    resp = await async_client.get(f"/api/orders/{order_id}/items", headers=customer_headers)
    assert resp.status_code == 200
    [line] = resp.json()
    assert line["item_id"] == dish.id
    assert line["quantity"] == 3
    assert line["custom_instructions"] == "no chili"
    assert line["status"] == "preparing"


@pytest.mark.asyncio
@pytest.mark.parametrize("quantity", [0, -1])
async def test_quantity_must_be_positive(async_client: AsyncClient, make_item, customer_headers, quantity):
    dish = await make_item("Rice", 2.0)
    order_id = await _open(async_client, customer_headers, 11)
    resp = await _add(async_client, customer_headers, order_id, dish.id, quantity)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_unknown_menu_item(async_client: AsyncClient, customer_headers):
    order_id = await _open(async_client, customer_headers, 12)
    resp = await _add(async_client, customer_headers, order_id, 999)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_add_to_foreign_order_is_not_found(
    async_client: AsyncClient, make_item, customer_headers, other_headers
):
    dish = await make_item("Bao", 4.0)
    order_id = await _open(async_client, customer_headers, 13)

    resp = await _add(async_client, other_headers, order_id, dish.id)
    assert resp.status_code == 404
    resp = await _add(async_client, customer_headers, 9999, dish.id)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_items_for_foreign_order_is_not_found(
    async_client: AsyncClient, make_item, customer_headers, other_headers, admin_headers
):
    dish = await make_item("Gyoza", 5.0)
    order_id = await _open(async_client, customer_headers, 14)
    await _add(async_client, customer_headers, order_id, dish.id)

    resp = await async_client.get(f"/api/orders/{order_id}/items", headers=other_headers)
    assert resp.status_code == 404
    resp = await async_client.get(f"/api/orders/{order_id}/items", headers=admin_headers)
    assert len(resp.json()) == 1


@pytest.mark.asyncio
async def test_kitchen_queue_and_status_change(
    async_client: AsyncClient, make_item, customer_headers, other_headers, chef_headers
):
    dish = await make_item("Pho", 11.0)
    first = await _open(async_client, customer_headers, 20)
    second = await _open(async_client, other_headers, 21)
    a = (await _add(async_client, customer_headers, first, dish.id)).json()["order_item_id"]
    b = (await _add(async_client, other_headers, second, dish.id)).json()["order_item_id"]

    # Kitchen sees every customer's lines, oldest first
    queue = (await async_client.get("/api/orders/items", headers=chef_headers)).json()
    assert [line["id"] for line in queue] == [a, b]

    resp = await async_client.patch(
        f"/api/orders/items/{a}", json={"status": "completed"}, headers=chef_headers
    )
    assert resp.status_code == 200

    queue = (await async_client.get("/api/orders/items", headers=chef_headers)).json()
    assert [line["id"] for line in queue] == [b]

    done = (
        await async_client.get("/api/orders/items", params={"status": "completed"}, headers=chef_headers)
    ).json()
    assert [line["id"] for line in done] == [a]


@pytest.mark.asyncio
async def test_status_change_validation(async_client: AsyncClient, make_item, customer_headers, chef_headers):
    dish = await make_item("Udon", 9.0)
    order_id = await _open(async_client, customer_headers, 22)
    line = (await _add(async_client, customer_headers, order_id, dish.id)).json()["order_item_id"]

    resp = await async_client.patch(f"/api/orders/items/{line}", json={"status": "burnt"}, headers=chef_headers)
    assert resp.status_code == 400

    resp = await async_client.patch("/api/orders/items/999", json={"status": "completed"}, headers=chef_headers)
    assert resp.status_code == 404

    resp = await async_client.get("/api/orders/items", params={"status": "burnt"}, headers=chef_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_customer_cannot_change_item_status(
    async_client: AsyncClient, make_item, customer_headers
):
    dish = await make_item("Miso", 3.0)
    order_id = await _open(async_client, customer_headers, 23)
    line = (await _add(async_client, customer_headers, order_id, dish.id)).json()["order_item_id"]

    resp = await async_client.patch(
        f"/api/orders/items/{line}", json={"status": "completed"}, headers=customer_headers
    )
    assert resp.status_code == 403
