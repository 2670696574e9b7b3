import pytest

from caffio.models import OrderStatus


async def place_order(client, customer_id, cafe_id, items, **extra):
    return await client.post(
        "/orders",
        json={"customerId": customer_id, "cafeId": cafe_id, "items": items, **extra},
    )


@pytest.fixture
async def order(client, customer, cafe_with_menu):
    response = await place_order(
        client,
        customer["id"],
        cafe_with_menu.cafe_id,
        [
            {"menuItemId": cafe_with_menu.flat_white_id, "quantity": 2},
            {"menuItemId": cafe_with_menu.banana_bread_id, "quantity": 1},
        ],
    )
    assert response.status_code == 201
    return response.json()


async def test_order_total_is_sum_of_snapshot_lines(order, customer, cafe_with_menu):
    assert order["total"] == pytest.approx(17.40)
    assert order["status"] == "pending"
    assert order["orderType"] == "DELIVERY"
    assert order["customerId"] == customer["id"]
    assert order["cafe"]["id"] == cafe_with_menu.cafe_id

    lines = {line["name"]: line for line in order["items"]}
    assert lines["Flat White"]["price"] == pytest.approx(5.30)
    assert lines["Flat White"]["quantity"] == 2
    assert lines["Banana Bread"]["price"] == pytest.approx(6.80)


async def test_order_type_and_details_are_stored(client, customer, cafe_with_menu):
    response = await place_order(
        client,
        customer["id"],
        cafe_with_menu.cafe_id,
        [{"menuItemId": cafe_with_menu.flat_white_id, "quantity": 1}],
        orderType="TAKE_AWAY",
        notes="Extra hot",
    )

    assert response.status_code == 201
    assert response.json()["orderType"] == "TAKE_AWAY"
    assert response.json()["notes"] == "Extra hot"


async def test_large_quantity_total(client, customer, cafe_with_menu):
    response = await place_order(
        client,
        customer["id"],
        cafe_with_menu.cafe_id,
        [
            {"menuItemId": cafe_with_menu.flat_white_id, "quantity": 100},
            {"menuItemId": cafe_with_menu.banana_bread_id, "quantity": 250},
        ],
    )

    assert response.status_code == 201
    assert response.json()["total"] == pytest.approx(2230.00)
    assert sorted(line["quantity"] for line in response.json()["items"]) == [100, 250]


async def test_unknown_menu_item_creates_nothing(client, customer, cafe_with_menu):
    response = await place_order(
        client,
        customer["id"],
        cafe_with_menu.cafe_id,
        [
            {"menuItemId": cafe_with_menu.flat_white_id, "quantity": 1},
            {"menuItemId": 9999, "quantity": 1},
        ],
    )

    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"

    listed = await client.get("/orders", params={"customerId": customer["id"]})
    assert listed.json() == []


async def test_unknown_cafe_or_customer_is_rejected(client, customer, cafe_with_menu):
    line = [{"menuItemId": cafe_with_menu.flat_white_id, "quantity": 1}]

    assert (await place_order(client, customer["id"], 9999, line)).status_code == 404
    assert (await place_order(client, 9999, cafe_with_menu.cafe_id, line)).status_code == 404


@pytest.mark.parametrize(
    "items",
    [
        [],
        [{"menuItemId": 1, "quantity": 0}],
        [{"menuItemId": 1, "quantity": -1}],
    ],
)
async def test_malformed_order_is_invalid_argument(client, customer, cafe_with_menu, items):
    response = await place_order(client, customer["id"], cafe_with_menu.cafe_id, items)

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidArgument"


async def test_total_survives_menu_price_edit(client, order, customer, cafe_with_menu):
    response = await client.put(
        f"/menus/items/{cafe_with_menu.flat_white_id}", json={"price": 9.99}
    )
    assert response.status_code == 200

    stored = (await client.get(f"/orders/{order['id']}")).json()
    assert stored["total"] == pytest.approx(17.40)
    assert sorted(line["price"] for line in stored["items"]) == pytest.approx([5.30, 6.80])

    newer = await place_order(
        client,
        customer["id"],
        cafe_with_menu.cafe_id,
        [{"menuItemId": cafe_with_menu.flat_white_id, "quantity": 1}],
    )
    assert newer.json()["total"] == pytest.approx(9.99)


async def test_deleting_menu_item_keeps_order_line(client, order, cafe_with_menu):
    response = await client.delete(f"/menus/items/{cafe_with_menu.banana_bread_id}")
    assert response.status_code == 200

    stored = (await client.get(f"/orders/{order['id']}")).json()
    banana = next(line for line in stored["items"] if line["name"] == "Banana Bread")
    assert banana["menuItemId"] is None
    assert banana["price"] == pytest.approx(6.80)
    assert stored["total"] == pytest.approx(17.40)


async def test_status_update(client, order):
    response = await client.put(f"/orders/{order['id']}/status", json={"status": "ready"})

    assert response.status_code == 200
    assert response.json()["status"] == "ready"
    assert (await client.get(f"/orders/{order['id']}")).json()["status"] == "ready"


@pytest.mark.parametrize("status", [s.value for s in OrderStatus])
async def test_any_status_is_accepted_from_delivered(client, order, status):
    await client.put(f"/orders/{order['id']}/status", json={"status": "delivered"})

    response = await client.put(f"/orders/{order['id']}/status", json={"status": status})

    assert response.status_code == 200
    assert response.json()["status"] == status


async def test_invalid_status_is_rejected(client, order):
    response = await client.put(f"/orders/{order['id']}/status", json={"status": "lost"})

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidArgument"
    assert (await client.get(f"/orders/{order['id']}")).json()["status"] == "pending"


async def test_status_update_unknown_order(client):
    response = await client.put("/orders/9999/status", json={"status": "ready"})

    assert response.status_code == 404


async def test_list_orders_newest_first(client, customer, cafe_with_menu):
    ids = []
    for _ in range(3):
        response = await place_order(
            client,
            customer["id"],
            cafe_with_menu.cafe_id,
            [{"menuItemId": cafe_with_menu.flat_white_id, "quantity": 1}],
        )
        ids.append(response.json()["id"])

    by_customer = await client.get("/orders", params={"customerId": customer["id"]})
    by_cafe = await client.get("/orders", params={"cafeId": cafe_with_menu.cafe_id})

    assert [o["id"] for o in by_customer.json()] == list(reversed(ids))
    assert [o["id"] for o in by_cafe.json()] == list(reversed(ids))


async def test_list_orders_without_filter_is_empty(client, order):
    response = await client.get("/orders")

    assert response.status_code == 200
    assert response.json() == []


async def test_get_unknown_order(client):
    response = await client.get("/orders/9999")

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "error": "NotFound",
        "detail": "Order 9999 not found",
    }
