import pytest


async def test_create_menu_defaults_name(client, cafe_with_menu):
    response = await client.post("/menus", json={"cafeId": cafe_with_menu.cafe_id})

    assert response.status_code == 201
    assert response.json()["name"] == "Main"
    assert response.json()["isActive"] is True
    assert response.json()["items"] == []


async def test_create_menu_for_unknown_cafe(client):
    response = await client.post("/menus", json={"cafeId": 9999, "name": "Brunch"})

    assert response.status_code == 404


async def test_list_active_menus(client, cafe_with_menu):
    await client.post("/menus", json={"cafeId": cafe_with_menu.cafe_id, "name": "Brunch"})

    response = await client.get(f"/menus/{cafe_with_menu.cafe_id}")

    menus = response.json()
    assert [m["name"] for m in menus] == ["Main", "Brunch"]
    assert [i["name"] for i in menus[0]["items"]] == ["Flat White", "Banana Bread"]


async def test_create_menu_item(client, cafe_with_menu):
    response = await client.post(
        "/menus/items",
        json={
            "menuId": cafe_with_menu.menu_id,
            "name": "Cappuccino",
            "price": "5.50",
            "category": "Coffee",
            "customizations": {
                "size": {"options": ["small", "regular", "large"], "default": "regular"},
            },
        },
    )

    assert response.status_code == 201
    item = response.json()
    assert item["price"] == pytest.approx(5.50)
    assert item["currency"] == "AUD"
    assert item["customizations"]["size"]["default"] == "regular"


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "Free Coffee", "price": 0},
        {"name": "Odd Coffee", "price": "4.999"},
        {"name": "", "price": 4},
        {
            "name": "Latte",
            "price": 5,
            "customizations": {"milk": {"options": ["oat"], "default": "soy"}},
        },
    ],
)
async def test_create_menu_item_rejects_bad_input(client, cafe_with_menu, payload):
    response = await client.post(
        "/menus/items", json={"menuId": cafe_with_menu.menu_id, **payload}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidArgument"


async def test_create_menu_item_unknown_menu(client):
    response = await client.post("/menus/items", json={"menuId": 9999, "name": "Mocha", "price": 6})

    assert response.status_code == 404


async def test_update_menu_item(client, cafe_with_menu):
    response = await client.put(
        f"/menus/items/{cafe_with_menu.flat_white_id}",
        json={"description": "Double ristretto", "currency": "usd"},
    )

    item = response.json()
    assert item["name"] == "Flat White"
    assert item["price"] == pytest.approx(5.30)
    assert item["description"] == "Double ristretto"
    assert item["currency"] == "USD"


async def test_update_unknown_menu_item(client):
    response = await client.put("/menus/items/9999", json={"price": 4})

    assert response.status_code == 404


async def test_delete_menu_item(client, cafe_with_menu):
    response = await client.delete(f"/menus/items/{cafe_with_menu.flat_white_id}")

    assert response.status_code == 200
    assert response.json()["name"] == "Flat White"

    menus = (await client.get(f"/menus/{cafe_with_menu.cafe_id}")).json()
    assert [i["name"] for i in menus[0]["items"]] == ["Banana Bread"]

    again = await client.delete(f"/menus/items/{cafe_with_menu.flat_white_id}")
    assert again.status_code == 404
