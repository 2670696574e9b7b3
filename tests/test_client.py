import pytest

from caffio.client import CaffioAPIError, CaffioClient, DashboardStore

OWNER = {"email": "owner@harbourbean.example.com", "password": "longblack"}


@pytest.fixture
def api(client):
    return CaffioClient(http_client=client)


@pytest.fixture
async def owner_cafe(api):
    auth = await api.admin_signup(OWNER["email"], OWNER["password"], "Harbour Bean", lat=-33.8611, lon=151.2111)
    menu = await api.create_menu(auth["cafe"]["id"])
    return auth["cafe"]["id"], menu["id"]


async def test_api_error_carries_status_and_code(api):
    with pytest.raises(CaffioAPIError) as excinfo:
        await api.get_cafe(9999)

    assert excinfo.value.status_code == 404
    assert excinfo.value.error == "NotFound"
    assert excinfo.value.detail == "Cafe 9999 not found"


async def test_dashboard_login_loads_everything(api, owner_cafe):
    cafe_id, menu_id = owner_cafe
    await api.create_menu_item(menu_id, "Long Black", 4.80)
    await api.create_review(cafe_id, 5, text="Great crema")

    store = await DashboardStore.login(api, OWNER["email"], OWNER["password"])

    assert store.cafe_id == cafe_id
    assert store.user["email"] == OWNER["email"]
    assert store.cafe["ratingCount"] == 1
    assert [i["name"] for i in store.menu_items] == ["Long Black"]
    assert [r["text"] for r in store.reviews] == ["Great crema"]
    assert store.orders == []


async def test_dashboard_order_status(api, owner_cafe):
    cafe_id, menu_id = owner_cafe
    item = await api.create_menu_item(menu_id, "Long Black", 4.80)
    customer = await api.customer_signup("kim@example.com", "pw", name="Kim")
    order = await api.create_order(customer["id"], cafe_id, [{"menuItemId": item["id"], "quantity": 1}])

    store = await DashboardStore.login(api, OWNER["email"], OWNER["password"])
    assert [o["id"] for o in store.orders_by_status("pending")] == [order["id"]]

    await store.update_order_status(order["id"], "preparing")

    assert store.orders_by_status("pending") == []
    assert [o["id"] for o in store.orders_by_status("preparing")] == [order["id"]]


async def test_dashboard_menu_edits(api, owner_cafe):
    _, menu_id = owner_cafe
    store = await DashboardStore.login(api, OWNER["email"], OWNER["password"])

    item = await store.add_menu_item(menu_id, "Piccolo", 4.20, category="Coffee")
    assert [i["name"] for i in store.menu_items] == ["Piccolo"]

    await store.update_menu_item(item["id"], price=4.50)
    assert store.menu_items[0]["price"] == pytest.approx(4.50)

    await store.delete_menu_item(item["id"])
    assert store.menu_items == []


async def test_dashboard_update_cafe(api, owner_cafe):
    store = await DashboardStore.login(api, OWNER["email"], OWNER["password"])

    await store.update_cafe(theme="dark", accentColor="#E9C46A")

    assert store.cafe["theme"] == "dark"
    assert store.cafe["accentColor"] == "#E9C46A"
