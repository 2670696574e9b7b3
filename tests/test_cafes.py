import pytest

from caffio.models import Cafe
from caffio.services.availability import WEEKDAYS
from caffio.services.catalog import haversine_km


@pytest.fixture
async def sydney_cafes(session_maker):
    """Three cafes at increasing distance from Circular Quay."""
    async with session_maker() as db:
        cafes = [
            Cafe(name="Harbour Bean", lat=-33.8611, lon=151.2111, rating_avg=3.0, rating_count=1),
            Cafe(name="Reservoir Roasters", lat=-33.8825, lon=151.2094, rating_avg=4.5, rating_count=2),
            Cafe(name="Newtown Grind", lat=-33.8970, lon=151.1793, rating_avg=4.0, rating_count=1),
        ]
        db.add_all(cafes)
        await db.commit()
        return {cafe.name: cafe.id for cafe in cafes}


def test_haversine():
    assert haversine_km(-33.8688, 151.2093, -33.8688, 151.2093) == pytest.approx(0.0)
    # Sydney -> Melbourne
    assert haversine_km(-33.8688, 151.2093, -37.8136, 144.9631) == pytest.approx(714, abs=5)


async def test_list_cafes_by_rating(client, sydney_cafes):
    response = await client.get("/cafes")

    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == [
        "Reservoir Roasters",
        "Newtown Grind",
        "Harbour Bean",
    ]
    assert all(c["distanceKm"] is None for c in response.json())


async def test_list_nearest_cafes(client, sydney_cafes):
    response = await client.get("/cafes", params={"lat": -33.8568, "lon": 151.2153})

    cafes = response.json()
    assert [c["name"] for c in cafes] == ["Harbour Bean", "Reservoir Roasters", "Newtown Grind"]
    distances = [c["distanceKm"] for c in cafes]
    assert distances == sorted(distances)
    assert distances[0] < 1.0


async def test_only_one_coordinate_falls_back_to_rating(client, sydney_cafes):
    response = await client.get("/cafes", params={"lat": -33.8568})

    assert response.json()[0]["name"] == "Reservoir Roasters"


async def test_cafe_without_hours_is_open(client, cafe_with_menu):
    cafes = (await client.get("/cafes")).json()

    assert cafes[0]["isOpen"] is True


async def test_closed_every_day(client, cafe_with_menu):
    closed = {day: {"open": "08:00", "close": "20:00", "enabled": False} for day in WEEKDAYS}

    response = await client.put(
        f"/cafes/{cafe_with_menu.cafe_id}", json={"businessHours": closed}
    )

    assert response.status_code == 200
    assert response.json()["isOpen"] is False
    assert response.json()["businessHours"]["monday"]["enabled"] is False


async def test_get_cafe_with_menus_and_reviews(client, cafe_with_menu):
    await client.post("/reviews", json={"cafeId": cafe_with_menu.cafe_id, "rating": 4})

    response = await client.get(f"/cafes/{cafe_with_menu.cafe_id}")

    body = response.json()
    assert body["name"] == "Reservoir Roasters"
    assert [m["name"] for m in body["menus"]] == ["Main"]
    assert [i["name"] for i in body["menus"][0]["items"]] == ["Flat White", "Banana Bread"]
    assert [r["rating"] for r in body["reviews"]] == [4]


async def test_get_unknown_cafe(client):
    response = await client.get("/cafes/9999")

    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"


async def test_update_cafe_profile(client, cafe_with_menu):
    response = await client.put(
        f"/cafes/{cafe_with_menu.cafe_id}",
        json={"phone": "02 9999 0000", "primaryColor": "#6F4E37", "name": ""},
    )

    body = response.json()
    assert body["phone"] == "02 9999 0000"
    assert body["primaryColor"] == "#6F4E37"
    assert body["name"] == "Reservoir Roasters"


async def test_update_keeps_rating_aggregate(client, cafe_with_menu):
    await client.post("/reviews", json={"cafeId": cafe_with_menu.cafe_id, "rating": 5})

    response = await client.put(
        f"/cafes/{cafe_with_menu.cafe_id}", json={"name": "Reservoir Roasters II"}
    )

    assert response.json()["name"] == "Reservoir Roasters II"
    assert response.json()["ratingCount"] == 1
    assert response.json()["ratingAvg"] == pytest.approx(5.0)


@pytest.mark.parametrize(
    "hours",
    [
        {"someday": {"open": "08:00", "close": "20:00"}},
        {"monday": {"open": "25:00", "close": "20:00"}},
    ],
)
async def test_update_rejects_bad_hours(client, cafe_with_menu, hours):
    response = await client.put(f"/cafes/{cafe_with_menu.cafe_id}", json={"businessHours": hours})

    assert response.status_code == 400


async def test_update_unknown_cafe(client):
    response = await client.put("/cafes/9999", json={"phone": "1"})

    assert response.status_code == 404
