import pytest

from caffio.main import app
from caffio.services.availability import WEEKDAYS
from caffio.services.geo import MockGeoService, get_geo_service

SIGNUP = {
    "email": "owner@reservoir.example.com",
    "password": "flatwhite",
    "cafeName": "Reservoir Roasters",
}


async def test_signup_creates_cafe_and_owner(client):
    response = await client.post("/auth/signup", json={**SIGNUP, "lat": -33.8825, "lon": 151.2094})

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == SIGNUP["email"]
    assert body["user"]["cafeId"] == body["cafe"]["id"]
    assert "passwordHash" not in body["user"]

    cafe = body["cafe"]
    assert cafe["name"] == "Reservoir Roasters"
    assert (cafe["lat"], cafe["lon"]) == (-33.8825, 151.2094)
    assert cafe["ratingAvg"] == 0
    assert cafe["ratingCount"] == 0
    assert set(cafe["businessHours"]) == set(WEEKDAYS)
    assert cafe["businessHours"]["monday"] == {"open": "08:00", "close": "20:00", "enabled": True}


async def test_signup_with_overlong_password_creates_nothing(client):
    response = await client.post("/auth/signup", json={**SIGNUP, "password": "x" * 80})

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidArgument"
    assert (await client.get("/cafes")).json() == []


async def test_signup_geocodes_address(client):
    response = await client.post(
        "/auth/signup", json={**SIGNUP, "address": "Reservoir St, Surry Hills NSW"}
    )

    cafe = response.json()["cafe"]
    assert cafe["lat"] == pytest.approx(-33.8688, abs=0.06)
    assert cafe["lon"] == pytest.approx(151.2093, abs=0.06)


async def test_signup_survives_geocoding_failure(client):
    app.dependency_overrides[get_geo_service] = lambda: MockGeoService(failure_rate=1.0)

    response = await client.post(
        "/auth/signup", json={**SIGNUP, "address": "Reservoir St, Surry Hills NSW"}
    )

    assert response.status_code == 201
    assert (response.json()["cafe"]["lat"], response.json()["cafe"]["lon"]) == (0, 0)


async def test_signup_without_location(client):
    response = await client.post("/auth/signup", json=SIGNUP)

    assert (response.json()["cafe"]["lat"], response.json()["cafe"]["lon"]) == (0, 0)


async def test_duplicate_signup_is_conflict(client):
    await client.post("/auth/signup", json=SIGNUP)

    response = await client.post("/auth/signup", json={**SIGNUP, "cafeName": "Another"})

    assert response.status_code == 409
    cafes = (await client.get("/cafes")).json()
    assert [c["name"] for c in cafes] == ["Reservoir Roasters"]


async def test_login(client):
    signup = (await client.post("/auth/signup", json=SIGNUP)).json()

    response = await client.post(
        "/auth/login", json={"email": SIGNUP["email"], "password": SIGNUP["password"]}
    )

    assert response.status_code == 200
    assert response.json()["user"]["id"] == signup["user"]["id"]
    assert response.json()["cafe"]["id"] == signup["cafe"]["id"]


async def test_login_wrong_password(client):
    await client.post("/auth/signup", json=SIGNUP)

    response = await client.post(
        "/auth/login", json={"email": SIGNUP["email"], "password": "espresso"}
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"
