import pytest


async def test_root(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["health"] == "/health"


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "operational"
    assert body["database"] == "healthy"
    assert body["payment_service"] == "healthy"
    assert body["geo_service"] == "healthy"


async def test_validation_error_shape(client):
    response = await client.post("/reviews", json={"rating": 3})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "InvalidArgument"
    assert "cafeId" in body["detail"]


@pytest.mark.parametrize(
    "path, method, codes",
    [
        ("/cafes", "get", {"400"}),
        ("/orders", "post", {"400", "404"}),
        ("/reviews", "post", {"400", "404"}),
        ("/customers/signup", "post", {"400", "409"}),
        ("/auth/login", "post", {"400", "401"}),
        ("/payments/create-intent", "post", {"400", "502"}),
    ],
)
async def test_openapi_documents_error_responses(client, path, method, codes):
    schema = (await client.get("/openapi.json")).json()

    responses = schema["paths"][path][method]["responses"]
    assert codes <= set(responses)
    for code in codes:
        assert responses[code]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
