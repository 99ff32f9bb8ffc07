from pathlib import Path

from fastapi.testclient import TestClient

from lydia.core.config import settings
from lydia.db.json_db import JsonDatabase


def _ids(response) -> list:
    return [product["id"] for product in response.json()["data"]]


def test_seed_populates_catalog_once(client: TestClient, json_db: JsonDatabase):
    first = client.post("/api/v1/products/seed")
    assert first.status_code == 200
    assert first.json()["message"] == "Seeded products"
    assert first.json()["data"]["count"] == 6

    second = client.post("/api/v1/products/seed")
    assert second.json()["message"] == "Products already seeded"
    assert len(json_db.read()["products"]) == 6


def test_list_products_without_filters(client: TestClient, seeded_db: JsonDatabase):
    response = client.get("/api/v1/products")

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["meta"]["total"] == 6
    assert _ids(response) == ["p1", "p2", "p3", "p4", "p5", "p7"]


def test_list_products_filters_by_attributes(client: TestClient, seeded_db: JsonDatabase):
    assert _ids(client.get("/api/v1/products?category=dresses")) == ["p1", "p2"]
    assert _ids(client.get("/api/v1/products?color=pink")) == ["p1", "p7"]
    assert _ids(client.get("/api/v1/products?category=tops&size=M")) == ["p4"]
    assert _ids(client.get("/api/v1/products?occasion=festive")) == ["p5"]


def test_all_disables_a_filter(client: TestClient, seeded_db: JsonDatabase):
    response = client.get("/api/v1/products?category=all&color=all&size=all&occasion=all")

    assert len(_ids(response)) == 6


def test_max_price_is_inclusive(client: TestClient, seeded_db: JsonDatabase):
    assert _ids(client.get("/api/v1/products?maxPrice=999")) == ["p4", "p7"]
    assert _ids(client.get("/api/v1/products?maxPrice=100")) == []


def test_invalid_max_price_is_rejected(client: TestClient, seeded_db: JsonDatabase):
    response = client.get("/api/v1/products?maxPrice=-1")

    assert response.status_code == 422
    assert response.json()["message"] == "Validation failed"


def test_get_single_product(client: TestClient, seeded_db: JsonDatabase):
    response = client.get("/api/v1/products/p3")

    assert response.status_code == 200
    assert response.json()["data"]["name"] == "White Silk Blouse"


def test_unknown_product_returns_404(client: TestClient, seeded_db: JsonDatabase):
    response = client.get("/api/v1/products/p404")

    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["message"] == "Product not found"


def test_empty_catalog_lists_nothing(client: TestClient):
    response = client.get("/api/v1/products")

    assert response.status_code == 200
    assert response.json()["data"] == []


def test_unknown_api_route_returns_json_404(client: TestClient):
    response = client.get("/api/v1/does-not-exist")

    assert response.status_code == 404
    assert response.json()["message"] == "Not found"


def test_health_and_security_headers(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-ID" in response.headers
    assert "X-Correlation-ID" in response.headers


def test_startup_creates_configured_database(client: TestClient):
    assert Path(settings.DB_FILE).is_file()
