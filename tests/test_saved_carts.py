from fastapi.testclient import TestClient

from lydia.db.json_db import JsonDatabase


def test_save_cart_generates_id_and_normalizes_items(client: TestClient, json_db: JsonDatabase):
    response = client.post(
        "/api/v1/cart",
        json={
            "items": [
                {"id": "p1", "name": "Blush Evening Dress", "price": 2799, "qty": 2},
                {"productId": "p1", "quantity": 1},
                {"productId": "p4", "quantity": 0},
                {"bad": True},
            ]
        },
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["cartId"].startswith("cart_")

    items = data["cart"]["items"]
    assert [(item["productId"], item["quantity"]) for item in items] == [("p1", 3), ("p4", 1)]
    assert "price" not in items[0]
    assert data["cart"]["updatedAt"].endswith("Z")
    assert data["cartId"] in json_db.read()["carts"]


def test_save_cart_with_client_id_overwrites(client: TestClient):
    client.post("/api/v1/cart", json={"cartId": "user_1", "items": [{"productId": "p1"}]})
    client.post("/api/v1/cart", json={"cartId": "user_1", "items": [{"productId": "p2", "quantity": 2}]})

    response = client.get("/api/v1/cart/user_1")

    assert response.status_code == 200
    items = response.json()["data"]["cart"]["items"]
    assert [(item["productId"], item["quantity"]) for item in items] == [("p2", 2)]


def test_save_cart_requires_item_list(client: TestClient):
    response = client.post("/api/v1/cart", json={"items": "p1"})

    assert response.status_code == 422


def test_unknown_saved_cart_returns_404(client: TestClient):
    response = client.get("/api/v1/cart/missing")

    assert response.status_code == 404
    assert response.json()["message"] == "Cart not found"
