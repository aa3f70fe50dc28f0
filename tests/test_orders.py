"""Integration tests for the /orders endpoints."""

from bson import ObjectId


def test_create_order_echoes_fields(client, order_payload):
    response = client.post("/orders", json=order_payload)

    assert response.status_code == 201
    data = response.json()
    for field, value in order_payload.items():
        assert data[field] == value
    assert data["id"]


def test_identical_orders_are_both_stored(client, db, order_payload):
    first = client.post("/orders", json=order_payload).json()
    second = client.post("/orders", json=order_payload).json()

    assert first["id"] != second["id"]
    assert db["orders"].count_documents({}) == 2


def test_product_reference_is_not_checked(client, order_payload):
    response = client.post("/orders", json={**order_payload, "productId": "no-such-product"})

    assert response.status_code == 201


def test_order_rules(client):
    response = client.post(
        "/orders",
        json={"productId": "abc", "productName": "W", "orderedBy": "Jo", "quantity": -1},
    )

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert fields == {"productId", "productName", "orderedBy", "quantity"}


def test_zero_quantity_is_accepted(client, order_payload):
    response = client.post("/orders", json={**order_payload, "quantity": 0})

    assert response.status_code == 201
    assert response.json()["quantity"] == 0


def test_list_orders(client, order_payload):
    client.post("/orders", json=order_payload)

    response = client.get("/orders")

    assert response.status_code == 200
    assert len(response.json()) == 1


def test_update_order(client, order_payload):
    order_id = client.post("/orders", json=order_payload).json()["id"]

    response = client.put(f"/orders/{order_id}", json={**order_payload, "quantity": 5})

    assert response.status_code == 200
    assert response.json()["quantity"] == 5
    assert response.json()["productName"] == "Widget"


def test_update_unknown_order(client, db, order_payload):
    response = client.put(f"/orders/{ObjectId()}", json=order_payload)

    assert response.status_code == 400
    assert response.json() == {"detail": "order not present"}
    assert db["orders"].count_documents({}) == 0


def test_delete_order(client, order_payload):
    order_id = client.post("/orders", json=order_payload).json()["id"]

    response = client.delete(f"/orders/{order_id}")

    assert response.status_code == 200
    assert response.json() == {"message": "deleted successfully"}
    assert client.get("/orders").json() == []


def test_delete_unknown_order(client):
    response = client.delete(f"/orders/{ObjectId()}")

    assert response.status_code == 400
    assert response.json() == {"detail": "order not present"}
