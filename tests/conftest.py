import mongomock
import pytest
from fastapi.testclient import TestClient

from main import create_app


@pytest.fixture()
def db():
    return mongomock.MongoClient()["shop_test"]


@pytest.fixture()
def client(db):
    return TestClient(create_app(db))


@pytest.fixture()
def user_payload():
    return {
        "name": "Jane Doe",
        "email": "jane.doe@example.com",
        "password": "s3cretpass",
        "phone": 5550123456,
    }


@pytest.fixture()
def order_payload():
    return {
        "productId": "65f1c2a9e4b0a1b2c3d4e5f6",
        "productName": "Widget",
        "orderedBy": "Jane",
        "quantity": 2,
    }
