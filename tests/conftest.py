import pytest
from sqlalchemy.pool import StaticPool

from shop.main import create_app

MEMORY_CONFIG = {"SHOP_STORE": "memory", "TESTING": True}

SQLITE_CONFIG = {
    "SHOP_STORE": "sql",
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    # um único banco em memória compartilhado entre conexões/threads
    "SQLALCHEMY_ENGINE_OPTIONS": {
        "poolclass": StaticPool,
        "connect_args": {"check_same_thread": False},
    },
}


def make_app(kind="memory", **overrides):
    base = MEMORY_CONFIG if kind == "memory" else SQLITE_CONFIG
    return create_app({**base, **overrides})


@pytest.fixture(params=["memory", "sql"])
def app(request):
    return make_app(request.param)


@pytest.fixture
def memory_app():
    return make_app("memory")


@pytest.fixture
def sql_app():
    return make_app("sql")


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, username="admin", password="admin123"):
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]["token"]


@pytest.fixture
def admin_headers(client):
    return {"Authorization": f"Bearer {login(client)}"}


def order_payload(items, **overrides):
    body = {
        "customer": {"name": "Ada Lovelace", "email": "ada@example.com", "address": "12 Analytical St"},
        "items": items,
        "subtotal": 100.0,
        "shipping": 5.99,
        "tax": 8.0,
        "total": 113.99,
    }
    body.update(overrides)
    return body


def product_stock(client, product_id):
    return client.get(f"/api/products/{product_id}").get_json()["data"]["stock"]
