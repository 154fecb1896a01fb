import json

import httpx
import pytest

from storefront import create_app
from storefront.auth import ADMIN_COOKIE_NAME
from storefront.storage import RestKVBackend


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "ADMIN_PASSWORD": "s3cret",
        "DATA_DIR": str(tmp_path / "data"),
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        "BLOB_READ_WRITE_TOKEN": None,
        "KV_REST_API_URL": None,
        "KV_REST_API_TOKEN": None,
        "UPSTASH_REDIS_REST_URL": None,
        "UPSTASH_REDIS_REST_TOKEN": None,
        "VERCEL": None,
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    client.set_cookie(ADMIN_COOKIE_NAME, "1")
    return client


@pytest.fixture
def data_dir(app):
    return app.config["DATA_DIR"]


class FakeRedis:
    """In-memory stand-in for the Upstash REST endpoint."""

    def __init__(self):
        self.store = {}
        self.requests = []

    def handler(self, request):
        self.requests.append(request)
        command = json.loads(request.content)
        op, key = command[0], command[1]
        if op == "GET":
            return httpx.Response(200, json={"result": self.store.get(key)})
        if op == "SET":
            self.store[key] = command[2]
            return httpx.Response(200, json={"result": "OK"})
        return httpx.Response(400, json={"error": f"ERR unknown command {op}"})

    def backend(self, name="upstash"):
        client = httpx.Client(transport=httpx.MockTransport(self.handler))
        return RestKVBackend("https://kv.example.com", "kv-token", name=name, client=client)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def create_product(admin_client):
    def _create(**fields):
        res = admin_client.post("/api/products", json=fields)
        assert res.status_code == 201
        return res.get_json()
    return _create


@pytest.fixture
def create_chat(client):
    def _create(product_id, customer_name="Ali", text="hi", **extra):
        res = client.post("/api/chats", json={
            "productId": product_id,
            "customerName": customer_name,
            "text": text,
            **extra,
        })
        assert res.status_code == 200
        return res.get_json()["id"]
    return _create
