import re

import pytest

from storefront.auth import ADMIN_COOKIE_NAME


def test_create_chat_returns_id_and_snapshots_product(client, admin_client, create_product, create_chat):
    product = create_product(category="free-fire", title="حساب نادر", price=900, description="lvl 70")

    chat_id = create_chat(product["id"], whatsapp="213555000111")
    assert re.match(r"^chat-[0-9a-z]+-[0-9a-z]{5}$", chat_id)

    chat = client.get(f"/api/chats/{chat_id}").get_json()
    assert chat["productId"] == product["id"]
    assert chat["productTitle"] == "حساب نادر"
    assert chat["product"] == product
    assert chat["customerName"] == "Ali"
    assert chat["whatsapp"] == "213555000111"
    assert chat["createdAt"].endswith("Z")
    assert len(chat["messages"]) == 1
    first = chat["messages"][0]
    assert first["from"] == "customer"
    assert first["text"] == "hi"
    assert first["id"].startswith("msg-")


def test_create_chat_for_unknown_product_has_no_snapshot(client, create_chat):
    chat_id = create_chat("ghost-product")
    chat = client.get(f"/api/chats/{chat_id}").get_json()

    assert chat["productId"] == "ghost-product"
    assert "product" not in chat
    assert "productTitle" not in chat
    assert "whatsapp" not in chat


@pytest.mark.parametrize("body", [
    {},
    {"productId": "p", "customerName": "Ali"},
    {"productId": "p", "text": "hi"},
    {"customerName": "Ali", "text": "hi"},
    {"productId": "p", "customerName": "  ", "text": "hi"},
])
def test_create_chat_requires_fields(client, body):
    res = client.post("/api/chats", json=body)
    assert res.status_code == 400
    assert res.get_json() == {"error": "Missing fields"}


def test_create_chat_with_non_json_body(client):
    res = client.post("/api/chats", data="not json", content_type="text/plain")
    assert res.status_code == 400


def test_snapshot_survives_product_edit_and_delete(client, admin_client, create_product, create_chat):
    product = create_product(title="original", price=300)
    chat_id = create_chat(product["id"])

    admin_client.put(f"/api/products/{product['id']}", json={"title": "renamed", "price": 999})
    assert client.get(f"/api/chats/{chat_id}").get_json()["product"]["title"] == "original"

    admin_client.delete(f"/api/products/{product['id']}")
    chat = client.get(f"/api/chats/{chat_id}").get_json()
    assert chat["product"]["price"] == 300
    assert chat["productTitle"] == "original"


def test_admin_list_sorted_newest_first(admin_client, create_chat, app):
    ids = [create_chat("p", text=f"m{i}") for i in range(3)]

    # force distinct timestamps regardless of clock resolution
    storage = app.extensions["storage"]
    chats = storage.read("chats").items
    stamps = {ids[0]: "2024-01-01T00:00:00.000Z", ids[1]: "2024-03-01T00:00:00.000Z", ids[2]: "2024-02-01T00:00:00.000Z"}
    for chat in chats:
        chat["createdAt"] = stamps[chat["id"]]
    storage.write("chats", list(reversed(chats)))

    listed = admin_client.get("/api/chats").get_json()
    assert [c["id"] for c in listed] == [ids[1], ids[2], ids[0]]


def test_list_chats_requires_admin(client):
    assert client.get("/api/chats").status_code == 401


def test_get_unknown_chat_is_not_found(client):
    res = client.get("/api/chats/chat-missing")
    assert res.status_code == 404
    assert res.get_json() == {"error": "Not found"}


def test_messages_append_in_arrival_order(client, admin_client, create_chat):
    chat_id = create_chat("p", text="first")

    client.post(f"/api/chats/{chat_id}", json={"from": "customer", "text": "second"})
    res = admin_client.post(f"/api/chats/{chat_id}", json={"from": "admin", "text": "third"})
    client.post(f"/api/chats/{chat_id}", json={"from": "customer", "text": "fourth"})

    assert res.status_code == 200
    assert [m["text"] for m in res.get_json()["messages"]] == ["first", "second", "third"]

    chat = client.get(f"/api/chats/{chat_id}").get_json()
    assert [m["text"] for m in chat["messages"]] == ["first", "second", "third", "fourth"]
    assert [m["from"] for m in chat["messages"]] == ["customer", "customer", "admin", "customer"]
    assert len({m["id"] for m in chat["messages"]}) == 4


def test_customer_cannot_post_as_admin(client, create_chat):
    chat_id = create_chat("p")

    res = client.post(f"/api/chats/{chat_id}", json={"from": "admin", "text": "fake"})

    assert res.status_code == 401
    assert len(client.get(f"/api/chats/{chat_id}").get_json()["messages"]) == 1


def test_invalid_admin_cookie_value_is_rejected(client, create_chat):
    chat_id = create_chat("p")
    client.set_cookie(ADMIN_COOKIE_NAME, "0")
    res = client.post(f"/api/chats/{chat_id}", json={"from": "admin", "text": "x"})
    assert res.status_code == 401


@pytest.mark.parametrize("body,status", [
    ({"from": "customer"}, 400),
    ({"text": "hello"}, 400),
    ({"from": "bot", "text": "hello"}, 400),
])
def test_post_message_validation(client, create_chat, body, status):
    chat_id = create_chat("p")
    assert client.post(f"/api/chats/{chat_id}", json=body).status_code == status


def test_post_message_to_unknown_chat(client):
    res = client.post("/api/chats/nope", json={"from": "customer", "text": "hi"})
    assert res.status_code == 404


def test_delete_message_keeps_others_in_order(client, admin_client, create_chat):
    chat_id = create_chat("p", text="one")
    for text in ("two", "three", "four"):
        client.post(f"/api/chats/{chat_id}", json={"from": "customer", "text": text})
    messages = client.get(f"/api/chats/{chat_id}").get_json()["messages"]

    res = admin_client.delete(f"/api/chats/{chat_id}/messages/{messages[1]['id']}")

    assert res.status_code == 200
    assert res.get_json() == {"ok": True}
    remaining = client.get(f"/api/chats/{chat_id}").get_json()["messages"]
    assert [m["text"] for m in remaining] == ["one", "three", "four"]


def test_delete_unknown_message_leaves_chat(client, admin_client, create_chat):
    chat_id = create_chat("p")
    before = client.get(f"/api/chats/{chat_id}").get_json()

    assert admin_client.delete(f"/api/chats/{chat_id}/messages/msg-nope").status_code == 404
    assert admin_client.delete(f"/api/chats/chat-nope/messages/msg-nope").status_code == 404
    assert client.get(f"/api/chats/{chat_id}").get_json() == before


def test_delete_chat(client, admin_client, create_chat):
    keep = create_chat("p", text="keep")
    drop = create_chat("p", text="drop")

    assert admin_client.delete(f"/api/chats/{drop}").get_json() == {"ok": True}
    assert client.get(f"/api/chats/{drop}").status_code == 404
    assert [c["id"] for c in admin_client.get("/api/chats").get_json()] == [keep]


def test_delete_unknown_chat_is_not_found(admin_client, create_chat):
    create_chat("p")
    assert admin_client.delete("/api/chats/chat-nope").status_code == 404
    assert len(admin_client.get("/api/chats").get_json()) == 1


@pytest.mark.parametrize("path", ["/api/chats/c", "/api/chats/c/messages/m"])
def test_deletes_require_admin(client, path):
    assert client.delete(path).status_code == 401
