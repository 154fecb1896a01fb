import logging

from flask import Blueprint, jsonify, request

from storefront.auth import (
    admin_required,
    check_password,
    clear_admin_cookie,
    is_admin_authenticated,
    require_admin,
    set_admin_cookie,
)
from storefront.chats import (
    SENDERS,
    find_chat,
    load_chats,
    load_chats_result,
    new_chat,
    new_message,
    save_chats,
    sorted_chats,
)
from storefront.errors import InvalidField, MissingFields, NotFound, Unauthorized
from storefront.products import (
    build_product,
    find_product,
    load_products,
    merge_product,
    save_products,
)
from storefront.uploads import (
    SIGNATURE_HEADER,
    UPLOAD_COMPLETED,
    client_token_event,
    save_upload,
    upload_completed_event,
)

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")


def _json_body():
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def _text(body, field):
    value = body.get(field)
    return value.strip() if isinstance(value, str) else ""


# -----------------------------
# ADMIN LOGIN / LOGOUT
# -----------------------------
@api.route("/admin/login", methods=["POST"])
def admin_login():
    body = _json_body()
    if not check_password(body.get("password")):
        logger.warning("Rejected admin login from %s", request.remote_addr)
        raise Unauthorized("Invalid password")

    return set_admin_cookie(jsonify(ok=True))


@api.route("/admin/logout", methods=["POST"])
def admin_logout():
    return clear_admin_cookie(jsonify(ok=True))


# -----------------------------
# PRODUCTS
# -----------------------------
@api.route("/products", methods=["GET"])
def list_products():
    products = load_products()

    category = request.args.get("category")
    if category:
        products = [p for p in products if p.get("category") == category]

    return jsonify(products)


@api.route("/products", methods=["POST"])
@admin_required
def create_product():
    product = build_product(_json_body())

    products = load_products(strict=True)
    if find_product(product["id"], products):
        raise InvalidField(f"Duplicate id: {product['id']}")

    products.insert(0, product)
    save_products(products)

    logger.info("Created product %s", product["id"])
    return jsonify(product), 201


@api.route("/products/<product_id>", methods=["PUT"])
@admin_required
def update_product(product_id):
    body = _json_body()

    products = load_products(strict=True)
    idx = next((i for i, p in enumerate(products) if p.get("id") == product_id), None)
    if idx is None:
        raise NotFound()

    products[idx] = merge_product(products[idx], body)
    save_products(products)

    return jsonify(products[idx])


@api.route("/products/<product_id>", methods=["DELETE"])
@admin_required
def delete_product(product_id):
    products = load_products(strict=True)
    remaining = [p for p in products if p.get("id") != product_id]
    if len(remaining) == len(products):
        raise NotFound()

    save_products(remaining)
    logger.info("Deleted product %s", product_id)
    return jsonify(ok=True)


# -----------------------------
# CHATS
# -----------------------------
@api.route("/chats", methods=["GET"])
@admin_required
def list_chats():
    result = load_chats_result()
    if not result.ok:
        return jsonify([])
    return jsonify(sorted_chats(result.items))


@api.route("/chats", methods=["POST"])
def create_chat():
    body = _json_body()
    product_id = _text(body, "productId")
    customer_name = _text(body, "customerName")
    text = _text(body, "text")

    if not product_id or not customer_name or not text:
        raise MissingFields()

    chats = load_chats()
    chat = new_chat(product_id, customer_name, text, whatsapp=_text(body, "whatsapp") or None)
    chats.insert(0, chat)
    save_chats(chats)

    logger.info("Opened chat %s for product %s", chat["id"], product_id)
    return jsonify(id=chat["id"])


@api.route("/chats/<chat_id>", methods=["GET"])
def get_chat(chat_id):
    chats = load_chats()
    return jsonify(chats[find_chat(chats, chat_id)])


@api.route("/chats/<chat_id>", methods=["POST"])
def post_message(chat_id):
    body = _json_body()
    sender = _text(body, "from")
    text = _text(body, "text")

    if not sender or not text:
        raise MissingFields()
    if sender not in SENDERS:
        raise InvalidField(f"Unknown sender: {sender}")
    if sender == "admin" and not is_admin_authenticated():
        raise Unauthorized()

    chats = load_chats()
    idx = find_chat(chats, chat_id)

    chat = dict(chats[idx])
    chat["messages"] = [*chat.get("messages", []), new_message(sender, text)]
    chats[idx] = chat
    save_chats(chats)

    return jsonify(chat)


@api.route("/chats/<chat_id>", methods=["DELETE"])
@admin_required
def delete_chat(chat_id):
    chats = load_chats()
    remaining = [c for c in chats if c.get("id") != chat_id]
    if len(remaining) == len(chats):
        raise NotFound()

    save_chats(remaining)
    logger.info("Deleted chat %s", chat_id)
    return jsonify(ok=True)


@api.route("/chats/<chat_id>/messages/<message_id>", methods=["DELETE"])
@admin_required
def delete_message(chat_id, message_id):
    chats = load_chats()
    idx = find_chat(chats, chat_id)

    chat = chats[idx]
    messages = chat.get("messages", [])
    remaining = [m for m in messages if m.get("id") != message_id]
    if len(remaining) == len(messages):
        raise NotFound()

    chats[idx] = {**chat, "messages": remaining}
    save_chats(chats)
    return jsonify(ok=True)


# -----------------------------
# UPLOAD
# -----------------------------
@api.route("/upload", methods=["POST"])
def upload():
    if request.is_json:
        body = _json_body()
        # Vercel calls back without the admin cookie; the body signature stands in for it
        if body.get("type") == UPLOAD_COMPLETED:
            return jsonify(upload_completed_event(
                body, request.get_data(), request.headers.get(SIGNATURE_HEADER)
            ))

        require_admin()
        return jsonify(client_token_event(body))

    require_admin()
    return jsonify(url=save_upload(request.files.get("file")))
