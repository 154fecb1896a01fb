import logging

from storefront.errors import NotFound, StorageError
from storefront.products import find_product, snapshot
from storefront.storage import get_storage
from storefront.utils import generate_id, now_iso

logger = logging.getLogger(__name__)

SENDERS = ("customer", "admin")


def load_chats_result():
    return get_storage().read("chats")


def load_chats():
    result = load_chats_result()
    if not result.ok:
        raise StorageError()
    return result.items


def save_chats(chats):
    get_storage().write("chats", chats)


def sorted_chats(chats):
    return sorted(chats, key=lambda c: c.get("createdAt") or "", reverse=True)


def find_chat(chats, chat_id):
    for idx, chat in enumerate(chats):
        if chat.get("id") == chat_id:
            return idx
    raise NotFound()


def new_message(sender, text, created_at=None):
    return {
        "id": generate_id("msg"),
        "from": sender,
        "text": text,
        "createdAt": created_at or now_iso(),
    }


def _product_snapshot(product_id):
    # best effort: a chat can still open when the catalogue is unavailable
    try:
        product = find_product(product_id, strict=True)
    except StorageError as e:
        logger.warning("Product lookup for chat failed: %s", e)
        return None
    return snapshot(product) if product else None


def new_chat(product_id, customer_name, text, whatsapp=None):
    now = now_iso()
    product = _product_snapshot(product_id)

    chat = {
        "id": generate_id("chat"),
        "productId": product_id,
        "customerName": customer_name,
        "createdAt": now,
        "messages": [new_message("customer", text, created_at=now)],
    }
    if product:
        chat["productTitle"] = product["title"]
        chat["product"] = product
    if whatsapp:
        chat["whatsapp"] = whatsapp

    return chat
