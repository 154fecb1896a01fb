import logging
import numbers

from storefront.errors import InvalidField, StorageError
from storefront.storage import get_storage
from storefront.utils import generate_id

logger = logging.getLogger(__name__)

CATEGORIES = {
    "pubg": "PUBG",
    "free-fire": "Free Fire",
    "topup": "Top-up",
}

DEFAULT_CATEGORY = "pubg"
DEFAULT_TITLE = "منتج جديد"
PLACEHOLDER_IMAGE = "/static/placeholder.svg"

SNAPSHOT_FIELDS = ("id", "category", "title", "price", "description", "image")
TEXT_FIELDS = ("id", "title", "description", "image")


# -----------------------------
# PRODUCT HELPERS (STORAGE)
# -----------------------------
def load_products(strict=False):
    """With ``strict`` a failed read raises StorageError instead of returning []."""
    result = get_storage().read("products")
    if not result.ok:
        if strict:
            raise StorageError()
        logger.warning("Products unavailable, serving an empty list")
    return result.items


def save_products(products):
    get_storage().write("products", products)


def products_in_category(category):
    return [p for p in load_products() if p.get("category") == category]


def find_product(product_id, products=None, strict=False):
    if products is None:
        products = load_products(strict=strict)
    return next((p for p in products if p.get("id") == product_id), None)


# -----------------------------
# VALIDATION
# -----------------------------
def _is_price(value):
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _check_text_fields(fields):
    for field in TEXT_FIELDS:
        value = fields.get(field)
        if value is not None and not isinstance(value, str):
            raise InvalidField(f"{field} must be a string")


def _validate(fields):
    _check_text_fields(fields)

    if "category" in fields:
        category = fields["category"]
        if not isinstance(category, str) or category not in CATEGORIES:
            raise InvalidField(f"Unknown category: {category}")

    if "price" in fields:
        price = fields["price"]
        if not _is_price(price) or price < 0:
            raise InvalidField("Price must be a non-negative number")


def build_product(body):
    """New product record from a (possibly partial) admin payload."""
    _check_text_fields(body)
    category = body.get("category") or DEFAULT_CATEGORY
    price = body.get("price")

    product = {
        "id": body.get("id") or generate_id(body.get("category") or "product"),
        "category": category,
        "title": body.get("title") or DEFAULT_TITLE,
        "price": price if _is_price(price) else 0,
        "description": body.get("description") or "",
        "image": body.get("image") or PLACEHOLDER_IMAGE,
    }
    _validate(product)
    return product


def merge_product(existing, body):
    _validate(body)
    merged = {**existing, **body}
    merged["id"] = existing["id"]
    return merged


def snapshot(product):
    return {field: product.get(field) for field in SNAPSHOT_FIELDS}
