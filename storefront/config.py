import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))
PROJECT_ROOT = os.path.dirname(BASE_DIR)

SECRET_KEY = os.environ.get("SECRET_KEY")

# Shared admin secret, same fallback as the original deployment
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "1234")

DATA_DIR = os.environ.get("DATA_DIR", os.path.join(PROJECT_ROOT, "data"))

UPLOAD_FOLDER = os.environ.get(
    "UPLOAD_FOLDER",
    os.path.join(PROJECT_ROOT, "uploads")
)

# -----------------------------
# HOSTED STORAGE
# -----------------------------
BLOB_READ_WRITE_TOKEN = os.environ.get("BLOB_READ_WRITE_TOKEN")

KV_REST_API_URL = os.environ.get("KV_REST_API_URL")
KV_REST_API_TOKEN = os.environ.get("KV_REST_API_TOKEN")

UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN")

VERCEL = os.environ.get("VERCEL")

STORAGE_TIMEOUT = float(os.environ.get("STORAGE_TIMEOUT", "10"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

ALLOWED_CONTENT_TYPES = (
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/gif",
    "image/svg+xml",
)

CONFIG_KEYS = (
    "SECRET_KEY",
    "ADMIN_PASSWORD",
    "DATA_DIR",
    "UPLOAD_FOLDER",
    "BLOB_READ_WRITE_TOKEN",
    "KV_REST_API_URL",
    "KV_REST_API_TOKEN",
    "UPSTASH_REDIS_REST_URL",
    "UPSTASH_REDIS_REST_TOKEN",
    "VERCEL",
    "STORAGE_TIMEOUT",
    "LOG_LEVEL",
    "ALLOWED_CONTENT_TYPES",
)


def defaults():
    """Environment-derived settings, keyed the way ``app.config`` holds them."""
    return {key: globals()[key] for key in CONFIG_KEYS}
