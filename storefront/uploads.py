"""
Product image uploads.

Files go to Vercel Blob when ``BLOB_READ_WRITE_TOKEN`` is set, otherwise to
``UPLOAD_FOLDER`` on local disk (served back under ``/uploads/``).
"""
import base64
import hashlib
import hmac
import json
import logging
import os

import httpx
from flask import current_app

from storefront.errors import InvalidField, MissingFields, StorageError, Unauthorized
from storefront.utils import now_ms, sanitize_filename

logger = logging.getLogger(__name__)

BLOB_API_URL = "https://blob.vercel-storage.com"
BLOB_API_VERSION = "7"
CLIENT_TOKEN_TTL_MS = 60 * 60 * 1000
SIGNATURE_HEADER = "x-vercel-signature"

GENERATE_CLIENT_TOKEN = "blob.generate-client-token"
UPLOAD_COMPLETED = "blob.upload-completed"


def stored_name(original_name):
    return f"{now_ms()}_{sanitize_filename(original_name)}"


class LocalUploads:
    name = "local"

    def __init__(self, folder):
        self.folder = folder

    def save(self, file):
        os.makedirs(self.folder, exist_ok=True)
        filename = stored_name(file.filename)
        file.save(os.path.join(self.folder, filename))
        logger.info("Stored upload %s on disk", filename)
        return f"/uploads/{filename}"


class BlobUploads:
    name = "blob"

    def __init__(self, token, timeout=30.0, client=None):
        self.token = token
        self.client = client or httpx.Client(timeout=timeout)

    def save(self, file):
        filename = stored_name(file.filename)
        headers = {
            "Authorization": f"Bearer {self.token}",
            "x-api-version": BLOB_API_VERSION,
        }
        if file.mimetype:
            headers["x-content-type"] = file.mimetype

        try:
            response = self.client.put(
                f"{BLOB_API_URL}/{filename}",
                content=file.read(),
                headers=headers,
            )
            response.raise_for_status()
            url = response.json()["url"]
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error("Blob upload of %s failed: %s", filename, e)
            raise StorageError("Upload failed") from e

        logger.info("Stored upload %s in blob storage", filename)
        return url


def init_uploads(app):
    token = app.config.get("BLOB_READ_WRITE_TOKEN")
    if token:
        uploads = BlobUploads(token)
    else:
        uploads = LocalUploads(app.config["UPLOAD_FOLDER"])
    app.extensions["uploads"] = uploads
    return uploads


def get_uploads():
    return current_app.extensions["uploads"]


def save_upload(file):
    if file is None or not file.filename:
        raise MissingFields("Missing file")
    return get_uploads().save(file)


# -----------------------------
# CLIENT UPLOADS (BLOB ONLY)
# -----------------------------
# Server side of the @vercel/blob/client upload handshake: the browser asks
# for a client token, uploads straight to Blob, and Vercel then calls back
# with ``blob.upload-completed`` signed by the read-write token.
def _hmac_hex(token, message):
    return hmac.new(token.encode(), message, hashlib.sha256).hexdigest()


def _store_id(token):
    # vercel_blob_rw_<storeId>_<secret>
    parts = token.split("_")
    return parts[3] if len(parts) > 4 else ""


def _blob_token():
    uploads = get_uploads()
    if not isinstance(uploads, BlobUploads):
        raise InvalidField("Client uploads require blob storage")
    return uploads.token


def generate_client_token(token, payload, allowed_content_types):
    if not isinstance(payload, dict) or not isinstance(payload.get("pathname"), str) \
            or not payload["pathname"]:
        raise MissingFields("Missing pathname")

    content_type = payload.get("contentType")
    if content_type and content_type not in allowed_content_types:
        raise InvalidField(f"Content type not allowed: {content_type}")

    claims = json.dumps({
        "pathname": stored_name(payload["pathname"]),
        "allowedContentTypes": list(allowed_content_types),
        "validUntil": now_ms() + CLIENT_TOKEN_TTL_MS,
    }, separators=(",", ":"))
    encoded = base64.b64encode(claims.encode()).decode()
    signed = f"{_hmac_hex(token, encoded.encode())}.{encoded}"

    return f"vercel_blob_client_{_store_id(token)}_{base64.b64encode(signed.encode()).decode()}"


def verify_callback(token, raw_body, signature):
    expected = _hmac_hex(token, raw_body)
    return bool(signature) and hmac.compare_digest(expected.encode(), signature.encode())


def client_token_event(body):
    token = _blob_token()
    if body.get("type") != GENERATE_CLIENT_TOKEN:
        raise InvalidField(f"Unknown upload event: {body.get('type')}")

    client_token = generate_client_token(
        token, body.get("payload"), current_app.config["ALLOWED_CONTENT_TYPES"]
    )
    return {"type": GENERATE_CLIENT_TOKEN, "clientToken": client_token}


def upload_completed_event(body, raw_body, signature):
    if not verify_callback(_blob_token(), raw_body, signature):
        logger.warning("Rejected upload callback with a bad signature")
        raise Unauthorized("Invalid signature")

    blob = (body.get("payload") or {}).get("blob") or {}
    logger.info("Client upload completed: %s", blob.get("url"))
    return {"response": "ok"}
