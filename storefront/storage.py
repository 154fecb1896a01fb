"""
Collection storage.

Both collections (products, chats) are read and written as a whole JSON
array. Three places can hold them:

- Upstash Redis or Vercel KV, through the Upstash REST protocol
- JSON files under ``DATA_DIR``
- nothing, when running hosted (``VERCEL`` set) without a store; reads then
  come back empty with ``ok=False`` and writes fail

Read-modify-write cycles are not serialized, concurrent writers race and the
last write wins.
"""
import json
import logging
import os
from collections import namedtuple

import httpx
from flask import current_app

from storefront.errors import StorageError

logger = logging.getLogger(__name__)

COLLECTIONS = ("products", "chats")
KEY_PREFIX = "bupg:"

ReadResult = namedtuple("ReadResult", ["ok", "items"])


def _check_collection(name):
    if name not in COLLECTIONS:
        raise ValueError(f"unknown collection: {name}")


# -----------------------------
# LOCAL FILES
# -----------------------------
class FileBackend:
    name = "file"

    def __init__(self, data_dir):
        self.data_dir = data_dir

    def path_for(self, collection):
        _check_collection(collection)
        return os.path.join(self.data_dir, f"{collection}.json")

    def read(self, collection):
        path = self.path_for(collection)
        try:
            with open(path, encoding="utf-8") as fh:
                parsed = json.load(fh)
        except FileNotFoundError:
            return ReadResult(True, [])
        except (OSError, ValueError) as e:
            logger.error("Failed to read %s: %s", path, e)
            return ReadResult(False, [])

        return ReadResult(True, parsed if isinstance(parsed, list) else [])

    def write(self, collection, items):
        path = self.path_for(collection)
        tmp_path = f"{path}.tmp"

        try:
            os.makedirs(self.data_dir, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as fh:
                json.dump(items, fh, ensure_ascii=False, indent=2)

            try:
                os.replace(tmp_path, path)
            except OSError:
                # stale or cross-device target: drop it and retry once
                try:
                    os.remove(path)
                except FileNotFoundError:
                    pass
                os.replace(tmp_path, path)
        except OSError as e:
            try:
                os.remove(tmp_path)
            except OSError:
                pass
            logger.error("Failed to write %s: %s", path, e)
            raise StorageError(f"Could not write {collection}") from e


# -----------------------------
# UPSTASH / VERCEL KV (REST)
# -----------------------------
class RestKVBackend:
    def __init__(self, url, token, name="kv", timeout=10.0, client=None):
        self.url = url.rstrip("/")
        self.token = token
        self.name = name
        self.client = client or httpx.Client(timeout=timeout)

    def key_for(self, collection):
        _check_collection(collection)
        return f"{KEY_PREFIX}{collection}"

    def command(self, *args):
        try:
            response = self.client.post(
                self.url,
                json=list(args),
                headers={"Authorization": f"Bearer {self.token}"},
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise StorageError(f"{self.name} request failed") from e

        if not isinstance(payload, dict):
            raise StorageError(f"{self.name} returned an unexpected payload")
        if payload.get("error"):
            raise StorageError(f"{self.name} error: {payload['error']}")

        return payload.get("result")

    def read(self, collection):
        key = self.key_for(collection)
        try:
            raw = self.command("GET", key)
        except StorageError as e:
            logger.error("Failed to read %s from %s: %s", key, self.name, e)
            return ReadResult(False, [])

        if raw is None:
            return ReadResult(True, [])

        try:
            parsed = json.loads(raw) if isinstance(raw, str) else raw
        except ValueError:
            logger.error("Corrupt value under %s in %s", key, self.name)
            return ReadResult(False, [])

        return ReadResult(True, parsed if isinstance(parsed, list) else [])

    def write(self, collection, items):
        key = self.key_for(collection)
        self.command("SET", key, json.dumps(items, ensure_ascii=False))


# -----------------------------
# HOSTED, NOTHING CONFIGURED
# -----------------------------
class UnconfiguredBackend:
    name = "unconfigured"
    message = (
        "No storage configured: set UPSTASH_REDIS_REST_URL/UPSTASH_REDIS_REST_TOKEN "
        "or KV_REST_API_URL/KV_REST_API_TOKEN"
    )

    def read(self, collection):
        _check_collection(collection)
        return ReadResult(False, [])

    def write(self, collection, items):
        _check_collection(collection)
        raise StorageError(self.message)


def select_backend(config):
    timeout = config.get("STORAGE_TIMEOUT", 10.0)

    if config.get("UPSTASH_REDIS_REST_URL") and config.get("UPSTASH_REDIS_REST_TOKEN"):
        return RestKVBackend(
            config["UPSTASH_REDIS_REST_URL"],
            config["UPSTASH_REDIS_REST_TOKEN"],
            name="upstash",
            timeout=timeout,
        )

    if config.get("KV_REST_API_URL") and config.get("KV_REST_API_TOKEN"):
        return RestKVBackend(
            config["KV_REST_API_URL"],
            config["KV_REST_API_TOKEN"],
            name="vercel-kv",
            timeout=timeout,
        )

    if config.get("VERCEL"):
        return UnconfiguredBackend()

    return FileBackend(config["DATA_DIR"])


def init_storage(app):
    backend = select_backend(app.config)
    app.extensions["storage"] = backend
    logger.info("Using %s storage backend", backend.name)
    return backend


def get_storage():
    return current_app.extensions["storage"]
