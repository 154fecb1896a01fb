import re
import secrets
import time
from datetime import datetime, timezone

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def to_base36(number):
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def now_ms():
    return int(time.time() * 1000)


def generate_id(prefix):
    """``<prefix>-<epoch ms in base36>-<5 random base36 chars>``"""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"{prefix}-{to_base36(now_ms())}-{suffix}"


def now_iso():
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def sanitize_filename(name):
    return _UNSAFE_FILENAME_CHARS.sub("_", name or "")
