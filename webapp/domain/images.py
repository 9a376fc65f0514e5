"""Domain helpers for image uploads (allowed types, storage keys)."""
from __future__ import annotations

import re
import secrets

ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png"})
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def is_allowed_content_type(content_type: str | None) -> bool:
    return (content_type or "").strip().lower() in ALLOWED_CONTENT_TYPES


def safe_file_name(file_name: str | None) -> str:
    """Keep only the basename and replace characters unsafe in an object key."""
    base = (file_name or "").replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned or "upload"


def build_storage_key(owner_id: int | str, file_name: str | None) -> str:
    """Return ``<owner>/<random token>_<file name>``; the token makes keys unpredictable."""
    return f"{owner_id}/{secrets.token_hex(16)}_{safe_file_name(file_name)}"
