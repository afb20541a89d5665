"""Identifier and content digest helpers."""

from __future__ import annotations

import json
import secrets
from hashlib import sha256
from typing import Any


def generate_id() -> str:
    """Return a fresh 128-bit identifier, hex-encoded."""
    return secrets.token_hex(16)


def content_digest(content: Any) -> str:
    """SHA-256 hex digest of document content.

    Text is hashed as UTF-8; structured content is hashed over its canonical
    JSON form so equal payloads always share a digest.
    """
    if isinstance(content, bytes):
        raw = content
    elif isinstance(content, str):
        raw = content.encode("utf-8")
    else:
        raw = json.dumps(content, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return sha256(raw).hexdigest()
