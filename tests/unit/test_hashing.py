"""Unit tests for identifier and digest helpers."""

from hashlib import sha256

from app.utils.hashing import content_digest, generate_id


def test_generate_id_is_32_hex_chars():
    value = generate_id()
    assert len(value) == 32
    int(value, 16)


def test_generate_id_is_unique():
    assert len({generate_id() for _ in range(200)}) == 200


def test_content_digest_of_text_matches_sha256():
    assert content_digest("bill of lading") == sha256(b"bill of lading").hexdigest()


def test_content_digest_of_bytes():
    assert content_digest(b"\x00\x01") == sha256(b"\x00\x01").hexdigest()


def test_content_digest_of_structured_content_ignores_key_order():
    assert content_digest({"a": 1, "b": [1, 2]}) == content_digest({"b": [1, 2], "a": 1})
    assert content_digest({"a": 1}) != content_digest({"a": 2})
