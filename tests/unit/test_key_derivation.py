"""Tests for master key derivation."""
import base64
import hashlib

import pytest

from aikya.domain.integrations.keys import derive_key, describe_key_source, key_fingerprint
from aikya.errors import ConfigurationError


def test_hex_key_decodes_to_literal_bytes():
    raw = "0123456789abcdef" * 4
    assert derive_key(raw) == bytes.fromhex(raw)
    assert describe_key_source(raw) == "hex"


def test_uppercase_hex_is_accepted():
    raw = "AB" * 32
    assert derive_key(raw) == b"\xab" * 32


def test_base64_of_32_bytes_is_used_verbatim():
    key = bytes(range(32))
    raw = base64.b64encode(key).decode()

    assert derive_key(raw) == key
    assert describe_key_source(raw) == "base64"


def test_unpadded_base64_of_32_bytes_is_used_verbatim():
    key = bytes(range(32))
    raw = base64.b64encode(key).decode().rstrip("=")

    assert len(raw) == 43
    assert derive_key(raw) == key
    assert describe_key_source(raw) == "base64"


@pytest.mark.parametrize("raw", [
    base64.urlsafe_b64encode(b"\xfb" * 32).decode(),  # URL-safe alphabet
    "AAAA AAAA" + "A" * 35,                           # embedded whitespace
])
def test_non_standard_base64_is_hashed(raw):
    assert derive_key(raw) == hashlib.sha256(raw.encode("utf-8")).digest()
    assert describe_key_source(raw) == "sha256"


def test_32_byte_text_that_is_not_base64_is_used_as_utf8():
    raw = "x" * 31 + "!"
    assert derive_key(raw) == raw.encode("utf-8")
    assert describe_key_source(raw) == "utf8"


@pytest.mark.parametrize("raw", [
    "correct horse battery staple",  # not base64, not 32 bytes
    "c2hvcnQ=",                      # valid base64, decodes to 5 bytes
    "g" * 64,                        # 64 chars but not hex
    "clé-maître",                    # non-ASCII
])
def test_other_inputs_fall_back_to_sha256_of_raw_string(raw):
    assert derive_key(raw) == hashlib.sha256(raw.encode("utf-8")).digest()
    assert describe_key_source(raw) == "sha256"


def test_derivation_is_deterministic():
    raw = "dev-master-key"
    first = derive_key(raw)
    assert derive_key(raw) == first
    assert len(first) == 32


@pytest.mark.parametrize("raw", [None, ""])
def test_missing_key_raises(raw):
    with pytest.raises(ConfigurationError, match="master key not set"):
        derive_key(raw)


def test_fingerprint_does_not_reveal_key():
    raw = "00" * 32
    fp = key_fingerprint(raw)

    assert len(fp) == 16
    assert fp != raw[:16]
    assert fp == hashlib.sha256(b"\x00" * 32).hexdigest()[:16]
