"""Master key material derivation.

The operator supplies ``INTEGRATION_MASTER_KEY`` as 64 hex characters, as
standard base64 (padding optional), or as arbitrary text. Whatever the
shape, the result is a 32-byte AES-256 key.
"""
import base64
import binascii
import hashlib
import re
from typing import Optional, Tuple

from aikya.errors import ConfigurationError

KEY_LENGTH = 32

SOURCE_HEX = "hex"
SOURCE_BASE64 = "base64"
SOURCE_UTF8 = "utf8"
SOURCE_SHA256 = "sha256"

_HEX_KEY = re.compile(r"[0-9a-fA-F]{64}")


def _decode(raw: Optional[str]) -> Tuple[str, bytes]:
    if not raw:
        raise ConfigurationError("master key not set")

    if _HEX_KEY.fullmatch(raw):
        return SOURCE_HEX, bytes.fromhex(raw)

    try:
        # Missing "=" padding is tolerated; the URL-safe alphabet is not
        padded = raw + "=" * (-len(raw) % 4)
        source, buf = SOURCE_BASE64, base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError):
        source, buf = SOURCE_UTF8, raw.encode("utf-8")

    if len(buf) != KEY_LENGTH:
        # Hash the original string, not whatever the failed decode produced
        return SOURCE_SHA256, hashlib.sha256(raw.encode("utf-8")).digest()
    return source, buf


def derive_key(raw: Optional[str]) -> bytes:
    """Derive the 32-byte cipher key from the raw master key string.

    Raises:
        ConfigurationError: if ``raw`` is empty or missing.
    """
    return _decode(raw)[1]


def describe_key_source(raw: Optional[str]) -> str:
    """Return which derivation branch ``raw`` takes (hex, base64, utf8 or sha256)."""
    return _decode(raw)[0]


def key_fingerprint(raw: Optional[str]) -> str:
    """Short, non-reversible fingerprint of the derived key for operator checks."""
    return hashlib.sha256(derive_key(raw)).hexdigest()[:16]
