"""Envelope Codec: AES-256-GCM sealing of integration credentials.

The key is derived from the configured master key on every call; nothing
derived from it outlives the call.
"""
import base64
import binascii
import json
import os
from typing import Any, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from aikya.errors import AuthenticationFailure, EnvelopeFormatError
from .keys import derive_key
from .models import ENVELOPE_VERSION_V1, EncryptedEnvelope
from .ports import CredentialCipher

NONCE_LENGTH = 12
TAG_LENGTH = 16


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _unb64(field: str, value: str, expected_len: Optional[int] = None) -> bytes:
    try:
        raw = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise EnvelopeFormatError(f"Envelope field '{field}' is not valid base64") from exc
    if expected_len is not None and len(raw) != expected_len:
        raise EnvelopeFormatError(
            f"Envelope field '{field}' must be {expected_len} bytes",
            details={"field": field, "length": len(raw)},
        )
    return raw


class EnvelopeCodec(CredentialCipher):
    """Stateless AES-256-GCM codec keyed by the process master key.

    The raw master key is injected once; a missing key is only an error when
    an encrypt or decrypt call actually needs it.
    """

    def __init__(self, master_key: Optional[str]):
        self._master_key = master_key

    def encrypt(self, value: Any) -> EncryptedEnvelope:
        """Serialize ``value`` as JSON and seal it.

        Raises:
            ConfigurationError: if the master key is not set.
        """
        key = derive_key(self._master_key)
        plaintext = json.dumps(value).encode("utf-8")
        iv = os.urandom(NONCE_LENGTH)
        ct_and_tag = AESGCM(key).encrypt(iv, plaintext, None)

        return EncryptedEnvelope(
            v=ENVELOPE_VERSION_V1,
            iv=_b64(iv),
            tag=_b64(ct_and_tag[-TAG_LENGTH:]),
            data=_b64(ct_and_tag[:-TAG_LENGTH]),
        )

    def decrypt(self, envelope: Optional[EncryptedEnvelope]) -> Any:
        """Authenticate and open ``envelope``; ``None`` means no secret stored.

        Raises:
            ConfigurationError: if the master key is not set.
            AuthenticationFailure: if the tag does not verify.
            EnvelopeFormatError: if fields or the recovered plaintext are malformed.
        """
        if envelope is None:
            return None

        if envelope.v != ENVELOPE_VERSION_V1:
            raise EnvelopeFormatError(f"Unsupported envelope version: {envelope.v}")

        iv = _unb64("iv", envelope.iv, NONCE_LENGTH)
        tag = _unb64("tag", envelope.tag, TAG_LENGTH)
        data = _unb64("data", envelope.data)

        key = derive_key(self._master_key)
        try:
            # AESGCM verifies the tag (constant time) before releasing plaintext
            plaintext = AESGCM(key).decrypt(iv, data + tag, None)
        except InvalidTag as exc:
            raise AuthenticationFailure("Envelope authentication failed") from exc

        try:
            return json.loads(plaintext.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise EnvelopeFormatError("Authenticated payload is not valid JSON") from exc
