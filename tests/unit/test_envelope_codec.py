"""Tests for the AES-256-GCM Envelope Codec."""
import base64
import json
import logging

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from aikya.domain.integrations.codec import EnvelopeCodec
from aikya.domain.integrations.keys import derive_key
from aikya.domain.integrations.models import EncryptedEnvelope
from aikya.errors import AuthenticationFailure, ConfigurationError, EnvelopeFormatError

ZERO_KEY = "00" * 32


def flip_bit(b64_value: str, byte_index: int, bit: int = 0) -> str:
    raw = bytearray(base64.b64decode(b64_value))
    raw[byte_index] ^= 1 << bit
    return base64.b64encode(bytes(raw)).decode("ascii")


@pytest.fixture
def codec():
    return EnvelopeCodec(ZERO_KEY)


def test_zero_key_example(codec):
    """64 hex zeros give an all-zero key and a well-formed v1 envelope."""
    assert derive_key(ZERO_KEY) == b"\x00" * 32

    envelope = codec.encrypt({"token": "abc"})

    assert envelope.v == 1
    assert len(base64.b64decode(envelope.iv)) == 12
    assert len(base64.b64decode(envelope.tag)) == 16
    assert codec.decrypt(envelope) == {"token": "abc"}


@pytest.mark.parametrize("value", [
    {"api_key": "sk-live-123", "region": "eu-west-1"},
    {"nested": {"scopes": ["repo", "read:org"], "expires_in": 3600, "ok": True}},
    {"unicode": "clé secrète ✓"},
    ["a", 1, None],
    "plain-string-token",
])
def test_round_trip(codec, value):
    assert codec.decrypt(codec.encrypt(value)) == value


def test_ciphertext_length_matches_plaintext(codec):
    value = {"token": "abc", "team": "infra"}
    envelope = codec.encrypt(value)
    assert len(base64.b64decode(envelope.data)) == len(json.dumps(value).encode("utf-8"))


def test_same_value_twice_uses_fresh_nonce(codec):
    first = codec.encrypt({"token": "abc"})
    second = codec.encrypt({"token": "abc"})

    assert first.iv != second.iv
    assert first.data != second.data


@pytest.mark.parametrize("byte_index", [0, 7, 15])
def test_flipped_tag_bit_fails_authentication(codec, byte_index):
    envelope = codec.encrypt({"token": "abc"})
    tampered = envelope.model_copy(update={"tag": flip_bit(envelope.tag, byte_index)})

    with pytest.raises(AuthenticationFailure):
        codec.decrypt(tampered)


def test_flipped_data_bit_fails_authentication(codec):
    envelope = codec.encrypt({"token": "abcdef"})
    data_len = len(base64.b64decode(envelope.data))

    for index in range(data_len):
        tampered = envelope.model_copy(update={"data": flip_bit(envelope.data, index, bit=index % 8)})
        with pytest.raises(AuthenticationFailure):
            codec.decrypt(tampered)


def test_wrong_key_fails_authentication(codec):
    envelope = codec.encrypt({"token": "abc"})
    other = EnvelopeCodec("another-master-key")

    with pytest.raises(AuthenticationFailure):
        other.decrypt(envelope)


def test_decrypt_none_returns_none_without_key():
    """No stored secret is a valid state, even when no key is configured."""
    assert EnvelopeCodec(None).decrypt(None) is None


@pytest.mark.parametrize("missing", [None, ""])
def test_missing_master_key_is_configuration_error(missing, codec):
    envelope = codec.encrypt({"token": "abc"})
    unconfigured = EnvelopeCodec(missing)

    with pytest.raises(ConfigurationError, match="master key not set"):
        unconfigured.encrypt({"token": "abc"})
    with pytest.raises(ConfigurationError):
        unconfigured.decrypt(envelope)


def test_wrong_nonce_length_is_format_error(codec):
    envelope = codec.encrypt({"token": "abc"})
    short_iv = envelope.model_copy(update={"iv": base64.b64encode(b"\x00" * 8).decode()})

    with pytest.raises(EnvelopeFormatError):
        codec.decrypt(short_iv)


def test_non_base64_field_is_format_error(codec):
    envelope = codec.encrypt({"token": "abc"})
    broken = envelope.model_copy(update={"data": "***not-base64***"})

    with pytest.raises(EnvelopeFormatError):
        codec.decrypt(broken)


def test_authenticated_non_json_payload_is_format_error(codec):
    """A payload that authenticates but does not parse must not leak a partial value."""
    iv = b"\x01" * 12
    sealed = AESGCM(derive_key(ZERO_KEY)).encrypt(iv, b"{truncated", None)
    envelope = EncryptedEnvelope(
        v=1,
        iv=base64.b64encode(iv).decode(),
        tag=base64.b64encode(sealed[-16:]).decode(),
        data=base64.b64encode(sealed[:-16]).decode(),
    )

    with pytest.raises(EnvelopeFormatError):
        codec.decrypt(envelope)


def test_wrapper_json_round_trip(codec):
    envelope = codec.encrypt({"token": "abc"})
    stored = envelope.to_json()

    assert list(json.loads(stored)) == ["v", "iv", "tag", "data"]
    assert codec.decrypt(EncryptedEnvelope.from_json(stored)) == {"token": "abc"}


@pytest.mark.parametrize("blob", [
    "{not json",
    "[]",
    json.dumps({"v": 1, "iv": "AAAA"}),
    json.dumps({"v": 2, "iv": "AAAA", "tag": "AAAA", "data": "AAAA"}),
])
def test_malformed_wrapper_is_format_error(blob):
    with pytest.raises(EnvelopeFormatError):
        EncryptedEnvelope.from_json(blob)


def test_codec_never_logs(codec, caplog):
    with caplog.at_level(logging.DEBUG):
        codec.decrypt(codec.encrypt({"token": "abc"}))
    assert caplog.records == []
