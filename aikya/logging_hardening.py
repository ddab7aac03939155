"""Logging Hardening and Redaction.

This module provides filters to prevent sensitive data (credential
envelopes, provider tokens, the master key) from appearing in application
logs.
"""
import logging
import re
from typing import Any, Dict

_B64 = r'[A-Za-z0-9+/=]+'

# Envelope components, credential-shaped JSON fields, and key assignments.
SECRET_PATTERNS = [
    (re.compile(r'("iv":\s*")' + _B64 + r'(")'), r'\1[REDACTED]\2'),
    (re.compile(r'("tag":\s*")' + _B64 + r'(")'), r'\1[REDACTED]\2'),
    (re.compile(r'("data":\s*")' + _B64 + r'(")'), r'\1[REDACTED]\2'),
    (re.compile(
        r'("(?:token|access_token|refresh_token|api_key|client_secret|password|secret)":\s*")[^"]*(")'
    ), r'\1[REDACTED]\2'),
    (re.compile(r'(INTEGRATION_MASTER_KEY\s*=\s*)\S+'), r'\1[REDACTED]'),
]

SENSITIVE_KEYS = frozenset({
    "token",
    "access_token",
    "refresh_token",
    "api_key",
    "client_secret",
    "password",
    "secret",
    "credentials",
    "encrypted_payload",
})


def redact_string(text: str) -> str:
    """Redact secret-like patterns from a string."""
    for pattern, replacement in SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def redact_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of *data* with sensitive fields masked, recursing into containers."""
    if not isinstance(data, dict):
        return data

    result: Dict[str, Any] = {}
    for key, value in data.items():
        if str(key).lower() in SENSITIVE_KEYS:
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = redact_dict(value)
        elif isinstance(value, list):
            result[key] = [redact_dict(v) if isinstance(v, dict) else v for v in value]
        else:
            result[key] = value
    return result


class SecretRedactionFilter(logging.Filter):
    """Filter that redacts secret-like patterns from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact_string(record.msg)

        # Also redact arguments if they are strings
        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                redact_string(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        elif record.args and isinstance(record.args, dict):
            # Mapping args from logger.info("%(name)s", {...})
            record.args = {
                key: redact_string(value) if isinstance(value, str) else value
                for key, value in redact_dict(record.args).items()
            }

        return True


def configure_logging(level: str = "INFO") -> None:
    """Install a basic stderr handler at *level*."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def setup_logging_redaction() -> None:
    """Apply the SecretRedactionFilter to all existing loggers."""
    redact_filter = SecretRedactionFilter()

    root_logger = logging.getLogger()

    # Remove existing filters if any (to avoid duplicates)
    for f in root_logger.filters[:]:
        if isinstance(f, SecretRedactionFilter):
            root_logger.removeFilter(f)
    root_logger.addFilter(redact_filter)

    # Logger-level filters do not propagate, so attach to each known logger
    for name in list(logging.root.manager.loggerDict):
        logger = logging.getLogger(name)
        for f in logger.filters[:]:
            if isinstance(f, SecretRedactionFilter):
                logger.removeFilter(f)
        logger.addFilter(redact_filter)

    logging.info("Logging redaction filters active.")
