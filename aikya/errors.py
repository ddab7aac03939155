"""Typed errors for the integration vault and the HTTP error helper."""
from fastapi import HTTPException
from typing import Optional, Dict, Any


class VaultError(Exception):
    """Base exception for all integration vault errors."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(VaultError):
    """Master key missing or unusable. Fatal to the calling operation."""
    pass


class AuthenticationFailure(VaultError):
    """AEAD tag mismatch: the envelope was tampered with or sealed under another key."""
    pass


class EnvelopeFormatError(VaultError):
    """Envelope or its authenticated plaintext could not be parsed."""
    pass


class UnsupportedProvider(VaultError):
    """Integration type is not one of the supported providers."""
    def __init__(self, message: str, provider: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.provider = provider


class IntegrationNotFound(VaultError):
    """Integration ID unknown or owned by another tenant."""
    def __init__(self, message: str, integration_id: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.integration_id = integration_id


class InvalidCredentials(VaultError):
    """Credentials supplied for storage are empty or not a mapping."""
    pass


def raise_aikya_error(
    code: str,
    status_code: int,
    message: str,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """Raise a standardized HTTPException.

    Args:
        code: Error code (VALIDATION_ERROR, NOT_FOUND, etc.)
        status_code: HTTP Status Code (400, 404, etc.)
        message: Human readable message
        details: Optional extra details
    """
    error_body: Dict[str, Any] = {
        "code": code,
        "message": message
    }
    if details:
        error_body["details"] = details

    raise HTTPException(status_code=status_code, detail={"error": error_body})
