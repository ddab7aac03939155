"""Integration Vault Domain Models."""
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from aikya.errors import EnvelopeFormatError

ENVELOPE_VERSION_V1 = 1


class EncryptedEnvelope(BaseModel):
    """
    Versioned container for one encrypted value.

    Binary fields are standard base64. Persisted as
    ``{"v": 1, "iv": "...", "tag": "...", "data": "..."}``.
    """
    model_config = ConfigDict(frozen=True)

    v: int = Field(default=ENVELOPE_VERSION_V1)
    iv: str = Field(..., min_length=1)    # 12 bytes
    tag: str = Field(..., min_length=1)   # 16 bytes
    data: str = Field(..., min_length=1)  # same length as the serialized plaintext

    @field_validator("v")
    @classmethod
    def validate_version(cls, v):
        if v != ENVELOPE_VERSION_V1:
            raise ValueError(f"Unsupported envelope version: {v}")
        return v

    def to_json(self) -> str:
        return json.dumps(self.model_dump())

    @classmethod
    def from_json(cls, blob: str) -> "EncryptedEnvelope":
        """Parse the stored JSON wrapper.

        Raises:
            EnvelopeFormatError: if the wrapper is not JSON or misses fields.
        """
        try:
            return cls.model_validate_json(blob)
        except ValidationError as exc:
            # Never echo the input; it is ciphertext material
            raise EnvelopeFormatError(
                "Malformed envelope wrapper",
                details={"errors": exc.error_count()},
            ) from exc


class IntegrationRecord(BaseModel):
    """Normalized view of one integration returned to callers.

    ``credentials`` is ``None`` when no secret is stored or when it could not
    be decrypted; callers treat that as "integration needs reconnection".
    """
    id: int
    configuration: Dict[str, Any] = Field(default_factory=dict)
    credentials: Optional[Dict[str, Any]] = None


class IntegrationSummary(BaseModel):
    """Listing metadata. Never carries secret material."""
    id: int
    type: str
    name: str
    is_active: bool = True
    has_credentials: bool = False
    configuration: Dict[str, Any] = Field(default_factory=dict)
    last_sync: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class IntegrationRow:
    """Raw store row for one active integration left-joined with its secret."""
    id: int
    configuration: Optional[str] = None
    encrypted_payload: Optional[str] = None
