"""Integration Vault Ports (Interfaces)."""
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from .models import EncryptedEnvelope, IntegrationRow, IntegrationSummary


class CredentialCipher(ABC):
    """Abstract Port for sealing credential values at rest."""

    @abstractmethod
    def encrypt(self, value: Any) -> EncryptedEnvelope:
        """Serialize and encrypt a JSON-shaped value."""
        ...

    @abstractmethod
    def decrypt(self, envelope: Optional[EncryptedEnvelope]) -> Any:
        """Authenticate and decrypt an envelope. ``None`` passes through."""
        ...


class IntegrationStore(ABC):
    """Abstract Port for integration persistence."""

    @abstractmethod
    def fetch_active(self, tenant_id: str, integration_type: str) -> Optional[IntegrationRow]:
        """Return the active integration of this type with its secret blob, if any."""
        ...

    @abstractmethod
    def list_integrations(self, tenant_id: str) -> List[IntegrationSummary]:
        """List integration metadata for a tenant, newest first (no secrets)."""
        ...

    @abstractmethod
    def upsert_integration(
        self,
        tenant_id: str,
        user_id: Optional[str],
        integration_type: str,
        name: str,
        configuration: str,
    ) -> int:
        """Create or reactivate the tenant's integration of this type. Returns its id."""
        ...

    @abstractmethod
    def store_secret(self, tenant_id: str, integration_id: int, encrypted_payload: str) -> bool:
        """Create or replace the secret blob owned by an integration.

        Returns False if the integration does not belong to *tenant_id*.
        """
        ...

    @abstractmethod
    def deactivate(self, tenant_id: str, integration_id: int) -> bool:
        """Mark an integration inactive and drop its secret. False if not found."""
        ...
