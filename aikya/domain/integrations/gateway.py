"""Credential Store Gateway.

Joins an integration's non-secret configuration with its decrypted
credentials. A secret that cannot be opened never fails the request: the
record comes back with ``credentials=None`` and the failure is logged.
Credentials are NEVER cached past the call that decrypted them.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from aikya.errors import (
    AuthenticationFailure,
    EnvelopeFormatError,
    IntegrationNotFound,
    InvalidCredentials,
    UnsupportedProvider,
)
from .models import EncryptedEnvelope, IntegrationRecord, IntegrationSummary
from .ports import CredentialCipher, IntegrationStore

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS: frozenset[str] = frozenset({
    "github",
    "gitlab",
    "aws",
    "azure",
    "gcp",
    "datadog",
    "grafana",
    "prometheus",
    "slack",
    "pagerduty",
    "jenkins",
})


def parse_configuration(value: Optional[str]) -> Dict[str, Any]:
    """Best-effort parse of the stored configuration; anything unusable is ``{}``."""
    if not value:
        return {}
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


@dataclass(frozen=True)
class DecryptOutcome:
    """Result of opening a secret blob: either credentials or the typed error."""
    credentials: Optional[Dict[str, Any]] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CredentialGateway:
    """Tenant-scoped access to integrations and their encrypted credentials.

    Args:
        store: Persistence port for integrations and secret blobs.
        cipher: Codec used to seal and open credentials.
    """

    def __init__(self, store: IntegrationStore, cipher: CredentialCipher) -> None:
        self._store = store
        self._cipher = cipher

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def fetch(self, tenant_id: str, integration_type: str) -> Optional[IntegrationRecord]:
        """Return the tenant's active integration of this type, or ``None``.

        Raises:
            ConfigurationError: if the master key is not set. Decrypt failures
                are not raised; they yield ``credentials=None``.
        """
        row = self._store.fetch_active(tenant_id, integration_type)
        if row is None:
            return None

        credentials = None
        if row.encrypted_payload:
            outcome = self._open_secret(row.encrypted_payload)
            if outcome.ok:
                credentials = outcome.credentials
            else:
                self._log_failure(tenant_id, row.id, outcome.error)

        return IntegrationRecord(
            id=row.id,
            configuration=parse_configuration(row.configuration),
            credentials=credentials,
        )

    def _open_secret(self, blob: str) -> DecryptOutcome:
        try:
            value = self._cipher.decrypt(EncryptedEnvelope.from_json(blob))
        except (AuthenticationFailure, EnvelopeFormatError) as exc:
            return DecryptOutcome(error=exc)

        if not isinstance(value, dict):
            return DecryptOutcome(error=EnvelopeFormatError("Decrypted credentials are not a mapping"))
        return DecryptOutcome(credentials=value)

    @staticmethod
    def _log_failure(tenant_id: str, integration_id: int, error: Optional[Exception]) -> None:
        failure = type(error).__name__
        if isinstance(error, AuthenticationFailure):
            logger.error(
                "[Vault] Credential authentication failed (tampering or key mismatch) "
                "tenant=%s integration_id=%s failure=%s",
                tenant_id, integration_id, failure,
            )
        else:
            logger.error(
                "[Vault] Failed to decrypt integration credentials tenant=%s integration_id=%s failure=%s",
                tenant_id, integration_id, failure,
            )

    def list_integrations(self, tenant_id: str) -> List[IntegrationSummary]:
        """Return metadata for every integration of *tenant_id*. Never decrypts."""
        return self._store.list_integrations(tenant_id)

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def store_credentials(self, tenant_id: str, integration_id: int, credentials: Dict[str, Any]) -> None:
        """Encrypt *credentials* and persist the envelope for *integration_id*.

        Raises:
            ConfigurationError: if the master key is not set.
            IntegrationNotFound: if *integration_id* does not belong to *tenant_id*.
        """
        envelope = self._cipher.encrypt(credentials)
        if not self._store.store_secret(tenant_id, integration_id, envelope.to_json()):
            raise IntegrationNotFound(
                f"Integration '{integration_id}' not found",
                integration_id=integration_id,
            )

    def connect(
        self,
        *,
        tenant_id: str,
        user_id: Optional[str],
        provider: str,
        credentials: Dict[str, Any],
        display_name: Optional[str] = None,
        connection_method: str = "api",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> IntegrationSummary:
        """Create or reactivate an integration and seal its credentials.

        Raises:
            UnsupportedProvider: unknown *provider*.
            InvalidCredentials: *credentials* empty or not a dict.
            ConfigurationError: master key not set.
        """
        if provider not in SUPPORTED_PROVIDERS:
            raise UnsupportedProvider(f"Unsupported integration provider '{provider}'", provider=provider)
        if not isinstance(credentials, dict) or not credentials:
            raise InvalidCredentials("Credentials are required to connect")

        # Seal first so a missing master key leaves no half-connected row behind
        envelope = self._cipher.encrypt(credentials)

        name = display_name or provider.upper()
        configuration = json.dumps({
            "connection_method": connection_method,
            "metadata": metadata or {},
        })
        integration_id = self._store.upsert_integration(tenant_id, user_id, provider, name, configuration)
        self._store.store_secret(tenant_id, integration_id, envelope.to_json())
        logger.info("[Vault] Connected %s integration %s for tenant %s", provider, integration_id, tenant_id)

        return IntegrationSummary(
            id=integration_id,
            type=provider,
            name=name,
            is_active=True,
            has_credentials=True,
            configuration=parse_configuration(configuration),
        )

    def disconnect(self, tenant_id: str, integration_id: int) -> bool:
        """Deactivate an integration and destroy its stored secret.

        Returns:
            ``False`` if the integration does not exist for *tenant_id*.
        """
        removed = self._store.deactivate(tenant_id, integration_id)
        if removed:
            logger.info("[Vault] Disconnected integration %s for tenant %s", integration_id, tenant_id)
        return removed
