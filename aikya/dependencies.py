"""Dependency Injection Module."""
import logging
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from aikya.adapters.postgres.integration_store import PostgresIntegrationStore
from aikya.adapters.postgres.session import get_db
from aikya.domain.integrations.codec import EnvelopeCodec
from aikya.domain.integrations.gateway import CredentialGateway
from aikya.domain.integrations.ports import CredentialCipher, IntegrationStore
from aikya.settings import settings

logger = logging.getLogger(__name__)


@lru_cache
def get_envelope_codec() -> CredentialCipher:
    """Codec bound to the configured master key.

    The raw key string is injected once here; a missing key surfaces as
    ConfigurationError on first use, not at startup.
    """
    return EnvelopeCodec(settings.INTEGRATION_MASTER_KEY)


def get_integration_store(db: Session = Depends(get_db)) -> IntegrationStore:
    return PostgresIntegrationStore(db)


def get_credential_gateway(
    store: IntegrationStore = Depends(get_integration_store),
    codec: CredentialCipher = Depends(get_envelope_codec),
) -> CredentialGateway:
    return CredentialGateway(store, codec)
