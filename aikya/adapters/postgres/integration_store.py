"""PostgresIntegrationStore - Database-backed integrations with encrypted secrets."""
import logging
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from aikya.adapters.postgres.models import Integration, IntegrationSecret
from aikya.domain.integrations.gateway import parse_configuration
from aikya.domain.integrations.models import IntegrationRow, IntegrationSummary
from aikya.domain.integrations.ports import IntegrationStore

logger = logging.getLogger(__name__)


class PostgresIntegrationStore(IntegrationStore):
    """SQLAlchemy implementation of the integration store.

    Secret blobs are stored exactly as handed in (JSON envelopes); this
    adapter never sees plaintext credentials.
    """

    def __init__(self, db: Session):
        self._db = db

    def fetch_active(self, tenant_id: str, integration_type: str) -> Optional[IntegrationRow]:
        row = (
            self._db.query(
                Integration.id,
                Integration.configuration,
                IntegrationSecret.encrypted_payload,
            )
            .outerjoin(IntegrationSecret, IntegrationSecret.integration_id == Integration.id)
            .filter(
                Integration.organization_id == tenant_id,
                Integration.type == integration_type,
                Integration.is_active.is_(True),
            )
            .first()
        )
        if row is None:
            return None
        return IntegrationRow(id=row.id, configuration=row.configuration, encrypted_payload=row.encrypted_payload)

    def list_integrations(self, tenant_id: str) -> List[IntegrationSummary]:
        rows = (
            self._db.query(Integration, IntegrationSecret.id.label("secret_id"))
            .outerjoin(IntegrationSecret, IntegrationSecret.integration_id == Integration.id)
            .filter(Integration.organization_id == tenant_id)
            .order_by(desc(Integration.created_at), desc(Integration.id))
            .all()
        )
        return [
            IntegrationSummary(
                id=i.id,
                type=i.type,
                name=i.name,
                is_active=bool(i.is_active),
                has_credentials=secret_id is not None,
                configuration=parse_configuration(i.configuration),
                last_sync=i.last_sync,
                created_at=i.created_at,
                updated_at=i.updated_at,
            )
            for i, secret_id in rows
        ]

    def upsert_integration(
        self,
        tenant_id: str,
        user_id: Optional[str],
        integration_type: str,
        name: str,
        configuration: str,
    ) -> int:
        existing = (
            self._db.query(Integration)
            .filter(Integration.organization_id == tenant_id, Integration.type == integration_type)
            .first()
        )
        if existing:
            existing.name = name
            existing.configuration = configuration
            existing.is_active = True
            self._db.commit()
            return existing.id

        integration = Integration(
            organization_id=tenant_id,
            type=integration_type,
            name=name,
            configuration=configuration,
            is_active=True,
            created_by=user_id,
        )
        self._db.add(integration)
        self._db.commit()
        return integration.id

    def store_secret(self, tenant_id: str, integration_id: int, encrypted_payload: str) -> bool:
        owner = (
            self._db.query(Integration)
            .filter(Integration.id == integration_id, Integration.organization_id == tenant_id)
            .first()
        )
        if not owner:
            return False

        existing = (
            self._db.query(IntegrationSecret)
            .filter(IntegrationSecret.integration_id == integration_id)
            .first()
        )
        if existing:
            existing.encrypted_payload = encrypted_payload
        else:
            self._db.add(IntegrationSecret(
                organization_id=tenant_id,
                integration_id=integration_id,
                encrypted_payload=encrypted_payload,
            ))
        self._db.commit()
        return True

    def deactivate(self, tenant_id: str, integration_id: int) -> bool:
        integration = (
            self._db.query(Integration)
            .filter(Integration.id == integration_id, Integration.organization_id == tenant_id)
            .first()
        )
        if not integration:
            return False

        integration.is_active = False
        self._db.query(IntegrationSecret).filter(
            IntegrationSecret.integration_id == integration_id
        ).delete(synchronize_session="fetch")
        self._db.commit()
        return True
