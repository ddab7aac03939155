"""Memory Store Implementations."""
from datetime import datetime, timezone
from typing import Dict, List, Optional
import itertools
import logging

from aikya.domain.integrations.gateway import parse_configuration
from aikya.domain.integrations.models import IntegrationRow, IntegrationSummary
from aikya.domain.integrations.ports import IntegrationStore

logger = logging.getLogger(__name__)


class InMemoryIntegrationStore(IntegrationStore):
    """Process-local integration store for tests and dev mode."""

    def __init__(self) -> None:
        self._integrations: Dict[int, dict] = {}
        self._secrets: Dict[int, str] = {}
        self._ids = itertools.count(1)

    def fetch_active(self, tenant_id: str, integration_type: str) -> Optional[IntegrationRow]:
        for integration_id, data in self._integrations.items():
            if data["org"] == tenant_id and data["type"] == integration_type and data["is_active"]:
                return IntegrationRow(
                    id=integration_id,
                    configuration=data["configuration"],
                    encrypted_payload=self._secrets.get(integration_id),
                )
        return None

    def list_integrations(self, tenant_id: str) -> List[IntegrationSummary]:
        summaries = [
            IntegrationSummary(
                id=integration_id,
                type=data["type"],
                name=data["name"],
                is_active=data["is_active"],
                has_credentials=integration_id in self._secrets,
                configuration=parse_configuration(data["configuration"]),
                created_at=data["created_at"],
                updated_at=data["updated_at"],
            )
            for integration_id, data in self._integrations.items()
            if data["org"] == tenant_id
        ]
        return sorted(summaries, key=lambda s: (s.created_at, s.id), reverse=True)

    def upsert_integration(
        self,
        tenant_id: str,
        user_id: Optional[str],
        integration_type: str,
        name: str,
        configuration: Optional[str],
    ) -> int:
        now = datetime.now(timezone.utc)
        for integration_id, data in self._integrations.items():
            if data["org"] == tenant_id and data["type"] == integration_type:
                data.update(name=name, configuration=configuration, is_active=True, updated_at=now)
                return integration_id

        integration_id = next(self._ids)
        self._integrations[integration_id] = {
            "org": tenant_id,
            "type": integration_type,
            "name": name,
            "configuration": configuration,
            "is_active": True,
            "created_by": user_id,
            "created_at": now,
            "updated_at": now,
        }
        return integration_id

    def store_secret(self, tenant_id: str, integration_id: int, encrypted_payload: str) -> bool:
        data = self._integrations.get(integration_id)
        if not data or data["org"] != tenant_id:
            return False
        self._secrets[integration_id] = encrypted_payload
        return True

    def deactivate(self, tenant_id: str, integration_id: int) -> bool:
        data = self._integrations.get(integration_id)
        if not data or data["org"] != tenant_id:
            return False
        data["is_active"] = False
        data["updated_at"] = datetime.now(timezone.utc)
        self._secrets.pop(integration_id, None)
        return True
