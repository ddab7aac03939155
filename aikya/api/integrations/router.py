"""Integrations API.

Secret material never leaves this router: connect accepts credentials,
status reports whether they can be opened, nothing returns them.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, Field

from aikya.dependencies import get_credential_gateway
from aikya.domain.integrations.gateway import CredentialGateway
from aikya.domain.integrations.models import IntegrationSummary
from aikya.errors import (
    ConfigurationError,
    InvalidCredentials,
    UnsupportedProvider,
    raise_aikya_error,
)

router = APIRouter(prefix="/api/orgs/{org_id}/integrations", tags=["integrations"])
logger = logging.getLogger(__name__)


class ConnectRequest(BaseModel):
    provider: str
    display_name: Optional[str] = None
    connection_method: str = "api"
    credentials: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ConnectResponse(BaseModel):
    id: int
    type: str
    name: str
    is_active: bool


class IntegrationStatus(BaseModel):
    id: int
    type: str
    configuration: Dict[str, Any]
    connected: bool
    needs_reconnect: bool


@router.get("", response_model=List[IntegrationSummary])
async def list_integrations(
    org_id: str,
    gateway: CredentialGateway = Depends(get_credential_gateway),
):
    return gateway.list_integrations(org_id)


@router.post("/connect", response_model=ConnectResponse)
async def connect_integration(
    org_id: str,
    body: ConnectRequest,
    x_user_id: Optional[str] = Header(default=None),
    gateway: CredentialGateway = Depends(get_credential_gateway),
):
    try:
        summary = gateway.connect(
            tenant_id=org_id,
            user_id=x_user_id,
            provider=body.provider,
            credentials=body.credentials,
            display_name=body.display_name,
            connection_method=body.connection_method,
            metadata=body.metadata,
        )
    except UnsupportedProvider:
        raise_aikya_error("UNSUPPORTED_PROVIDER", 400, "Unsupported integration provider.")
    except InvalidCredentials:
        raise_aikya_error("VALIDATION_ERROR", 400, "Credentials are required to connect.")
    except ConfigurationError:
        # Reason stays server-side
        logger.error("Integration encryption unavailable: master key is not configured")
        raise_aikya_error("CONFIGURATION_ERROR", 500, "Failed to secure credentials.")

    return ConnectResponse(id=summary.id, type=summary.type, name=summary.name, is_active=summary.is_active)


@router.get("/{integration_type}/status", response_model=IntegrationStatus)
async def integration_status(
    org_id: str,
    integration_type: str,
    gateway: CredentialGateway = Depends(get_credential_gateway),
):
    try:
        record = gateway.fetch(org_id, integration_type)
    except ConfigurationError:
        logger.error("Integration decryption unavailable: master key is not configured")
        raise_aikya_error("CONFIGURATION_ERROR", 500, "Internal server error.")

    if record is None:
        raise_aikya_error("NOT_FOUND", 404, "Integration not found.")

    connected = record.credentials is not None
    return IntegrationStatus(
        id=record.id,
        type=integration_type,
        configuration=record.configuration,
        connected=connected,
        needs_reconnect=not connected,
    )


@router.post("/{integration_id}/disconnect")
async def disconnect_integration(
    org_id: str,
    integration_id: int,
    gateway: CredentialGateway = Depends(get_credential_gateway),
):
    if not gateway.disconnect(org_id, integration_id):
        raise_aikya_error("NOT_FOUND", 404, "Integration not found.")
    return {"disconnected": True}
