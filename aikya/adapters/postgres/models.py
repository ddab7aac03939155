"""SQLAlchemy Models for integrations and their secrets."""
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Integration(Base):
    """Third-party integration connected by an organization."""
    __tablename__ = "integrations"
    id = Column(Integer, primary_key=True, autoincrement=True)
    organization_id = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False)
    name = Column(String(255), nullable=False)
    configuration = Column(Text, nullable=True)  # JSON, non-secret
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(String(255), nullable=True)
    last_sync = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    secret = relationship(
        "IntegrationSecret",
        back_populates="integration",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_integrations_org_type", "organization_id", "type"),
    )


class IntegrationSecret(Base):
    """Encrypted credentials of one integration (JSON envelope)."""
    __tablename__ = "integration_secrets"
    id = Column(Integer, primary_key=True, autoincrement=True)
    organization_id = Column(String(255), nullable=False)
    integration_id = Column(Integer, ForeignKey("integrations.id"), nullable=False, unique=True)
    encrypted_payload = Column(Text, nullable=False)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    integration = relationship("Integration", back_populates="secret")
