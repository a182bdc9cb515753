"""
Lease audit trail
"""
from datetime import datetime, timezone
from enum import Enum
import uuid

from sqlalchemy import DateTime, Enum as SQLEnum, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class AuditAction(str, Enum):
    LEASE_CREATED = "LEASE_CREATED"
    LEASE_TENANT_SIGNED = "LEASE_TENANT_SIGNED"
    LEASE_OWNER_SIGNED = "LEASE_OWNER_SIGNED"
    LEASE_FINALIZED = "LEASE_FINALIZED"
    PAYMENT_SETTLED = "PAYMENT_SETTLED"


class LeaseAuditLog(Base):
    __tablename__ = "lease_audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    action: Mapped[AuditAction] = mapped_column(SQLEnum(AuditAction), nullable=False, index=True)
    lease_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=True)
    details: Mapped[str] = mapped_column(Text, nullable=True)  # JSON
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
