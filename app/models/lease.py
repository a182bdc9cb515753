"""
Lease Models
Tables: leases, lease_signatures
"""
from datetime import date, datetime, timezone
from decimal import Decimal
import uuid

from sqlalchemy import (
    Boolean, Date, DateTime, Enum as SQLEnum, ForeignKey, Index, Numeric,
    String, Text, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin
from app.domain.lease import LeaseStatus, SignerRole


class Lease(TimestampMixin, Base):
    """Lease agreement between a landlord (owner) and a tenant."""
    __tablename__ = "leases"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Parties: user ids issued by the auth provider
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    owner_email: Mapped[str] = mapped_column(String(255), nullable=True)
    owner_name: Mapped[str] = mapped_column(String(255), nullable=True)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    tenant_email: Mapped[str] = mapped_column(String(255), nullable=True)
    tenant_name: Mapped[str] = mapped_column(String(255), nullable=True)

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    terms: Mapped[str] = mapped_column(Text, nullable=True)

    status: Mapped[LeaseStatus] = mapped_column(
        SQLEnum(LeaseStatus), default=LeaseStatus.DRAFT, nullable=False, index=True
    )

    # Term & economics
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    monthly_rent: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    deposit: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    finalized_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)

    signatures = relationship(
        "LeaseSignature",
        back_populates="lease",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    payments = relationship("Payment", back_populates="lease")

    __table_args__ = (
        Index("idx_leases_owner_status", "owner_id", "status"),
    )

    def signature_for(self, role: SignerRole):
        for sig in self.signatures:
            if sig.signer_role == role:
                return sig
        return None


class LeaseSignature(Base):
    """One party's signature on a lease. At most one per role."""
    __tablename__ = "lease_signatures"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    lease_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("leases.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Signer identity
    signer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    signer_name: Mapped[str] = mapped_column(String(255), nullable=True)
    signer_email: Mapped[str] = mapped_column(String(255), nullable=True)
    signer_role: Mapped[SignerRole] = mapped_column(SQLEnum(SignerRole), nullable=False)

    initials: Mapped[str] = mapped_column(String(10), nullable=True)
    consent_given: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Audit trail
    ip_address: Mapped[str] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str] = mapped_column(String(500), nullable=True)

    signed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    lease = relationship("Lease", back_populates="signatures")

    __table_args__ = (
        UniqueConstraint("lease_id", "signer_role", name="uq_lease_signatures_lease_role"),
    )
