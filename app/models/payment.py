"""
Payment Models
Rent, deposit and fee payments recorded against a lease
"""
from datetime import date, datetime
from decimal import Decimal
import uuid

from sqlalchemy import Date, DateTime, Enum as SQLEnum, ForeignKey, Index, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin
from app.domain.lease import PaymentStatus, PaymentType


class Payment(TimestampMixin, Base):
    """Payment transaction record"""
    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Leases are retained while payments reference them
    lease_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("leases.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    type: Mapped[PaymentType] = mapped_column(SQLEnum(PaymentType), default=PaymentType.RENT, nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False, index=True
    )

    due_date: Mapped[date] = mapped_column(Date, nullable=True)
    paid_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)

    # Gateway references
    checkout_session_id: Mapped[str] = mapped_column(String(255), nullable=True)
    gateway_reference: Mapped[str] = mapped_column(String(255), nullable=True)

    lease = relationship("Lease", back_populates="payments")

    __table_args__ = (
        Index("idx_payments_lease_type", "lease_id", "type"),
    )
