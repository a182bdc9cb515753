"""
Lease domain types.
Plain value objects the lifecycle and balance engines operate on; no ORM, no I/O.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from app.domain.exceptions import InvalidLeaseTerm


class LeaseStatus(str, Enum):
    DRAFT = "DRAFT"
    TENANT_SIGNED = "TENANT_SIGNED"
    OWNER_SIGNED = "OWNER_SIGNED"
    FINALIZED = "FINALIZED"


class SignerRole(str, Enum):
    TENANT = "TENANT"
    LANDLORD = "LANDLORD"


class PaymentType(str, Enum):
    RENT = "rent"
    DEPOSIT = "deposit"
    FEE = "fee"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


def to_decimal(value) -> Decimal:
    """Money coercion; floats go through str() so 0.1 stays 0.1."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def is_whole_cents(amount: Decimal) -> bool:
    """True when *amount* has at most two decimal places."""
    return amount.normalize().as_tuple().exponent >= -2


def validate_term(start_date: date, end_date: date) -> None:
    if start_date is None or end_date is None:
        raise InvalidLeaseTerm("Lease start and end dates are required")
    if end_date < start_date:
        raise InvalidLeaseTerm(
            f"Lease end date {end_date.isoformat()} is before start date {start_date.isoformat()}"
        )


@dataclass(frozen=True)
class SignerIdentity:
    """Who is signing, as resolved from the authenticated user."""
    user_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class Signature:
    signer_id: str
    role: SignerRole
    consent_given: bool
    signed_at: datetime
    signer_name: Optional[str] = None
    signer_email: Optional[str] = None
    initials: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class LeaseRecord:
    """
    A lease as the engine sees it.

    Construction fails fast with InvalidLeaseTerm when the term is inverted
    or the economics are out of range.
    """
    start_date: date
    end_date: date
    monthly_rent: Decimal
    deposit: Decimal = Decimal("0")
    status: LeaseStatus = LeaseStatus.DRAFT
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    tenant_signature: Optional[Signature] = None
    owner_signature: Optional[Signature] = None
    finalized_at: Optional[datetime] = None

    def __post_init__(self):
        if isinstance(self.start_date, datetime):
            self.start_date = self.start_date.date()
        if isinstance(self.end_date, datetime):
            self.end_date = self.end_date.date()
        validate_term(self.start_date, self.end_date)

        self.monthly_rent = to_decimal(self.monthly_rent)
        self.deposit = to_decimal(self.deposit if self.deposit is not None else 0)
        if self.monthly_rent <= 0:
            raise InvalidLeaseTerm("Monthly rent must be positive")
        if self.deposit < 0:
            raise InvalidLeaseTerm("Deposit cannot be negative")
        if not (is_whole_cents(self.monthly_rent) and is_whole_cents(self.deposit)):
            raise InvalidLeaseTerm("Rent and deposit must be whole cents")

        self.status = LeaseStatus(self.status)

    @property
    def fully_signed(self) -> bool:
        return self.tenant_signature is not None and self.owner_signature is not None


@dataclass
class PaymentRecord:
    amount: Decimal
    type: PaymentType = PaymentType.RENT
    status: PaymentStatus = PaymentStatus.PENDING
    due_date: Optional[date] = None
    paid_at: Optional[datetime] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    lease_id: Optional[uuid.UUID] = None

    def __post_init__(self):
        self.amount = to_decimal(self.amount)
        self.type = PaymentType(self.type)
        self.status = PaymentStatus(self.status)
        if isinstance(self.due_date, datetime):
            self.due_date = self.due_date.date()


@dataclass(frozen=True)
class BalanceSnapshot:
    """Derived rent position of a lease on a given date. Never persisted."""
    as_of: date
    months_due: int
    total_rent_due: Decimal
    total_due: Decimal
    total_paid: Decimal
    balance: Decimal

    def as_dict(self) -> dict:
        return {
            "totalDue": float(self.total_due),
            "totalPaid": float(self.total_paid),
            "balance": float(self.balance),
            "monthsDue": self.months_due,
            "totalRentDue": float(self.total_rent_due),
        }
