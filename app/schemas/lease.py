"""
Lease Schemas
Pydantic v2 request/response models for lease creation, signing and rent management.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from app.domain.lease import BalanceSnapshot
from app.schemas.payment import PaymentOut


# ─────────────────────── Requests ───────────────────────

class LeaseCreate(BaseModel):
    """Landlord creates a lease for an accepted applicant."""
    tenant_id: str = Field(..., min_length=1)
    tenant_email: Optional[EmailStr] = None
    tenant_name: Optional[str] = None
    title: Optional[str] = None

    start_date: date
    end_date: date
    monthly_rent: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    deposit: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    terms: str = Field(..., min_length=1)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "tenant_id": "user_123",
                "tenant_email": "tenant@example.com",
                "start_date": "2024-01-01",
                "end_date": "2024-12-31",
                "monthly_rent": 1000,
                "deposit": 500,
                "terms": "Standard residential lease.",
            }
        }
    )


class SignTenantRequest(BaseModel):
    consent_given: bool
    initials: str = Field(..., min_length=1, max_length=10)


class SignOwnerRequest(BaseModel):
    consent_given: bool
    initials: Optional[str] = Field(None, max_length=10)


# ─────────────────────── Responses ───────────────────────

class SignatureOut(BaseModel):
    signer_id: str
    signer_name: Optional[str] = None
    signer_role: str
    initials: Optional[str] = None
    consent_given: bool
    signed_at: datetime


class LeaseOut(BaseModel):
    id: str
    owner_id: str
    tenant_id: str
    tenant_email: Optional[str] = None
    tenant_name: Optional[str] = None
    title: str
    terms: Optional[str] = None
    status: str
    start_date: date
    end_date: date
    monthly_rent: float
    deposit: float
    finalized_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    tenant_signature: Optional[SignatureOut] = None
    owner_signature: Optional[SignatureOut] = None


class SignResponse(BaseModel):
    message: str
    status: str
    signature: SignatureOut
    finalized_at: Optional[datetime] = None


class FinalizeResponse(BaseModel):
    message: str
    status: str
    finalized_at: datetime


class BalanceOut(BaseModel):
    """Balance snapshot, serialized with camelCase keys (totalDue, monthsDue, ...)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_due: float
    total_paid: float
    balance: float
    months_due: int
    total_rent_due: float

    @classmethod
    def from_snapshot(cls, snapshot: BalanceSnapshot) -> "BalanceOut":
        return cls(
            total_due=float(snapshot.total_due),
            total_paid=float(snapshot.total_paid),
            balance=float(snapshot.balance),
            months_due=snapshot.months_due,
            total_rent_due=float(snapshot.total_rent_due),
        )


class RentManagementLease(BaseModel):
    lease: LeaseOut
    payments: List[PaymentOut] = []
    balance: BalanceOut
