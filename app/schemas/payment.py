"""
Payment Request/Response Schemas
"""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.lease import PaymentStatus, PaymentType


class SettlementStatusEnum(str, Enum):
    PAID = "paid"
    FAILED = "failed"


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    lease_id: UUID
    amount: float
    type: PaymentType
    status: PaymentStatus
    due_date: Optional[date] = None
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    checkout_session_id: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _money_to_float(cls, v):
        return float(v) if isinstance(v, Decimal) else v


class GenerateMonthlyPaymentResponse(BaseModel):
    message: str
    created: bool
    payment: PaymentOut


class BalancePaymentRequest(BaseModel):
    """Omit amount to pay the whole outstanding balance."""
    amount: Optional[Decimal] = Field(None, max_digits=12, decimal_places=2)


class BalancePaymentResponse(BaseModel):
    payment_id: UUID
    checkout_url: str


class PaymentWebhookEvent(BaseModel):
    """Settlement notice posted by the payment gateway."""
    payment_id: UUID
    status: SettlementStatusEnum
    gateway_reference: Optional[str] = Field(None, max_length=255)
    paid_at: Optional[datetime] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "payment_id": "550e8400-e29b-41d4-a716-446655440000",
                "status": "paid",
                "gateway_reference": "cs_test_abc123",
            }
        }
    )
