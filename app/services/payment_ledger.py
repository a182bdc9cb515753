"""
Payment Ledger: charge creation and gateway settlement.

A payment starts `pending` and is settled exactly once by the gateway's
confirmation: pending → paid (paid_at stamped) or pending → failed.
A paid payment never changes again.
"""
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from app.domain.exceptions import InvalidPaymentAmount, PaymentAlreadySettled
from app.domain.lease import (
    BalanceSnapshot, LeaseRecord, PaymentRecord, PaymentStatus, PaymentType,
    is_whole_cents, to_decimal,
)

logger = logging.getLogger(__name__)


def new_charge(
    lease: LeaseRecord,
    amount,
    payment_type: PaymentType = PaymentType.RENT,
    due_date: Optional[date] = None,
) -> PaymentRecord:
    amount = to_decimal(amount)
    if amount <= 0:
        raise InvalidPaymentAmount(f"Invalid payment amount: {amount}")
    if not is_whole_cents(amount):
        raise InvalidPaymentAmount(f"Payment amount must be whole cents: {amount}")

    return PaymentRecord(
        amount=amount,
        type=PaymentType(payment_type),
        status=PaymentStatus.PENDING,
        due_date=due_date,
        lease_id=lease.id,
    )


def settle_payment(
    payment: PaymentRecord,
    outcome: PaymentStatus,
    at: Optional[datetime] = None,
) -> PaymentRecord:
    """
    Apply a gateway outcome to *payment*.

    Re-delivering the outcome a payment already has is a no-op, so duplicate
    webhook deliveries are harmless.

    Raises:
        PaymentAlreadySettled: the payment is no longer pending and the
            outcome differs from its current status.
    """
    outcome = PaymentStatus(outcome)
    if outcome == PaymentStatus.PENDING:
        raise PaymentAlreadySettled("A payment cannot be moved back to pending")

    if payment.status == outcome:
        return payment

    if payment.status != PaymentStatus.PENDING:
        raise PaymentAlreadySettled(
            f"Payment {payment.id} is already {payment.status.value}"
        )

    payment.status = outcome
    if outcome == PaymentStatus.PAID:
        payment.paid_at = at or datetime.now(timezone.utc)

    logger.info(f"[PAYMENT] Payment {payment.id} settled as {outcome.value}")
    return payment


def ensure_payable(payment: PaymentRecord) -> PaymentRecord:
    """Only a pending payment can be sent to checkout."""
    if payment.status != PaymentStatus.PENDING:
        raise PaymentAlreadySettled(
            f"Payment {payment.id} is already {payment.status.value} and can no longer be paid"
        )
    return payment


def outstanding_amount(snapshot: BalanceSnapshot) -> Decimal:
    """What is still owed; zero when the lease is paid up or in credit."""
    return max(snapshot.balance, Decimal("0"))
