"""
Payment Routes

  POST   /api/payments/{id}/checkout   – tenant opens a hosted checkout for a pending charge
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, UserRole, require_role
from app.models.payment import Payment
from app.schemas.payment import BalancePaymentResponse
from app.services.checkout import CheckoutSessionCreator, get_checkout_creator
from app.services.lease_store import to_payment_record
from app.services.payment_ledger import ensure_payable

router = APIRouter(tags=["Payments"])
logger = logging.getLogger(__name__)


@router.post("/{payment_id}/checkout", response_model=BalancePaymentResponse)
def checkout_payment(
    payment_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_role(UserRole.TENANT)),
    checkout: CheckoutSessionCreator = Depends(get_checkout_creator),
):
    """Open a hosted checkout for an existing charge, such as a scheduled rent payment."""
    payment = db.query(Payment).filter(Payment.id == payment_id).with_for_update().first()
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    if payment.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="Access denied")

    ensure_payable(to_payment_record(payment))

    session = checkout.create(payment, payment.lease, current_user.email)
    payment.checkout_session_id = session.session_id
    db.commit()

    logger.info(f"[PAYMENT] Checkout {session.session_id} opened for payment {payment.id} on lease {payment.lease_id}")
    return {"payment_id": payment.id, "checkout_url": session.checkout_url}
