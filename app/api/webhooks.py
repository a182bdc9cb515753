"""
Payment Gateway Webhook
Settles pending payments once the gateway confirms or rejects them.
"""
import hashlib
import hmac
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database import get_db
from app.domain.lease import PaymentStatus
from app.models.audit import AuditAction
from app.models.payment import Payment
from app.schemas.payment import PaymentWebhookEvent
from app.services.audit_service import record_audit
from app.services.lease_store import apply_payment_record, to_payment_record
from app.services.payment_ledger import settle_payment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])

SIGNATURE_HEADER = "x-webhook-signature"


def compute_signature(body: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 of the raw request body."""
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def signature_is_valid(signature: str, body: bytes, secret: str) -> bool:
    if not signature or not secret:
        return False
    return hmac.compare_digest(compute_signature(body, secret), signature)


@router.post("/payments")
async def payment_webhook(
    request: Request,
    db: Session = Depends(get_db),
):
    body = await request.body()

    if not settings.webhook_configured:
        logger.error("[PAYMENT][WEBHOOK] PAYMENT_WEBHOOK_SECRET is not set; rejecting event")
        raise HTTPException(status_code=503, detail="Webhook secret not configured")

    if not signature_is_valid(request.headers.get(SIGNATURE_HEADER, ""), body, settings.PAYMENT_WEBHOOK_SECRET):
        logger.warning("[PAYMENT][WEBHOOK] Invalid signature")
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        event = PaymentWebhookEvent.model_validate_json(body)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False))

    payment = db.query(Payment).filter(Payment.id == event.payment_id).with_for_update().first()
    if not payment:
        logger.warning(f"[PAYMENT][WEBHOOK] Unknown payment {event.payment_id}")
        raise HTTPException(status_code=404, detail="Payment not found")

    previous = payment.status
    record = settle_payment(to_payment_record(payment), PaymentStatus(event.status.value), at=event.paid_at)
    apply_payment_record(payment, record)

    if record.status != previous:
        if event.gateway_reference:
            payment.gateway_reference = event.gateway_reference
        record_audit(
            db, AuditAction.PAYMENT_SETTLED, lease_id=payment.lease_id,
            details={"payment_id": str(payment.id), "status": record.status.value,
                     "gateway_reference": event.gateway_reference},
        )
        db.commit()
        logger.info(f"[PAYMENT][WEBHOOK] Payment {payment.id} marked {record.status.value} for lease {payment.lease_id}")

    return {"success": True, "payment_id": str(payment.id), "status": payment.status.value}
