"""
Lease Routes
All endpoints use JWT auth.

  POST   /api/leases/                                – landlord creates a DRAFT lease
  GET    /api/leases/                                – leases where the caller is a party
  GET    /api/leases/{id}                            – lease detail
  POST   /api/leases/{id}/sign-tenant                – tenant signs
  POST   /api/leases/{id}/sign-owner                 – landlord signs
  POST   /api/leases/{id}/finalize                   – either party finalizes a fully signed lease
  POST   /api/leases/{id}/generate-monthly-payment   – schedule the next rent charge
  POST   /api/leases/{id}/create-balance-payment     – tenant pays an amount through hosted checkout
"""
import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database import get_db
from app.dependencies import CurrentUser, UserRole, get_current_user, require_role, signer_identity
from app.domain.exceptions import AlreadySigned, LeaseNotFinalized
from app.domain.lease import LeaseStatus, PaymentType, SignerRole
from app.models.audit import AuditAction
from app.models.lease import Lease, LeaseSignature
from app.models.payment import Payment
from app.schemas.lease import (
    FinalizeResponse, LeaseCreate, LeaseOut, SignOwnerRequest, SignResponse,
    SignTenantRequest,
)
from app.schemas.payment import (
    BalancePaymentRequest, BalancePaymentResponse, GenerateMonthlyPaymentResponse, PaymentOut,
)
from app.services.audit_service import record_audit
from app.services.checkout import CheckoutSessionCreator, get_checkout_creator
from app.services.lease_lifecycle import (
    draft_lease, finalize, record_owner_signature, record_tenant_signature,
)
from app.services.lease_store import (
    apply_lease_record, new_payment_row, to_lease_record, to_payment_records,
)
from app.services.notifications import EmailSender, get_email_sender, send_lease_finalized_email
from app.services.payment_ledger import new_charge, outstanding_amount
from app.services.rent_balance import compute_balance
from app.services.rent_schedule import charge_for_month, next_rent_due_date

router = APIRouter(tags=["Leases"])
logger = logging.getLogger(__name__)


# ═══════════════════════ HELPERS ═══════════════════════

def _get_lease_or_404(db: Session, lease_id: UUID, for_update: bool = False) -> Lease:
    q = db.query(Lease).filter(Lease.id == lease_id)
    if for_update:
        # Serialises concurrent signature attempts on the same row.
        q = q.with_for_update()
    lease = q.first()
    if not lease:
        raise HTTPException(status_code=404, detail="Lease not found")
    return lease


def _require_party(lease: Lease, user: CurrentUser) -> None:
    if user.id not in (lease.owner_id, lease.tenant_id):
        raise HTTPException(status_code=403, detail="Access denied")


def _signature_out(sig: Optional[LeaseSignature]) -> Optional[dict]:
    if sig is None:
        return None
    return {
        "signer_id": sig.signer_id,
        "signer_name": sig.signer_name,
        "signer_role": sig.signer_role.value,
        "initials": sig.initials,
        "consent_given": sig.consent_given,
        "signed_at": sig.signed_at,
    }


def lease_to_out(lease: Lease) -> dict:
    """Serialise a Lease row to the dict shape LeaseOut expects."""
    return {
        "id": str(lease.id),
        "owner_id": lease.owner_id,
        "tenant_id": lease.tenant_id,
        "tenant_email": lease.tenant_email,
        "tenant_name": lease.tenant_name,
        "title": lease.title,
        "terms": lease.terms,
        "status": lease.status.value,
        "start_date": lease.start_date,
        "end_date": lease.end_date,
        "monthly_rent": float(lease.monthly_rent),
        "deposit": float(lease.deposit),
        "finalized_at": lease.finalized_at,
        "created_at": lease.created_at,
        "tenant_signature": _signature_out(lease.signature_for(SignerRole.TENANT)),
        "owner_signature": _signature_out(lease.signature_for(SignerRole.LANDLORD)),
    }


def _lease_url(lease: Lease) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/leases/{lease.id}"


def _notify_finalized(lease: Lease, sender: EmailSender) -> None:
    recipients = [
        (lease.tenant_email, lease.tenant_name),
        (lease.owner_email, lease.owner_name),
    ]
    for email, name in recipients:
        try:
            send_lease_finalized_email(sender, email, name, lease.title, _lease_url(lease))
        except Exception as notif_err:
            logger.warning(f"[LEASE] Finalization email to '{email}' failed: {notif_err}")


def _sign(
    db: Session,
    lease: Lease,
    role: SignerRole,
    user: CurrentUser,
    request: Request,
    consent: bool,
    initials: Optional[str],
    sender: EmailSender,
) -> dict:
    was_finalized = lease.status == LeaseStatus.FINALIZED
    record = to_lease_record(lease)
    signer = signer_identity(user, request)

    if role == SignerRole.TENANT:
        record_tenant_signature(record, signer, consent, initials)
        action = AuditAction.LEASE_TENANT_SIGNED
        signature = record.tenant_signature
    else:
        record_owner_signature(record, signer, consent, initials)
        action = AuditAction.LEASE_OWNER_SIGNED
        signature = record.owner_signature

    apply_lease_record(lease, record)
    record_audit(
        db, action, lease_id=lease.id, user_id=user.id,
        details={
            "ip_address": signer.ip_address,
            "user_agent": signer.user_agent,
            "initials": signature.initials,
        },
    )
    finalized_now = record.status == LeaseStatus.FINALIZED and not was_finalized
    if finalized_now:
        record_audit(db, AuditAction.LEASE_FINALIZED, lease_id=lease.id, user_id=user.id)

    try:
        db.commit()
    except IntegrityError:
        # The unique (lease_id, signer_role) constraint lost a race.
        db.rollback()
        raise AlreadySigned("tenant" if role == SignerRole.TENANT else "owner")
    db.refresh(lease)

    logger.info(f"[LEASE][SIGN] Lease {lease.id} signed by {role.value} {user.id} -> {lease.status.value}")

    if finalized_now:
        _notify_finalized(lease, sender)

    return {
        "message": "Lease signed successfully",
        "status": lease.status.value,
        "signature": _signature_out(lease.signature_for(role)),
        "finalized_at": lease.finalized_at,
    }


# ═══════════════════════ ROUTES ═══════════════════════

@router.post("/", response_model=LeaseOut, status_code=status.HTTP_201_CREATED)
def create_lease(
    payload: LeaseCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_role(UserRole.LANDLORD)),
):
    """Create a new lease in DRAFT status. Fails with invalid_lease_term if the term is inverted."""
    record = draft_lease(payload.start_date, payload.end_date, payload.monthly_rent, payload.deposit)

    tenant_display = payload.tenant_name or "Tenant"
    title = payload.title or (
        f"Lease Agreement - {tenant_display} "
        f"({record.start_date.strftime('%b %Y')} to {record.end_date.strftime('%b %Y')})"
    )

    lease = Lease(
        id=record.id,
        owner_id=current_user.id,
        owner_email=current_user.email,
        owner_name=current_user.name,
        tenant_id=payload.tenant_id,
        tenant_email=payload.tenant_email,
        tenant_name=payload.tenant_name,
        title=title,
        terms=payload.terms,
        status=record.status,
        start_date=record.start_date,
        end_date=record.end_date,
        monthly_rent=record.monthly_rent,
        deposit=record.deposit,
    )
    db.add(lease)
    record_audit(db, AuditAction.LEASE_CREATED, lease_id=lease.id, user_id=current_user.id)
    db.commit()
    db.refresh(lease)

    logger.info(f"[LEASE] Created lease {lease.id} for owner {current_user.id} (tenant: {lease.tenant_id})")
    return lease_to_out(lease)


@router.get("/", response_model=List[LeaseOut])
def list_leases(
    status_filter: Optional[LeaseStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Leases where the caller is the owner or the tenant."""
    q = db.query(Lease).filter(
        or_(Lease.owner_id == current_user.id, Lease.tenant_id == current_user.id)
    )
    if status_filter:
        q = q.filter(Lease.status == status_filter)

    leases = q.order_by(Lease.created_at.desc()).offset(skip).limit(limit).all()
    return [lease_to_out(l) for l in leases]


@router.get("/{lease_id}", response_model=LeaseOut)
def get_lease(
    lease_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    lease = _get_lease_or_404(db, lease_id)
    _require_party(lease, current_user)
    return lease_to_out(lease)


@router.post("/{lease_id}/sign-tenant", response_model=SignResponse)
def sign_tenant(
    lease_id: UUID,
    payload: SignTenantRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_role(UserRole.TENANT)),
    sender: EmailSender = Depends(get_email_sender),
):
    """Tenant signs. Finalizes the lease if the owner has already signed."""
    lease = _get_lease_or_404(db, lease_id, for_update=True)
    if lease.tenant_id != current_user.id:
        raise HTTPException(status_code=403, detail="Access denied")

    return _sign(
        db, lease, SignerRole.TENANT, current_user, request,
        payload.consent_given, payload.initials, sender,
    )


@router.post("/{lease_id}/sign-owner", response_model=SignResponse)
def sign_owner(
    lease_id: UUID,
    payload: SignOwnerRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_role(UserRole.LANDLORD)),
    sender: EmailSender = Depends(get_email_sender),
):
    """Landlord signs. Finalizes the lease if the tenant has already signed."""
    lease = _get_lease_or_404(db, lease_id, for_update=True)
    if lease.owner_id != current_user.id:
        raise HTTPException(status_code=403, detail="Access denied")

    return _sign(
        db, lease, SignerRole.LANDLORD, current_user, request,
        payload.consent_given, payload.initials, sender,
    )


@router.post("/{lease_id}/finalize", response_model=FinalizeResponse)
def finalize_lease(
    lease_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    sender: EmailSender = Depends(get_email_sender),
):
    """Finalize a lease both parties have signed. Repeating the call is harmless."""
    lease = _get_lease_or_404(db, lease_id, for_update=True)
    _require_party(lease, current_user)

    already_final = lease.status == LeaseStatus.FINALIZED and lease.finalized_at is not None
    record = finalize(to_lease_record(lease))

    if already_final:
        return {
            "message": "Lease already finalized",
            "status": lease.status.value,
            "finalized_at": lease.finalized_at,
        }

    apply_lease_record(lease, record)
    record_audit(db, AuditAction.LEASE_FINALIZED, lease_id=lease.id, user_id=current_user.id)
    db.commit()
    db.refresh(lease)

    logger.info(f"[LEASE] Lease {lease.id} finalized by {current_user.id}")
    _notify_finalized(lease, sender)

    return {
        "message": "Lease finalized successfully",
        "status": lease.status.value,
        "finalized_at": lease.finalized_at,
    }


@router.post("/{lease_id}/generate-monthly-payment", response_model=GenerateMonthlyPaymentResponse)
def generate_monthly_payment(
    lease_id: UUID,
    as_of: Optional[date] = Query(None, description="Scheduling date; defaults to today"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_role(UserRole.LANDLORD)),
):
    """Create the next pending rent charge, or return the one already scheduled for that month."""
    lease = _get_lease_or_404(db, lease_id)
    if lease.owner_id != current_user.id:
        raise HTTPException(status_code=403, detail="Access denied")

    record = to_lease_record(lease)
    payments = to_payment_records(lease.payments)
    due = next_rent_due_date(record, payments, today=as_of or date.today())

    existing = charge_for_month(payments, due)
    if existing is not None:
        row = db.query(Payment).filter(Payment.id == existing.id).first()
        return {
            "message": "A payment already exists for this month",
            "created": False,
            "payment": PaymentOut.model_validate(row),
        }

    charge = new_charge(record, record.monthly_rent, PaymentType.RENT, due_date=due)
    row = new_payment_row(charge, user_id=lease.tenant_id)
    db.add(row)
    db.commit()
    db.refresh(row)

    logger.info(f"[PAYMENT] Scheduled rent charge {row.id} for lease {lease.id} due {due.isoformat()}")
    return {
        "message": "Monthly payment created",
        "created": True,
        "payment": PaymentOut.model_validate(row),
    }


@router.post("/{lease_id}/create-balance-payment", response_model=BalancePaymentResponse)
def create_balance_payment(
    lease_id: UUID,
    payload: BalancePaymentRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_role(UserRole.TENANT)),
    checkout: CheckoutSessionCreator = Depends(get_checkout_creator),
):
    """
    Open a hosted checkout for *amount*, or for the outstanding balance when no
    amount is given. The pending payment is discarded if checkout fails.
    """
    lease = _get_lease_or_404(db, lease_id)
    if lease.tenant_id != current_user.id:
        raise HTTPException(status_code=403, detail="Access denied")
    if lease.status != LeaseStatus.FINALIZED:
        raise LeaseNotFinalized("This lease is not finalized yet")

    record = to_lease_record(lease)
    amount = payload.amount
    if amount is None:
        snapshot = compute_balance(record, to_payment_records(lease.payments))
        amount = outstanding_amount(snapshot)

    charge = new_charge(record, amount, PaymentType.RENT, due_date=date.today())
    row = new_payment_row(charge, user_id=current_user.id)
    db.add(row)
    db.flush()

    try:
        session = checkout.create(row, lease, current_user.email)
    except Exception:
        db.rollback()
        raise

    row.checkout_session_id = session.session_id
    db.commit()

    logger.info(f"[PAYMENT] Checkout {session.session_id} opened for payment {row.id} on lease {lease.id}")
    return {"payment_id": row.id, "checkout_url": session.checkout_url}
