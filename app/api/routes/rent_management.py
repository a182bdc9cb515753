"""
Rent Management Routes
Balance snapshots for finalized leases, for tenants and landlords.

  GET /api/tenant/rent-management/{id}   – one lease, its payments and balance
  GET /api/landlord/rent-management      – every finalized lease the landlord owns
  GET /api/tenant/payments               – the tenant's payments
"""
import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.routes.leases import lease_to_out
from app.database import get_db
from app.dependencies import CurrentUser, UserRole, require_role
from app.domain.exceptions import LeaseNotFinalized
from app.domain.lease import LeaseStatus
from app.models.lease import Lease
from app.models.payment import Payment
from app.schemas.lease import BalanceOut, RentManagementLease
from app.schemas.payment import PaymentOut
from app.services.lease_store import to_lease_record, to_payment_records
from app.services.rent_balance import compute_balance

router = APIRouter(tags=["Rent Management"])
logger = logging.getLogger(__name__)


def _rent_view(lease: Lease, as_of: Optional[date]) -> dict:
    payments = sorted(lease.payments, key=lambda p: p.created_at, reverse=True)
    snapshot = compute_balance(
        to_lease_record(lease),
        to_payment_records(payments),
        as_of=as_of or date.today(),
    )
    return {
        "lease": lease_to_out(lease),
        "payments": [PaymentOut.model_validate(p) for p in payments],
        "balance": BalanceOut.from_snapshot(snapshot),
    }


@router.get("/tenant/rent-management/{lease_id}", response_model=RentManagementLease)
def tenant_rent_management(
    lease_id: UUID,
    as_of: Optional[date] = Query(None, description="Balance date; defaults to today"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_role(UserRole.TENANT)),
):
    lease = db.query(Lease).filter(Lease.id == lease_id).first()
    if not lease:
        raise HTTPException(status_code=404, detail="Lease not found")
    if lease.tenant_id != current_user.id:
        raise HTTPException(status_code=403, detail="Access denied")
    if lease.status != LeaseStatus.FINALIZED:
        raise LeaseNotFinalized("This lease is not finalized yet")

    return _rent_view(lease, as_of)


@router.get("/landlord/rent-management", response_model=List[RentManagementLease])
def landlord_rent_management(
    as_of: Optional[date] = Query(None, description="Balance date; defaults to today"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_role(UserRole.LANDLORD)),
):
    leases = (
        db.query(Lease)
        .filter(Lease.owner_id == current_user.id, Lease.status == LeaseStatus.FINALIZED)
        .order_by(Lease.start_date.desc())
        .all()
    )
    logger.info(f"[LEASE] Rent overview for landlord {current_user.id}: {len(leases)} lease(s)")
    return [_rent_view(lease, as_of) for lease in leases]


@router.get("/tenant/payments", response_model=List[PaymentOut])
def tenant_payments(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_role(UserRole.TENANT)),
):
    return (
        db.query(Payment)
        .filter(Payment.user_id == current_user.id)
        .order_by(Payment.created_at.desc())
        .all()
    )
