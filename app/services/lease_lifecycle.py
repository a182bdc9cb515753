"""
Lease Lifecycle: signature state machine.

    DRAFT ──tenant signs──► TENANT_SIGNED ──owner signs──┐
      │                                                  ▼
      └────owner signs───► OWNER_SIGNED ──tenant signs─► FINALIZED

Either party may sign first. Status only moves forward and FINALIZED is
terminal. Every function mutates and returns the LeaseRecord it was given;
persisting it is the caller's job.
"""
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from app.domain.exceptions import (
    AlreadySigned, ConsentRequired, IncompleteSignatures, InvalidState,
)
from app.domain.lease import (
    LeaseRecord, LeaseStatus, Signature, SignerIdentity, SignerRole,
)

logger = logging.getLogger(__name__)

_STATUS_RANK = {
    LeaseStatus.DRAFT: 0,
    LeaseStatus.TENANT_SIGNED: 1,
    LeaseStatus.OWNER_SIGNED: 1,
    LeaseStatus.FINALIZED: 2,
}


def draft_lease(
    start_date: date,
    end_date: date,
    monthly_rent,
    deposit=Decimal("0"),
) -> LeaseRecord:
    """New lease for an accepted applicant. Raises InvalidLeaseTerm on a bad term."""
    return LeaseRecord(
        start_date=start_date,
        end_date=end_date,
        monthly_rent=monthly_rent,
        deposit=deposit,
        status=LeaseStatus.DRAFT,
    )


def _advance(lease: LeaseRecord, new_status: LeaseStatus, now: datetime) -> None:
    current = lease.status
    if _STATUS_RANK[new_status] < _STATUS_RANK[current]:
        raise InvalidState(
            f"Lease cannot move from {current.value} back to {new_status.value}"
        )
    if current == LeaseStatus.FINALIZED and new_status != LeaseStatus.FINALIZED:
        raise InvalidState("Lease is finalized and can no longer be modified")

    lease.status = new_status
    if new_status == LeaseStatus.FINALIZED and lease.finalized_at is None:
        lease.finalized_at = now


def _record_signature(
    lease: LeaseRecord,
    role: SignerRole,
    signer: SignerIdentity,
    consent: bool,
    initials: Optional[str],
    now: Optional[datetime],
) -> LeaseRecord:
    existing = lease.tenant_signature if role == SignerRole.TENANT else lease.owner_signature
    if existing is not None:
        raise AlreadySigned("tenant" if role == SignerRole.TENANT else "owner")

    if lease.status == LeaseStatus.FINALIZED:
        raise InvalidState("Lease is finalized and can no longer be modified")

    if consent is not True:
        raise ConsentRequired("You must confirm consent to sign the lease")

    now = now or datetime.now(timezone.utc)
    signature = Signature(
        signer_id=str(signer.user_id),
        role=role,
        consent_given=True,
        signed_at=now,
        signer_name=signer.name,
        signer_email=signer.email,
        initials=initials.strip().upper() if initials and initials.strip() else None,
        ip_address=signer.ip_address,
        user_agent=signer.user_agent,
    )

    if role == SignerRole.TENANT:
        lease.tenant_signature = signature
        other_signed = lease.owner_signature is not None
        next_status = LeaseStatus.FINALIZED if other_signed else LeaseStatus.TENANT_SIGNED
    else:
        lease.owner_signature = signature
        other_signed = lease.tenant_signature is not None
        next_status = LeaseStatus.FINALIZED if other_signed else LeaseStatus.OWNER_SIGNED

    _advance(lease, next_status, now)

    logger.info(
        f"[LEASE][SIGN] {role.value} {signature.signer_id} signed lease {lease.id} "
        f"-> {lease.status.value}"
    )
    return lease


def record_tenant_signature(
    lease: LeaseRecord,
    signer: SignerIdentity,
    consent: bool,
    initials: Optional[str] = None,
    now: Optional[datetime] = None,
) -> LeaseRecord:
    """
    Attach the tenant's signature.

    Raises:
        AlreadySigned: the tenant already signed.
        InvalidState: the lease is finalized.
        ConsentRequired: consent was not given.
    """
    return _record_signature(lease, SignerRole.TENANT, signer, consent, initials, now)


def record_owner_signature(
    lease: LeaseRecord,
    signer: SignerIdentity,
    consent: bool,
    initials: Optional[str] = None,
    now: Optional[datetime] = None,
) -> LeaseRecord:
    """Owner counterpart of record_tenant_signature."""
    return _record_signature(lease, SignerRole.LANDLORD, signer, consent, initials, now)


def finalize(lease: LeaseRecord, now: Optional[datetime] = None) -> LeaseRecord:
    """
    Mark a fully signed lease FINALIZED.
    No-op when already finalized; finalized_at is only ever set once.
    """
    if not lease.fully_signed:
        raise IncompleteSignatures("Both signatures are required to finalize the lease")

    if lease.status == LeaseStatus.FINALIZED and lease.finalized_at is not None:
        return lease

    _advance(lease, LeaseStatus.FINALIZED, now or datetime.now(timezone.utc))
    logger.info(f"[LEASE] Lease {lease.id} finalized at {lease.finalized_at.isoformat()}")
    return lease
