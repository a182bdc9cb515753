"""
Lease Store: maps ORM rows to engine records and back.
Routes load rows, convert with to_*_record, run the engine, then apply_* the result.
"""
from typing import List

from app.domain.lease import (
    LeaseRecord, PaymentRecord, Signature, SignerRole,
)
from app.models.lease import Lease, LeaseSignature
from app.models.payment import Payment


def _signature_record(row: LeaseSignature) -> Signature:
    return Signature(
        signer_id=row.signer_id,
        role=row.signer_role,
        consent_given=bool(row.consent_given),
        signed_at=row.signed_at,
        signer_name=row.signer_name,
        signer_email=row.signer_email,
        initials=row.initials,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
    )


def to_lease_record(row: Lease) -> LeaseRecord:
    tenant_sig = row.signature_for(SignerRole.TENANT)
    owner_sig = row.signature_for(SignerRole.LANDLORD)
    return LeaseRecord(
        id=row.id,
        start_date=row.start_date,
        end_date=row.end_date,
        monthly_rent=row.monthly_rent,
        deposit=row.deposit,
        status=row.status,
        tenant_signature=_signature_record(tenant_sig) if tenant_sig else None,
        owner_signature=_signature_record(owner_sig) if owner_sig else None,
        finalized_at=row.finalized_at,
    )


def apply_lease_record(row: Lease, record: LeaseRecord) -> Lease:
    """Copy engine state onto the row; signatures are append-only."""
    row.status = record.status
    row.finalized_at = record.finalized_at

    for sig in (record.tenant_signature, record.owner_signature):
        if sig is None or row.signature_for(sig.role) is not None:
            continue
        row.signatures.append(
            LeaseSignature(
                lease_id=row.id,
                signer_id=sig.signer_id,
                signer_name=sig.signer_name,
                signer_email=sig.signer_email,
                signer_role=sig.role,
                initials=sig.initials,
                consent_given=sig.consent_given,
                ip_address=sig.ip_address,
                user_agent=sig.user_agent,
                signed_at=sig.signed_at,
            )
        )
    return row


def to_payment_record(row: Payment) -> PaymentRecord:
    return PaymentRecord(
        id=row.id,
        lease_id=row.lease_id,
        amount=row.amount,
        type=row.type,
        status=row.status,
        due_date=row.due_date,
        paid_at=row.paid_at,
    )


def to_payment_records(rows) -> List[PaymentRecord]:
    return [to_payment_record(r) for r in rows]


def apply_payment_record(row: Payment, record: PaymentRecord) -> Payment:
    row.status = record.status
    row.paid_at = record.paid_at
    return row


def new_payment_row(record: PaymentRecord, user_id: str) -> Payment:
    return Payment(
        id=record.id,
        lease_id=record.lease_id,
        user_id=user_id,
        amount=record.amount,
        type=record.type,
        status=record.status,
        due_date=record.due_date,
    )
