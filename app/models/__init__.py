# Import all models so they register with Base
from app.models.lease import Lease, LeaseSignature
from app.models.payment import Payment
from app.models.audit import AuditAction, LeaseAuditLog

__all__ = [
    "Lease",
    "LeaseSignature",
    "Payment",
    "AuditAction",
    "LeaseAuditLog",
]
