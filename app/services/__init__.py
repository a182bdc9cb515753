from app.services import lease_lifecycle
from app.services import payment_ledger
from app.services import rent_balance
from app.services import rent_schedule

__all__ = [
    "lease_lifecycle",
    "payment_ledger",
    "rent_balance",
    "rent_schedule",
]
