"""
Rent Schedule: when the next monthly rent charge falls due.
Called manually by the landlord or by a periodic job.
"""
import calendar
from datetime import date
from typing import Iterable, Optional

from app.domain.exceptions import LeaseEnded, LeaseNotFinalized, LeaseNotStarted
from app.domain.lease import LeaseRecord, LeaseStatus, PaymentRecord, PaymentStatus, PaymentType
from app.services.rent_balance import calendar_months_between

_OPEN_OR_PAID = (PaymentStatus.PENDING, PaymentStatus.PAID)


def add_months(day: date, months: int) -> date:
    """Shift by calendar months, clamping the day to the target month's length."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def first_of_month(day: date) -> date:
    return day.replace(day=1)


def _rent_charges(payments: Iterable[PaymentRecord]):
    return [
        p for p in payments
        if p.type == PaymentType.RENT and p.status in _OPEN_OR_PAID
    ]


def next_rent_due_date(
    lease: LeaseRecord,
    payments: Iterable[PaymentRecord],
    today: Optional[date] = None,
) -> date:
    """
    Due date of the next monthly rent charge.

    - first charge: the 1st of the month after the lease starts
    - afterwards: one month after the latest scheduled charge
    """
    today = today or date.today()

    if lease.status != LeaseStatus.FINALIZED:
        raise LeaseNotFinalized("The lease must be finalized before rent is charged")
    if today < lease.start_date:
        raise LeaseNotStarted("The lease has not started yet")
    if today > lease.end_date:
        raise LeaseEnded("The lease has ended")

    charges = _rent_charges(payments)
    dated = [p.due_date for p in charges if p.due_date is not None]

    if not charges:
        due = first_of_month(add_months(lease.start_date, 1))
    elif dated:
        due = add_months(max(dated), 1)
    else:
        offset = calendar_months_between(lease.start_date, today) + 1
        due = first_of_month(add_months(lease.start_date, offset))

    if due > lease.end_date:
        raise LeaseEnded(f"The lease ends before {due.isoformat()}")
    return due


def charge_for_month(payments: Iterable[PaymentRecord], due: date) -> Optional[PaymentRecord]:
    """Rent charge already due in the same calendar month as *due*, if any."""
    for p in payments:
        if (
            p.type == PaymentType.RENT
            and p.due_date is not None
            and (p.due_date.year, p.due_date.month) == (due.year, due.month)
        ):
            return p
    return None
