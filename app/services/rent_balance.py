"""
Rent Balance Calculator

    monthsDue    = min(calendar months start→asOf + 1, term months)   (0 before start)
    totalRentDue = monthsDue × monthlyRent
    totalDue     = deposit + totalRentDue
    totalPaid    = Σ amount of payments with status "paid"
    balance      = totalDue − totalPaid          (negative when overpaid)

monthsDue ignores the day of month; moving in on any day of a month owes that
whole month. The term cap is elapsed days divided by 30, rounded up.
"""
import math
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

from app.domain.lease import (
    BalanceSnapshot, LeaseRecord, PaymentRecord, PaymentStatus, validate_term,
)

DAYS_PER_TERM_MONTH = 30


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def calendar_months_between(start: date, as_of: date) -> int:
    """Whole year/month difference; the day of month is ignored."""
    return (as_of.year - start.year) * 12 + (as_of.month - start.month)


def total_term_months(start: date, end: date) -> int:
    """Term length in 30-day months, rounded up. A same-day lease counts as one month."""
    validate_term(start, end)
    days = (end - start).days
    return max(1, math.ceil(days / DAYS_PER_TERM_MONTH))


def months_due(lease: LeaseRecord, as_of: Optional[date] = None) -> int:
    as_of = _as_date(as_of) or date.today()
    if as_of < lease.start_date:
        return 0

    # Past the end of the term the count freezes at end_date.
    effective = min(as_of, lease.end_date)
    elapsed = calendar_months_between(lease.start_date, effective) + 1
    return min(elapsed, total_term_months(lease.start_date, lease.end_date))


def total_paid(payments: Iterable[PaymentRecord]) -> Decimal:
    return sum(
        (p.amount for p in payments if p.status == PaymentStatus.PAID),
        Decimal("0"),
    )


def compute_balance(
    lease: LeaseRecord,
    payments: Iterable[PaymentRecord],
    as_of: Optional[date] = None,
) -> BalanceSnapshot:
    """
    Balance snapshot of *lease* on *as_of* (defaults to today).

    Pure: the same lease, payments and date always give the same snapshot.
    Pending and failed payments never count as paid, and the balance is not
    clamped at zero.
    """
    as_of = _as_date(as_of) or date.today()

    due_months = months_due(lease, as_of)
    rent_due = lease.monthly_rent * due_months
    due = lease.deposit + rent_due
    paid = total_paid(payments)

    return BalanceSnapshot(
        as_of=as_of,
        months_due=due_months,
        total_rent_due=rent_due,
        total_due=due,
        total_paid=paid,
        balance=due - paid,
    )
