from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.domain.exceptions import InvalidLeaseTerm
from app.domain.lease import LeaseRecord, PaymentRecord, PaymentStatus
from app.services.rent_balance import (
    calendar_months_between, compute_balance, months_due, total_term_months,
)


@pytest.fixture
def lease():
    return LeaseRecord(
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
        monthly_rent=Decimal("1000"),
        deposit=Decimal("500"),
    )


def test_balance_example(lease):
    snapshot = compute_balance(lease, [], as_of=date(2024, 3, 15))

    assert snapshot.months_due == 3
    assert snapshot.total_rent_due == Decimal("3000")
    assert snapshot.total_due == Decimal("3500")
    assert snapshot.total_paid == Decimal("0")
    assert snapshot.balance == Decimal("3500")


def test_only_paid_payments_count(lease):
    payments = [
        PaymentRecord(amount=1500, status=PaymentStatus.PAID),
        PaymentRecord(amount=1000, status=PaymentStatus.PENDING),
        PaymentRecord(amount=250, status=PaymentStatus.FAILED),
    ]
    snapshot = compute_balance(lease, payments, as_of=date(2024, 3, 15))

    assert snapshot.total_paid == Decimal("1500")
    assert snapshot.balance == Decimal("2000")


def test_balance_goes_negative_when_overpaid(lease):
    payments = [PaymentRecord(amount=5000, status=PaymentStatus.PAID)]
    snapshot = compute_balance(lease, payments, as_of=date(2024, 1, 10))

    assert snapshot.total_due == Decimal("1500")
    assert snapshot.balance == Decimal("-3500")


def test_compute_balance_is_pure(lease):
    payments = [PaymentRecord(amount=1500, status=PaymentStatus.PAID)]
    first = compute_balance(lease, payments, as_of=date(2024, 6, 1))
    second = compute_balance(lease, payments, as_of=date(2024, 6, 1))

    assert first == second
    assert first.balance == first.total_due - first.total_paid


def test_nothing_due_before_start(lease):
    snapshot = compute_balance(lease, [], as_of=date(2023, 12, 31))

    assert snapshot.months_due == 0
    assert snapshot.total_rent_due == Decimal("0")
    assert snapshot.total_due == Decimal("500")


def test_same_day_lease_owes_one_month():
    today = date.today()
    lease = LeaseRecord(start_date=today, end_date=today, monthly_rent=800)

    assert compute_balance(lease, [], as_of=today).months_due == 1


@pytest.mark.parametrize("years_after", [1, 2, 10])
def test_months_due_freezes_after_end(lease, years_after):
    far_future = lease.end_date + timedelta(days=366 * years_after)

    assert months_due(lease, far_future) == months_due(lease, lease.end_date)
    assert months_due(lease, lease.end_date) == 12


def test_day_of_month_is_ignored():
    lease = LeaseRecord(start_date=date(2024, 1, 31), end_date=date(2024, 12, 31), monthly_rent=1000)

    # One day into February still owes February.
    assert months_due(lease, date(2024, 2, 1)) == 2


def test_term_cap_uses_thirty_day_months():
    lease = LeaseRecord(start_date=date(2024, 1, 31), end_date=date(2024, 3, 1), monthly_rent=1000)

    assert total_term_months(lease.start_date, lease.end_date) == 1
    assert months_due(lease, date(2024, 3, 1)) == 1


def test_total_term_months_rounds_up():
    assert total_term_months(date(2024, 1, 1), date(2024, 12, 31)) == 13
    assert total_term_months(date(2024, 1, 1), date(2024, 1, 31)) == 1
    assert total_term_months(date(2024, 1, 1), date(2024, 2, 1)) == 2


def test_total_term_months_rejects_inverted_term():
    with pytest.raises(InvalidLeaseTerm):
        total_term_months(date(2024, 2, 1), date(2024, 1, 1))


def test_calendar_months_between_spans_years():
    assert calendar_months_between(date(2023, 11, 20), date(2024, 2, 1)) == 3


def test_snapshot_as_dict_uses_camel_case(lease):
    data = compute_balance(lease, [], as_of=date(2024, 3, 15)).as_dict()

    assert data == {
        "totalDue": 3500.0,
        "totalPaid": 0.0,
        "balance": 3500.0,
        "monthsDue": 3,
        "totalRentDue": 3000.0,
    }
