from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from app.domain.exceptions import InvalidPaymentAmount, PaymentAlreadySettled
from app.domain.lease import LeaseRecord, PaymentStatus, PaymentType
from app.services.payment_ledger import ensure_payable, new_charge, outstanding_amount, settle_payment
from app.services.rent_balance import compute_balance


@pytest.fixture
def lease():
    return LeaseRecord(
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
        monthly_rent=1000,
        deposit=500,
    )


def test_new_charge_is_pending(lease):
    charge = new_charge(lease, 1000, due_date=date(2024, 2, 1))

    assert charge.status == PaymentStatus.PENDING
    assert charge.type == PaymentType.RENT
    assert charge.amount == Decimal("1000")
    assert charge.lease_id == lease.id
    assert charge.paid_at is None


@pytest.mark.parametrize("amount", [0, -10, "0.00"])
def test_new_charge_rejects_non_positive_amount(lease, amount):
    with pytest.raises(InvalidPaymentAmount):
        new_charge(lease, amount)


@pytest.mark.parametrize("amount", ["0.004", "10.001", Decimal("999.995")])
def test_new_charge_rejects_sub_cent_amount(lease, amount):
    with pytest.raises(InvalidPaymentAmount):
        new_charge(lease, amount)


def test_new_charge_accepts_trailing_zeros(lease):
    assert new_charge(lease, "12.500").amount == Decimal("12.5")


def test_settle_paid_stamps_paid_at(lease):
    charge = new_charge(lease, 1000)
    at = datetime(2024, 2, 3, 9, 30)

    settle_payment(charge, PaymentStatus.PAID, at=at)

    assert charge.status == PaymentStatus.PAID
    assert charge.paid_at == at


def test_settle_failed_leaves_paid_at_empty(lease):
    charge = new_charge(lease, 1000)

    settle_payment(charge, PaymentStatus.FAILED)

    assert charge.status == PaymentStatus.FAILED
    assert charge.paid_at is None


def test_repeated_outcome_is_a_no_op(lease):
    charge = new_charge(lease, 1000)
    settle_payment(charge, PaymentStatus.PAID, at=datetime(2024, 2, 3))

    settle_payment(charge, PaymentStatus.PAID, at=datetime(2030, 1, 1))

    assert charge.paid_at == datetime(2024, 2, 3)


def test_paid_payment_never_changes(lease):
    charge = new_charge(lease, 1000)
    settle_payment(charge, PaymentStatus.PAID)

    with pytest.raises(PaymentAlreadySettled):
        settle_payment(charge, PaymentStatus.FAILED)
    assert charge.status == PaymentStatus.PAID


def test_cannot_move_back_to_pending(lease):
    charge = new_charge(lease, 1000)

    with pytest.raises(PaymentAlreadySettled):
        settle_payment(charge, PaymentStatus.PENDING)


def test_default_paid_at_is_utc(lease):
    charge = new_charge(lease, 1000)
    settle_payment(charge, PaymentStatus.PAID)

    assert charge.paid_at.tzinfo is not None
    assert charge.paid_at.utcoffset() == timedelta(0)


def test_pending_charge_is_payable(lease):
    charge = new_charge(lease, 1000)
    assert ensure_payable(charge) is charge


@pytest.mark.parametrize("outcome", [PaymentStatus.PAID, PaymentStatus.FAILED])
def test_settled_charge_is_not_payable(lease, outcome):
    charge = new_charge(lease, 1000)
    settle_payment(charge, outcome)

    with pytest.raises(PaymentAlreadySettled):
        ensure_payable(charge)


def test_outstanding_amount_is_never_negative(lease):
    charge = new_charge(lease, 9000)
    settle_payment(charge, PaymentStatus.PAID)
    snapshot = compute_balance(lease, [charge], as_of=date(2024, 3, 15))

    assert snapshot.balance < 0
    assert outstanding_amount(snapshot) == Decimal("0")


def test_outstanding_amount_matches_positive_balance(lease):
    snapshot = compute_balance(lease, [], as_of=date(2024, 3, 15))

    assert outstanding_amount(snapshot) == Decimal("3500")
