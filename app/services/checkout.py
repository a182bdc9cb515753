"""
Hosted checkout sessions.
The payment provider is an injected collaborator: routes depend on
get_checkout_creator(), which a deployment overrides with a real gateway client.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from app.domain.exceptions import CheckoutUnavailable
from app.models.lease import Lease
from app.models.payment import Payment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    checkout_url: str


class CheckoutSessionCreator(Protocol):
    def create(self, payment: Payment, lease: Lease, customer_email: Optional[str]) -> CheckoutSession:
        ...


class UnconfiguredCheckout:
    """Default creator: no gateway is wired in."""

    def create(self, payment: Payment, lease: Lease, customer_email: Optional[str]) -> CheckoutSession:
        logger.warning(f"[PAYMENT] Checkout requested for payment {payment.id} but no gateway is configured")
        raise CheckoutUnavailable("The payment system is not configured")


def get_checkout_creator() -> CheckoutSessionCreator:
    return UnconfiguredCheckout()
