"""
Lease domain errors.
Raised by the engine modules; the HTTP layer maps `code` to a status.
"""


class LeaseError(Exception):
    """Base class for every rejected lease / payment operation."""

    code = "lease_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__doc__)
        self.message = message or (self.__doc__ or "").strip()


class InvalidLeaseTerm(LeaseError):
    """The lease term or economics are malformed."""

    code = "invalid_lease_term"


class AlreadySigned(LeaseError):
    """This party has already signed the lease."""

    code = "already_signed"

    def __init__(self, party: str):
        super().__init__(f"Lease has already been signed by the {party.lower()}")
        self.party = party


class InvalidState(LeaseError):
    """The lease is not in a state that allows this operation."""

    code = "invalid_state"


class IncompleteSignatures(LeaseError):
    """Both signatures are required to finalize the lease."""

    code = "incomplete_signatures"


class ConsentRequired(LeaseError):
    """The signer must confirm consent to sign."""

    code = "consent_required"


class InvalidPaymentAmount(LeaseError):
    """Payment amount must be greater than zero."""

    code = "invalid_payment_amount"


class PaymentAlreadySettled(LeaseError):
    """The payment has already been settled and cannot change."""

    code = "payment_already_settled"


class LeaseNotFinalized(LeaseError):
    """The lease is not finalized yet."""

    code = "lease_not_finalized"


class LeaseNotStarted(LeaseError):
    """The lease has not started yet."""

    code = "lease_not_started"


class LeaseEnded(LeaseError):
    """The lease has ended."""

    code = "lease_ended"


class CheckoutUnavailable(LeaseError):
    """The payment system is not configured."""

    code = "checkout_unavailable"
