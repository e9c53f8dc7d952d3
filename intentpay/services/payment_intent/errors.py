"""Errors raised while creating a payment intent.

Each error carries the HTTP status it maps to at the route boundary.
"""


class PaymentIntentError(Exception):
    """Base class for payment intent failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidAmount(PaymentIntentError):
    """Amount is missing, non-numeric, or below the configured minimum."""

    status_code = 400


class TestCardInLiveMode(PaymentIntentError):
    """A well-known test card number was sent while using a live secret key."""

    __test__ = False
    status_code = 400


class ProcessorError(PaymentIntentError):
    """The payment processor rejected or failed the request."""

    status_code = 500
