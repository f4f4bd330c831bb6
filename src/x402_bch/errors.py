"""Exceptions raised by the payment gate.

ConfigurationError subclasses signal a broken deployment and abort setup.
PaymentError subclasses are request outcomes; the gate turns their message
into the ``error`` field of a 402 response.
"""

from typing import Optional


class X402Error(Exception):
    """Base class for x402-bch errors."""

    pass


class ConfigurationError(X402Error):
    """Raised when the gate is configured incorrectly."""

    pass


class InvalidRoutePattern(ConfigurationError):
    """Raised when a route key has no usable path or cannot be compiled."""

    def __init__(self, pattern: str, reason: str = "missing path"):
        self.pattern = pattern
        super().__init__(f"Invalid route pattern {pattern!r}: {reason}")


class InvalidAmount(ConfigurationError):
    """Raised when minAmountRequired is not a finite positive number."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid minAmountRequired: {value!r}")


class TransportUnavailable(ConfigurationError):
    """Raised when no HTTP client can be resolved for the facilitator."""

    def __init__(self):
        super().__init__("No HTTP transport available for facilitator requests")


class PaymentError(X402Error):
    """Base class for errors answered with a 402 challenge."""

    pass


class MissingPaymentHeader(PaymentError):
    def __init__(self):
        super().__init__("X-PAYMENT header is required")


class MalformedPaymentHeader(PaymentError):
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Invalid JSON in X-PAYMENT header: {detail}")


class MissingPaymentField(PaymentError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing required field in X-PAYMENT header: {field}")


class NoMatchingRequirement(PaymentError):
    def __init__(self):
        super().__init__("Unable to find matching payment requirements")


class FacilitatorVerificationFailed(PaymentError):
    """Raised when the facilitator answers /verify with a non-success status."""

    def __init__(self, status: int, status_text: Optional[str] = None):
        self.status = status
        self.status_text = status_text or ""
        super().__init__(
            f"Facilitator verification failed: {status} {self.status_text}".rstrip()
        )
