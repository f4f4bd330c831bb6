"""x402-bch: pay-per-request HTTP gate for Bitcoin Cash."""

from x402_bch.constants import PAYMENT_HEADER, SCHEME, X402_VERSION
from x402_bch.encoding import decode_payment_header
from x402_bch.errors import (
    ConfigurationError,
    FacilitatorVerificationFailed,
    InvalidAmount,
    InvalidRoutePattern,
    MalformedPaymentHeader,
    MissingPaymentField,
    MissingPaymentHeader,
    NoMatchingRequirement,
    PaymentError,
    TransportUnavailable,
    X402Error,
)
from x402_bch.facilitator import (
    AuthHeaders,
    CreateHeadersAuthProvider,
    FacilitatorConfig,
    HTTPFacilitatorClient,
)
from x402_bch.gate import PaymentGate
from x402_bch.requirements import (
    build_payment_requirements,
    find_matching_payment_requirements,
    resolve_min_amount_required,
)
from x402_bch.routes import compile_routes, find_matching_route, normalize_path
from x402_bch.types import (
    CompiledRoute,
    HTTPProcessResult,
    HTTPRequestContext,
    PaymentPayload,
    PaymentRequiredResponse,
    PaymentRequirements,
    RouteConfig,
    VerifyResponse,
)

__all__ = [
    # Constants
    "PAYMENT_HEADER",
    "SCHEME",
    "X402_VERSION",
    # Gate
    "PaymentGate",
    # Routes
    "compile_routes",
    "find_matching_route",
    "normalize_path",
    # Requirements
    "build_payment_requirements",
    "find_matching_payment_requirements",
    "resolve_min_amount_required",
    # Encoding
    "decode_payment_header",
    # Facilitator
    "AuthHeaders",
    "CreateHeadersAuthProvider",
    "FacilitatorConfig",
    "HTTPFacilitatorClient",
    # Types
    "CompiledRoute",
    "HTTPProcessResult",
    "HTTPRequestContext",
    "PaymentPayload",
    "PaymentRequiredResponse",
    "PaymentRequirements",
    "RouteConfig",
    "VerifyResponse",
    # Errors
    "X402Error",
    "ConfigurationError",
    "InvalidRoutePattern",
    "InvalidAmount",
    "TransportUnavailable",
    "PaymentError",
    "MissingPaymentHeader",
    "MalformedPaymentHeader",
    "MissingPaymentField",
    "NoMatchingRequirement",
    "FacilitatorVerificationFailed",
]
