"""Framework-agnostic payment gate.

Use with framework-specific middleware (FastAPI, Flask, etc.)
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from x402_bch.constants import PAYMENT_HEADER, X402_VERSION
from x402_bch.encoding import decode_payment_header
from x402_bch.errors import (
    ConfigurationError,
    MissingPaymentHeader,
    NoMatchingRequirement,
    PaymentError,
)
from x402_bch.facilitator import FacilitatorConfig, HTTPFacilitatorClient
from x402_bch.requirements import (
    build_payment_requirements,
    find_matching_payment_requirements,
    resolve_min_amount_required,
)
from x402_bch.routes import compile_routes, find_matching_route
from x402_bch.types import (
    RESULT_NO_PAYMENT_REQUIRED,
    RESULT_PAYMENT_ERROR,
    RESULT_PAYMENT_VERIFIED,
    CompiledRoute,
    HTTPProcessResult,
    HTTPRequestContext,
    HTTPResponseInstructions,
    PaymentRequiredResponse,
    PaymentRequirements,
)

logger = logging.getLogger(__name__)


class PaymentGate:
    """Decides per request whether to pass through, challenge, or verify.

    Routes are compiled once here and never change afterwards, so one gate
    can serve concurrent requests.
    """

    def __init__(
        self,
        pay_to: str,
        routes: Mapping[str, Any],
        facilitator: HTTPFacilitatorClient | FacilitatorConfig | dict[str, Any] | None = None,
    ) -> None:
        """Create a payment gate.

        Args:
            pay_to: BCH address that receives payments.
            routes: Route pricing map.
            facilitator: Facilitator client, or configuration to build one.

        Raises:
            InvalidRoutePattern: If a route key has no path.
            InvalidAmount: If a route's minAmountRequired is unusable.
            TransportUnavailable: If no facilitator transport can be resolved.
        """
        self._pay_to = pay_to
        self._routes: tuple[CompiledRoute, ...] = compile_routes(routes)

        for route in self._routes:
            resolve_min_amount_required(route.config)

        if isinstance(facilitator, HTTPFacilitatorClient):
            self._facilitator = facilitator
        else:
            self._facilitator = HTTPFacilitatorClient(facilitator)

    @property
    def routes(self) -> tuple[CompiledRoute, ...]:
        return self._routes

    def requires_payment(self, path: str, method: str) -> bool:
        return find_matching_route(self._routes, path, method) is not None

    async def process_http_request(self, context: HTTPRequestContext) -> HTTPProcessResult:
        """Process HTTP request and return result.

        Returns:
            HTTPProcessResult indicating:
            - no-payment-required: Route is not priced
            - payment-verified: Payment valid, proceed with request
            - payment-error: Return the 402 response
        """
        route = find_matching_route(self._routes, context.path, context.method)
        if route is None:
            logger.debug("No priced route for %s %s", context.method, context.path)
            return HTTPProcessResult(type=RESULT_NO_PAYMENT_REQUIRED)

        requirements = build_payment_requirements(self._pay_to, route.config, context)

        try:
            header = context.get_header(PAYMENT_HEADER)
            if not header:
                raise MissingPaymentHeader()

            payment = decode_payment_header(header)

            selected = find_matching_payment_requirements(requirements, payment)
            if selected is None:
                raise NoMatchingRequirement()

            verify_response = await self._facilitator.verify(payment, selected)
        except PaymentError as e:
            if not isinstance(e, MissingPaymentHeader):
                logger.warning(
                    "Payment rejected for %s %s: %s", context.method, context.path, e
                )
            return self._payment_error(str(e), requirements)
        except ConfigurationError:
            raise
        except Exception as e:
            logger.warning("Facilitator verification request failed: %s", e)
            return self._payment_error(str(e), requirements)

        if not verify_response.is_valid:
            reason = verify_response.invalid_reason or "Payment verification failed"
            logger.info("Payment invalid for %s: %s", context.path, reason)
            return self._payment_error(reason, requirements, verify_response.payer)

        logger.info("Payment verified for %s from %s", context.path, verify_response.payer)
        return HTTPProcessResult(
            type=RESULT_PAYMENT_VERIFIED,
            payment_payload=payment,
            payment_requirements=selected,
            verify_response=verify_response,
        )

    @staticmethod
    def _payment_error(
        error: str,
        requirements: list[PaymentRequirements],
        payer: Optional[str] = None,
    ) -> HTTPProcessResult:
        body = PaymentRequiredResponse(
            x402_version=X402_VERSION,
            error=error,
            accepts=requirements,
            payer=payer,
        ).model_dump(by_alias=True, exclude_none=True)

        return HTTPProcessResult(
            type=RESULT_PAYMENT_ERROR,
            response=HTTPResponseInstructions(
                status=402,
                headers={"Content-Type": "application/json"},
                body=body,
            ),
        )
