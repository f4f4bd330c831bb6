from typing import Any, Callable, Mapping, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from x402_bch.facilitator import FacilitatorConfig, HTTPFacilitatorClient
from x402_bch.gate import PaymentGate
from x402_bch.types import RESULT_PAYMENT_ERROR, HTTPRequestContext


def require_payment(
    pay_to_address: str,
    routes: Mapping[str, Any],
    facilitator_config: Optional[
        FacilitatorConfig | HTTPFacilitatorClient | dict[str, Any]
    ] = None,
):
    """Generate a FastAPI middleware that gates priced routes behind x402-bch.

    Args:
        pay_to_address (str): BCH address to receive payments
        routes (Mapping[str, Any]): Route pricing map, e.g.
            ``{"network": "bch", "GET /weather": 1000, "/reports/*": {"price": "2000 sats"}}``
        facilitator_config (optional): Facilitator client or its configuration.
            Defaults to DEFAULT_FACILITATOR_URL with a fresh httpx client per call.

    Returns:
        Callable: FastAPI middleware function that checks for valid payment before processing requests
    """
    gate = PaymentGate(pay_to_address, routes, facilitator_config)

    async def middleware(request: Request, call_next: Callable):
        # The matcher percent-decodes, so hand it the undecoded path
        raw_path = request.scope.get("raw_path")
        context = HTTPRequestContext(
            method=request.method,
            path=raw_path.decode("latin-1") if raw_path else request.url.path,
            protocol=request.url.scheme,
            host=request.headers.get("host") or request.url.netloc,
            headers=request.headers,
        )

        result = await gate.process_http_request(context)

        if result.type == RESULT_PAYMENT_ERROR and result.response is not None:
            return JSONResponse(
                content=result.response.body,
                status_code=result.response.status,
                headers=result.response.headers,
            )

        if result.payment_requirements is not None:
            request.state.payment_details = result.payment_requirements
            request.state.verify_response = result.verify_response

        return await call_next(request)

    return middleware
