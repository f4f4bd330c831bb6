from __future__ import annotations

import math
import re
from typing import Any, Optional, Sequence

from x402_bch.constants import (
    DEFAULT_ASSET,
    DEFAULT_MAX_TIMEOUT_SECONDS,
    DEFAULT_MIN_AMOUNT_REQUIRED,
    SCHEME,
)
from x402_bch.errors import InvalidAmount
from x402_bch.types import (
    HTTPRequestContext,
    PaymentPayload,
    PaymentRequirements,
    RouteConfig,
)

_SATOSHI_SUFFIX = re.compile(r"(sat|sats|satoshis)$", re.IGNORECASE)
_NON_NUMERIC = re.compile(r"[^0-9.]")


def _coerce_number(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("boolean is not an amount")
    if isinstance(value, str):
        value = value.strip()
    return float(value)


def _parse_price_string(price: str) -> Optional[int]:
    """Read a satoshi amount from strings like "1500" or "1500 sats"."""
    stripped = price.strip()
    if not (stripped.isdigit() or _SATOSHI_SUFFIX.search(stripped)):
        return None

    try:
        amount = float(_NON_NUMERIC.sub("", stripped))
    except ValueError:
        return None

    if not math.isfinite(amount) or amount < 1:
        return None
    return math.floor(amount)


def resolve_min_amount_required(route: RouteConfig) -> str:
    """Work out the satoshi amount a route charges.

    Order: an explicit ``minAmountRequired``, then a numeric ``price``,
    then a digits-only or satoshi-suffixed ``price`` string, then
    ``DEFAULT_MIN_AMOUNT_REQUIRED``.

    Raises:
        InvalidAmount: If ``minAmountRequired`` is set but is not a finite
            number of at least one satoshi.
    """
    if route.min_amount_required is not None:
        try:
            amount = _coerce_number(route.min_amount_required)
        except (TypeError, ValueError) as e:
            raise InvalidAmount(route.min_amount_required) from e
        if not math.isfinite(amount) or amount < 1:
            raise InvalidAmount(route.min_amount_required)
        return str(math.floor(amount))

    price = route.price
    if isinstance(price, (int, float)) and not isinstance(price, bool):
        if math.isfinite(price) and price >= 1:
            return str(math.floor(price))
    elif isinstance(price, str):
        parsed = _parse_price_string(price)
        if parsed is not None:
            return str(parsed)

    return str(DEFAULT_MIN_AMOUNT_REQUIRED)


def build_output_schema(route: RouteConfig, method: str) -> dict[str, Any]:
    if route.config.output_schema is not None:
        return route.config.output_schema
    return {
        "input": {
            "type": "http",
            "method": method.upper(),
            "discoverable": route.config.discoverable,
        },
        "output": {},
    }


def build_payment_requirements(
    pay_to: str,
    route: RouteConfig,
    context: HTTPRequestContext,
) -> list[PaymentRequirements]:
    """Build the payment requirements advertised for a matched route.

    Always a single entry today; callers treat it as a list.
    """
    config = route.config

    if isinstance(config.resource, str):
        resource = config.resource
    else:
        resource = f"{context.protocol}://{context.host}{context.path}"

    max_timeout_seconds = config.max_timeout_seconds
    if max_timeout_seconds is None:
        max_timeout_seconds = DEFAULT_MAX_TIMEOUT_SECONDS

    return [
        PaymentRequirements(
            scheme=SCHEME,
            network=route.network,
            min_amount_required=resolve_min_amount_required(route),
            resource=resource,
            description=config.description or "",
            mime_type=config.mime_type or "",
            pay_to=pay_to,
            max_timeout_seconds=max_timeout_seconds,
            asset=config.asset or DEFAULT_ASSET,
            output_schema=build_output_schema(route, context.method),
            extra=config.extra or {},
        )
    ]


def find_matching_payment_requirements(
    payment_requirements: Sequence[PaymentRequirements],
    payment: PaymentPayload,
) -> Optional[PaymentRequirements]:
    """Pick the requirement whose scheme and network the payment targets."""
    for requirements in payment_requirements:
        if (
            requirements.scheme == payment.scheme
            and requirements.network == payment.network
        ):
            return requirements
    return None
