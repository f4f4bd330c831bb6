import json
from typing import Any

from pydantic import ValidationError

from x402_bch.constants import X402_VERSION
from x402_bch.errors import MalformedPaymentHeader, MissingPaymentField
from x402_bch.types import PaymentPayload

REQUIRED_PAYMENT_FIELDS = ("x402Version", "scheme", "network", "payload")


def decode_payment_header(header: str) -> PaymentPayload:
    """Decode the JSON value of an X-PAYMENT header.

    The client's ``x402Version`` is replaced with the version this server
    speaks; it is never used to pick behaviour.

    Args:
        header: Raw header value

    Returns:
        Decoded PaymentPayload

    Raises:
        MalformedPaymentHeader: If the value is not a JSON object.
        MissingPaymentField: If a required field is absent.
    """
    try:
        data: Any = json.loads(header)
    except (TypeError, ValueError) as e:
        raise MalformedPaymentHeader(str(e)) from e

    if not isinstance(data, dict):
        raise MalformedPaymentHeader("expected a JSON object")

    for name in REQUIRED_PAYMENT_FIELDS:
        if data.get(name) is None:
            raise MissingPaymentField(name)

    data["x402Version"] = X402_VERSION

    try:
        return PaymentPayload.model_validate(data)
    except ValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        raise MalformedPaymentHeader(f"{location}: {error['msg']}") from e
