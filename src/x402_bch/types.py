from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from x402_bch.constants import (
    DEFAULT_NETWORK,
    SCHEME,
    X402_VERSION,
)


class BaseCompoundType(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# A bare price in a route map: 1500, "1500", "1500 sats"
ShorthandPrice = Union[int, float, str]


class RouteResourceConfig(BaseCompoundType):
    """Per-route metadata copied into the advertised payment requirements"""

    description: Optional[str] = None
    mime_type: Optional[str] = None
    max_timeout_seconds: Optional[int] = None
    resource: Optional[str] = None
    asset: Optional[str] = None
    extra: Optional[dict[str, Any]] = None
    output_schema: Optional[dict[str, Any]] = None
    discoverable: bool = True


class RouteConfig(BaseCompoundType):
    """Canonical form of a route map value, whether it was shorthand or verbose"""

    network: str = DEFAULT_NETWORK
    price: Optional[ShorthandPrice] = None
    min_amount_required: Optional[ShorthandPrice] = None
    config: RouteResourceConfig = Field(default_factory=RouteResourceConfig)


@dataclass(frozen=True)
class CompiledRoute:
    verb: str
    regex: re.Pattern[str]
    config: RouteConfig


class PaymentRequirements(BaseCompoundType):
    scheme: str = SCHEME
    network: str = DEFAULT_NETWORK
    min_amount_required: str
    resource: str
    description: str = ""
    mime_type: str = ""
    pay_to: str
    max_timeout_seconds: int
    asset: str
    output_schema: Optional[dict[str, Any]] = None
    extra: dict[str, Any] = Field(default_factory=dict)

    @field_validator("min_amount_required")
    def validate_min_amount_required(cls, v):
        if not v.isdigit() or int(v) <= 0:
            raise ValueError(
                "min_amount_required must be a positive integer encoded as a string"
            )
        return v


class PaymentPayload(BaseCompoundType):
    x402_version: int
    scheme: str
    network: str
    payload: dict[str, Any]


class VerifyResponse(BaseCompoundType):
    is_valid: bool
    invalid_reason: Optional[str] = None
    payer: Optional[str] = None


# Returned by the gate as json alongside a 402 response code
class PaymentRequiredResponse(BaseCompoundType):
    x402_version: int = X402_VERSION
    error: str
    accepts: list[PaymentRequirements]
    payer: Optional[str] = None


@dataclass
class HTTPRequestContext:
    """Framework-independent view of an inbound request."""

    method: str
    path: str
    protocol: str = "http"
    host: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    def get_header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


@dataclass
class HTTPResponseInstructions:
    status: int
    headers: dict[str, str]
    body: dict[str, Any]


RESULT_NO_PAYMENT_REQUIRED = "no-payment-required"
RESULT_PAYMENT_ERROR = "payment-error"
RESULT_PAYMENT_VERIFIED = "payment-verified"


@dataclass
class HTTPProcessResult:
    type: str
    response: Optional[HTTPResponseInstructions] = None
    payment_payload: Optional[PaymentPayload] = None
    payment_requirements: Optional[PaymentRequirements] = None
    verify_response: Optional[VerifyResponse] = None
