"""HTTP-based facilitator client for x402-bch."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Protocol, Union

import httpx

from x402_bch.constants import DEFAULT_FACILITATOR_URL, X402_VERSION
from x402_bch.errors import FacilitatorVerificationFailed, TransportUnavailable
from x402_bch.types import PaymentPayload, PaymentRequirements, VerifyResponse

logger = logging.getLogger(__name__)


# ============================================================================
# Auth Provider Protocol
# ============================================================================


@dataclass
class AuthHeaders:
    """Authentication headers for facilitator endpoints."""

    verify: dict[str, str] = field(default_factory=dict)


class AuthProvider(Protocol):
    """Generates authentication headers for facilitator requests."""

    async def get_auth_headers(self) -> AuthHeaders:
        """Get authentication headers for each endpoint."""
        ...


CreateHeaders = Callable[
    [], Union[dict[str, dict[str, str]], Awaitable[dict[str, dict[str, str]]]]
]


class CreateHeadersAuthProvider:
    """AuthProvider that wraps a create_headers callable.

    The callable returns ``{"verify": {...}}`` and may be sync or async.
    """

    def __init__(self, create_headers: CreateHeaders) -> None:
        self._create_headers = create_headers

    async def get_auth_headers(self) -> AuthHeaders:
        """Get authentication headers by calling the create_headers function."""
        result = self._create_headers()
        if inspect.isawaitable(result):
            result = await result
        return AuthHeaders(verify=dict((result or {}).get("verify") or {}))


# ============================================================================
# Configuration
# ============================================================================


def create_default_http_client(timeout: Optional[float] = None) -> httpx.AsyncClient:
    """Build the HTTP client used when none is injected."""
    return httpx.AsyncClient(timeout=timeout, follow_redirects=True)


@dataclass
class FacilitatorConfig:
    """Configuration for HTTP facilitator client.

    ``http_client`` is any object with ``await post(url, headers=..., json=...)``
    returning an httpx-style response. Without one, ``client_factory`` builds a
    fresh client per verification; set it to None to require an injected client.
    """

    url: str = DEFAULT_FACILITATOR_URL
    timeout: Optional[float] = None
    http_client: Any = None
    client_factory: Optional[Callable[[Optional[float]], Any]] = (
        create_default_http_client
    )
    verify_headers: dict[str, str] = field(default_factory=dict)
    auth_provider: Optional[AuthProvider] = None


# ============================================================================
# HTTP Facilitator Client
# ============================================================================


class HTTPFacilitatorClient:
    """Talks to a remote x402-bch facilitator over HTTP.

    Only verification is performed; the facilitator's verdict is final.
    """

    def __init__(self, config: FacilitatorConfig | dict[str, Any] | None = None) -> None:
        """Create HTTP facilitator client.

        Args:
            config: Optional configuration. Accepts either:
                - FacilitatorConfig dataclass (recommended)
                - Dict with 'url' and optional 'verify_headers' and
                  'create_auth_headers' (camelCase keys also accepted)
                - None (uses defaults)

        Raises:
            TransportUnavailable: If no http_client is given and the default
                client factory has been disabled.
        """
        if isinstance(config, dict):
            config = self._config_from_dict(config)
        config = config or FacilitatorConfig()

        self._url = config.url.rstrip("/")
        self._timeout = config.timeout
        self._http_client = config.http_client
        self._client_factory = config.client_factory
        self._verify_headers = dict(config.verify_headers)
        self._auth_provider = config.auth_provider

        if self._http_client is None and self._client_factory is None:
            raise TransportUnavailable()

    @staticmethod
    def _config_from_dict(config: dict[str, Any]) -> FacilitatorConfig:
        create_headers = config.get("create_auth_headers", config.get("createAuthHeaders"))
        verify_headers = config.get("verify_headers", config.get("verifyHeaders"))

        return FacilitatorConfig(
            url=config.get("url", DEFAULT_FACILITATOR_URL),
            timeout=config.get("timeout"),
            http_client=config.get("http_client", config.get("transport")),
            verify_headers=dict(verify_headers or {}),
            auth_provider=(
                CreateHeadersAuthProvider(create_headers) if create_headers else None
            ),
        )

    @property
    def url(self) -> str:
        """Get facilitator URL."""
        return self._url

    async def _resolve_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        headers.update(self._verify_headers)

        if self._auth_provider:
            auth = await self._auth_provider.get_auth_headers()
            headers.update(auth.verify)

        return headers

    async def verify(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> VerifyResponse:
        """Verify a payment with the facilitator.

        Args:
            payload: Payment payload to verify.
            requirements: Requirements to verify against.

        Returns:
            VerifyResponse. ``is_valid=False`` is a normal outcome.

        Raises:
            FacilitatorVerificationFailed: If the facilitator answers with a
                non-success status.
            httpx.HTTPError: If the request itself fails.
        """
        headers = await self._resolve_headers()

        request_body = {
            "x402Version": X402_VERSION,
            "paymentPayload": payload.model_dump(by_alias=True, exclude_none=True),
            "paymentRequirements": requirements.model_dump(
                by_alias=True, exclude_none=True
            ),
        }

        if self._http_client is not None:
            response = await self._http_client.post(
                f"{self._url}/verify", headers=headers, json=request_body
            )
        else:
            async with self._client_factory(self._timeout) as client:
                response = await client.post(
                    f"{self._url}/verify", headers=headers, json=request_body
                )

        if not response.is_success:
            logger.warning(
                "Facilitator %s/verify answered %s", self._url, response.status_code
            )
            raise FacilitatorVerificationFailed(
                response.status_code, response.reason_phrase
            )

        return VerifyResponse.model_validate(response.json())
