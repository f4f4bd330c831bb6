"""Facilitator doubles for testing."""

import json
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx

PAY_TO = "bitcoincash:qpayto0000000000000000000000000000000000"


def make_payment_header(
    scheme: str = "utxo",
    network: str = "bch",
    x402_version: int = 1,
    payload: Optional[dict[str, Any]] = None,
) -> str:
    """Helper to create an X-PAYMENT header value."""
    return json.dumps(
        {
            "x402Version": x402_version,
            "scheme": scheme,
            "network": network,
            "payload": payload or {"txid": "abc123", "vout": 0, "amountSat": 1500},
        }
    )


def make_http_client(
    json_body: Optional[dict[str, Any]] = None,
    status_code: int = 200,
    side_effect: Optional[BaseException] = None,
) -> MagicMock:
    """Mock async HTTP client whose post() answers like a facilitator."""
    client = MagicMock()
    if side_effect is not None:
        client.post = AsyncMock(side_effect=side_effect)
    else:
        client.post = AsyncMock(
            return_value=httpx.Response(status_code, json=json_body or {})
        )
    return client
