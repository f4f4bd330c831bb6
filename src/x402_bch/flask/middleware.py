import asyncio
import json
from typing import Any, Mapping, Optional
from urllib.parse import quote, urlsplit

from flask import Flask, g, request

from x402_bch.facilitator import FacilitatorConfig, HTTPFacilitatorClient
from x402_bch.gate import PaymentGate
from x402_bch.types import RESULT_PAYMENT_ERROR, HTTPRequestContext


class PaymentMiddleware:
    """
    Flask middleware for x402-bch payment requirements.

    Usage:
        PaymentMiddleware(
            app,
            pay_to_address="bitcoincash:qr...",
            routes={"GET /weather": 1000, "/premium/*": {"price": "5000 sats"}},
        )
    """

    def __init__(
        self,
        app: Flask,
        pay_to_address: str,
        routes: Mapping[str, Any],
        facilitator_config: Optional[
            FacilitatorConfig | HTTPFacilitatorClient | dict[str, Any]
        ] = None,
    ):
        self.app = app
        self.gate = PaymentGate(pay_to_address, routes, facilitator_config)
        self.original_wsgi_app = app.wsgi_app
        app.wsgi_app = self

    def _process(self, context: HTTPRequestContext):
        # Verification is async; run it on a private loop in this WSGI thread
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(self.gate.process_http_request(context))
        finally:
            loop.close()

    @staticmethod
    def _raw_path(environ) -> str:
        """Undecoded request path, relative to the application root."""
        raw_uri = environ.get("RAW_URI") or environ.get("REQUEST_URI")
        if not raw_uri:
            return quote(request.path, safe="/:@!$&'()*+,;=~")

        if raw_uri.startswith("/"):
            path = raw_uri.split("?", 1)[0]
        else:
            path = urlsplit(raw_uri).path
        if request.script_root and path.startswith(request.script_root):
            path = path[len(request.script_root) :]
        return path or "/"

    def __call__(self, environ, start_response):
        with self.app.request_context(environ):
            context = HTTPRequestContext(
                method=request.method,
                path=self._raw_path(environ),
                protocol=request.scheme,
                host=request.host,
                headers=dict(request.headers),
            )

            result = self._process(context)

            if result.type == RESULT_PAYMENT_ERROR and result.response is not None:
                body = json.dumps(result.response.body).encode("utf-8")
                headers = list(result.response.headers.items())
                headers.append(("Content-Length", str(len(body))))

                start_response("402 Payment Required", headers)
                return [body]

            if result.payment_requirements is not None:
                g.payment_details = result.payment_requirements
                g.verify_response = result.verify_response

            return self.original_wsgi_app(environ, start_response)
