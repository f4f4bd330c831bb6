"""
Flask middleware for x402-bch payment requirements.

Install: pip install x402-bch[flask]
Usage:   from x402_bch.flask.middleware import PaymentMiddleware

Example:
    from flask import Flask
    from x402_bch.flask.middleware import PaymentMiddleware

    app = Flask(__name__)
    PaymentMiddleware(app, pay_to_address="bitcoincash:qr...", routes={"GET /weather": 1000})
"""
