"""
FastAPI middleware for x402-bch payment requirements.

Install: pip install x402-bch[fastapi]
Usage:   from x402_bch.fastapi.middleware import require_payment

Example:
    from fastapi import FastAPI
    from x402_bch.fastapi.middleware import require_payment

    app = FastAPI()
    app.middleware("http")(
        require_payment(pay_to_address="bitcoincash:qr...", routes={"GET /weather": 1000})
    )
"""
