"""Protocol constants for the BCH variant of x402."""

X402_VERSION = 1

SCHEME = "utxo"
DEFAULT_NETWORK = "bch"

PAYMENT_HEADER = "X-PAYMENT"

# Used when a route has no usable price or minAmountRequired
DEFAULT_MIN_AMOUNT_REQUIRED = 1000
DEFAULT_MAX_TIMEOUT_SECONDS = 60
DEFAULT_ASSET = "0x0000000000000000000000000000000000000001"

DEFAULT_FACILITATOR_URL = "http://localhost:4345/facilitator"

# Reserved key in the route map that sets the network for every route
NETWORK_KEY = "network"
