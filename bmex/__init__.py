"""
bmex — Authenticated REST client for the BitMEX derivatives exchange.

Submodules
----------
crypto          HMAC-SHA256 request signing and expiry/nonce derivation.
headers         Transport headers for signed requests.
client          Call pipeline (dispatch, classification, retry) and endpoints.
errors          Error kinds and the ``Success`` / ``Failure`` outcome.
models          Typed JSON codecs for exchange entities.
config          Credentials and call tuning.
orders          Order-entry helpers and response formatting.
validators      Input validation for order parameters.
logging_config  Dual-output logging (console + rotating file).
"""

from bmex.client import BitmexClient, PRODUCTION_URL, TESTNET_URL
from bmex.config import CallConfig, Credentials, load_credentials
from bmex.crypto import Api, Verb, mk_query_params, sign
from bmex.errors import (
    BitmexError,
    CallCancelled,
    ClientError,
    DecodeError,
    Failure,
    ServerError,
    Success,
    TransportError,
    UnexpectedStatus,
)
from bmex.models import (
    ApiError,
    ApiKey,
    Dtc,
    OrderBookL2,
    OrderBookLevel,
    Plain,
    Quote,
    Side,
    Trade,
)

__all__ = [
    "BitmexClient",
    "PRODUCTION_URL",
    "TESTNET_URL",
    "CallConfig",
    "Credentials",
    "load_credentials",
    "Api",
    "Verb",
    "mk_query_params",
    "sign",
    "BitmexError",
    "CallCancelled",
    "ClientError",
    "DecodeError",
    "Failure",
    "ServerError",
    "Success",
    "TransportError",
    "UnexpectedStatus",
    "ApiError",
    "ApiKey",
    "Dtc",
    "OrderBookL2",
    "OrderBookLevel",
    "Plain",
    "Quote",
    "Side",
    "Trade",
]
