"""
Request signing for the BitMEX API.

The signature is an HMAC-SHA256 over ``VERB + endpoint + nonce + body``,
where *endpoint* is the path plus its query string exactly as it goes on
the wire and *nonce* is either an absolute expiry (REST) or a rolling
millisecond nonce (websocket authentication).
"""

from __future__ import annotations

import enum
import hashlib
import hmac
import time
from typing import Dict, Optional

# Seconds of validity granted to a REST request.
EXPIRY_WINDOW = 5


class Verb(str, enum.Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    def __str__(self) -> str:
        return self.value


class Api(enum.Enum):
    REST = "rest"
    WS = "ws"


def expiry_for(api: Api, now: Optional[float] = None) -> int:
    """
    Derive the nonce/expiry for a request signed at *now* (epoch seconds).

    REST requests get an absolute expiry in whole seconds; websocket
    authentication uses the current time in milliseconds.
    """
    if now is None:
        now = time.time()
    if api is Api.REST:
        return int(now) + EXPIRY_WINDOW
    return int(now * 1000)


def sign(secret: bytes, verb: Verb, endpoint: str, expiry: int, body: str = "") -> str:
    """Return the lowercase hex HMAC-SHA256 signature of one request."""
    message = f"{Verb(verb).value}{endpoint}{expiry}{body}"
    return hmac.new(secret, message.encode("utf-8"), hashlib.sha256).hexdigest()


def mk_query_params(
    key: str,
    secret: bytes,
    verb: Verb,
    endpoint: str,
    body: str = "",
    api: Api = Api.REST,
    now: Optional[float] = None,
) -> Dict[str, str]:
    """
    Build the three authentication values for a request.

    Returns
    -------
    dict
        ``api-expires`` (or ``api-nonce`` for websocket), ``api-key`` and
        ``api-signature``, in that order.
    """
    expiry = expiry_for(api, now)
    signature = sign(secret, verb, endpoint, expiry, body)
    nonce_name = "api-expires" if api is Api.REST else "api-nonce"
    return {
        nonce_name: str(expiry),
        "api-key": key,
        "api-signature": signature,
    }
