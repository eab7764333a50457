"""
Authenticated BitMEX REST client.

Handles authentication (HMAC-SHA256 signing), request dispatch, response
classification and bounded retry of server errors.  Public methods never
raise for API or transport failures: they return ``Success`` holding the
parsed JSON (or decoded entities) or ``Failure`` holding one of the error
kinds from ``bmex.errors``.

Retrying writes
---------------
A 5xx response is retried with the *same* body.  For non-idempotent
writes (``submit_order``, ``cancel_all_orders_after`` …) the first attempt
may already have taken effect on the exchange even though its response
was lost, so a retry can duplicate it.  Callers submitting orders should
set ``clOrdID`` on each order so duplicates are rejected server-side, or
use ``CallConfig(max_attempts=1)``.
"""

from __future__ import annotations

import json
import logging
import threading
import time
import uuid
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlencode

import requests

from .config import CallConfig, Credentials
from .crypto import Verb
from .errors import (
    CallCancelled,
    ClientError,
    DecodeError,
    Failure,
    Result,
    ServerError,
    Success,
    TransportError,
    UnexpectedStatus,
)
from .headers import mk_headers
from .models import ApiError, ApiKey, OrderBookL2, Quote, Trade, decode_list

logger = logging.getLogger("bmex")

PRODUCTION_URL = "https://www.bitmex.com"
TESTNET_URL = "https://testnet.bitmex.com"

Query = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]


def encode_query(query: Optional[Query]) -> str:
    """Encode *query* in order; list values become repeated keys."""
    if not query:
        return ""
    items = list(query.items()) if isinstance(query, Mapping) else list(query)
    return urlencode(items, doseq=True)


def encode_body(body: Any) -> str:
    """Serialize *body* once; the same string is signed and sent."""
    return json.dumps(body, separators=(",", ":"))


def _decoded(result: Result, decode: Callable[[Any], Any]) -> Result:
    if isinstance(result, Failure):
        return result
    try:
        return Success(decode(result.value))
    except DecodeError as exc:
        return Failure(exc)


# ── Client ─────────────────────────────────────────────────────────────────


class BitmexClient:
    """Signed REST access to BitMEX production or testnet."""

    def __init__(
        self,
        credentials: Credentials,
        testnet: bool = False,
        config: Optional[CallConfig] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ):
        self.credentials = credentials
        self.testnet = testnet
        self.base_url = TESTNET_URL if testnet else PRODUCTION_URL
        self.config = config or CallConfig()
        self._session = session or requests.Session()
        self._sleep = sleep
        self._clock = clock

    # ── context-manager support ────────────────────────────────────────

    def __enter__(self) -> "BitmexClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    # ── call pipeline ──────────────────────────────────────────────────

    def _pause(self, cancel: Optional[threading.Event]) -> None:
        if cancel is None:
            self._sleep(self.config.retry_delay)
        else:
            cancel.wait(self.config.retry_delay)

    def call(
        self,
        verb: Union[Verb, str],
        path: str,
        query: Optional[Query] = None,
        body: Any = None,
        cancel: Optional[threading.Event] = None,
    ) -> Result:
        """
        Perform one logical API call.

        Parameters
        ----------
        verb : Verb or str
            ``GET``, ``POST``, ``PUT`` or ``DELETE``.
        path : str
            API path, e.g. ``/api/v1/position``.
        query : mapping or sequence of pairs, optional
            Query parameters, encoded in the given order.
        body : JSON-serializable, optional
            Request body.
        cancel : threading.Event, optional
            Once set, no further attempt is dispatched.

        Returns
        -------
        Success or Failure
            ``Success`` holds the parsed JSON body of a 2xx response.
            ``Failure`` holds ``TransportError``, ``ClientError`` (4xx),
            ``ServerError`` (5xx on every attempt), ``UnexpectedStatus``,
            ``DecodeError`` or ``CallCancelled``.
        """
        verb = Verb(verb)
        query_string = encode_query(query)
        endpoint = f"{path}?{query_string}" if query_string else path
        url = f"{self.base_url}{endpoint}"
        body_str = encode_body(body) if body is not None else ""
        data = body_str.encode("utf-8") if body is not None else None

        last_status = 0
        for attempt in range(1, self.config.max_attempts + 1):
            if attempt > 1:
                self._pause(cancel)
            if cancel is not None and cancel.is_set():
                return Failure(CallCancelled(verb.value, path, attempt - 1))

            # Fresh expiry per attempt; the body string never changes.
            headers = mk_headers(
                self.credentials.key,
                self.credentials.secret,
                verb,
                endpoint,
                body_str,
                now=self._clock(),
            )
            logger.debug("%s %s -> %s", verb, path, body_str)

            try:
                # A followed redirect would replay the request unsigned, possibly as GET.
                response = self._session.request(
                    verb.value,
                    url,
                    headers=headers,
                    data=data,
                    timeout=self.config.timeout,
                    allow_redirects=False,
                )
            except requests.RequestException as exc:
                logger.warning("%s %s: transport error: %s", verb, path, exc)
                return Failure(TransportError(verb.value, path, exc))

            status = response.status_code
            logger.debug("%s %s <- HTTP %s (attempt %d)", verb, path, status, attempt)

            if 200 <= status < 300:
                try:
                    return Success(response.json())
                except ValueError as exc:
                    return Failure(DecodeError(f"invalid JSON in success body: {exc}"))

            if 400 <= status < 500:
                return Failure(self._client_error(status, response))

            if 500 <= status < 600:
                logger.error(
                    "%s %s: HTTP %s (attempt %d/%d)",
                    verb, path, status, attempt, self.config.max_attempts,
                )
                last_status = status
                continue

            return Failure(UnexpectedStatus(verb.value, path, status))

        return Failure(ServerError(verb.value, path, last_status, self.config.max_attempts))

    @staticmethod
    def _client_error(status: int, response: requests.Response) -> Union[ClientError, DecodeError]:
        try:
            error = ApiError.from_wrapped_json(response.json())
        except DecodeError as exc:
            return exc
        except ValueError as exc:
            return DecodeError(f"invalid JSON in error body: {exc}")
        return ClientError(status, error.name, error.message)

    # ── account & orders ───────────────────────────────────────────────

    def position(self) -> Result:
        """Open positions (``GET /api/v1/position``)."""
        return self.call(Verb.GET, "/api/v1/position")

    def submit_order(self, orders: List[Dict[str, Any]]) -> Result:
        """
        Submit one or more orders (``POST /api/v1/order/bulk``).

        Not idempotent: see the module docstring about retries.
        """
        return self.call(Verb.POST, "/api/v1/order/bulk", body={"orders": list(orders)})

    def update_order(self, orders: List[Dict[str, Any]]) -> Result:
        """Amend one or more orders (``PUT /api/v1/order/bulk``)."""
        return self.call(Verb.PUT, "/api/v1/order/bulk", body={"orders": list(orders)})

    def cancel_order(self, order_id: Union[uuid.UUID, str]) -> Result:
        """
        Cancel an order by exchange order id (``DELETE /api/v1/order``).

        Raises
        ------
        ValueError
            If *order_id* is not a UUID.
        """
        order_id = str(uuid.UUID(str(order_id)))
        return self.call(Verb.DELETE, "/api/v1/order", body={"orderID": order_id})

    def cancel_all_orders(
        self,
        symbol: Optional[str] = None,
        filter: Optional[Dict[str, Any]] = None,
    ) -> Result:
        """Cancel every open order, optionally narrowed (``DELETE /api/v1/order/all``)."""
        body: Dict[str, Any] = {}
        if filter is not None:
            body["filter"] = filter
        if symbol is not None:
            body["symbol"] = symbol
        return self.call(Verb.DELETE, "/api/v1/order/all", body=body)

    def cancel_all_orders_after(self, timeout: int) -> Result:
        """
        Arm the dead-man's switch (``POST /api/v1/order/cancelAllAfter``).

        *timeout* is in milliseconds; ``0`` disarms it.
        """
        return self.call(Verb.POST, "/api/v1/order/cancelAllAfter", body={"timeout": timeout})

    def dtc_api_keys(self, username: Optional[str] = None) -> Result:
        """
        DTC-enabled API keys (``GET /api/v1/apiKey/dtc/all`` or ``/get``).

        Returns ``list[ApiKey]`` for all users, or the single ``ApiKey``
        of *username*.
        """
        if username is None:
            result = self.call(Verb.GET, "/api/v1/apiKey/dtc/all")
            return _decoded(result, lambda json_: decode_list(ApiKey, json_))
        result = self.call(Verb.GET, "/api/v1/apiKey/dtc/get", query=[("get", username)])
        return _decoded(result, ApiKey.from_json)

    # ── market data ────────────────────────────────────────────────────

    def quotes(self, symbol: str, count: int = 100, reverse: bool = True) -> Result:
        """Recent top-of-book quotes as ``list[Quote]`` (``GET /api/v1/quote``)."""
        query = [("symbol", symbol), ("count", count), ("reverse", str(reverse).lower())]
        return _decoded(
            self.call(Verb.GET, "/api/v1/quote", query=query),
            lambda json_: decode_list(Quote, json_),
        )

    def trades(self, symbol: str, count: int = 100, reverse: bool = True) -> Result:
        """Recent trades as ``list[Trade]`` (``GET /api/v1/trade``)."""
        query = [("symbol", symbol), ("count", count), ("reverse", str(reverse).lower())]
        return _decoded(
            self.call(Verb.GET, "/api/v1/trade", query=query),
            lambda json_: decode_list(Trade, json_),
        )

    def order_book_l2(self, symbol: str, depth: int = 25) -> Result:
        """L2 order book as ``list[OrderBookL2]`` (``GET /api/v1/orderBook/L2``)."""
        query = [("symbol", symbol), ("depth", depth)]
        return _decoded(
            self.call(Verb.GET, "/api/v1/orderBook/L2", query=query),
            lambda json_: decode_list(OrderBookL2, json_),
        )
