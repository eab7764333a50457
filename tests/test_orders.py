from __future__ import annotations

import json
from decimal import Decimal

from bmex.errors import ClientError, Failure, Success
from bmex.models import Side
from bmex.orders import build_order, format_order_response, place_order

from conftest import StubResponse


def test_build_market_order():
    order = build_order("XBTUSD", Side.BUY, "Market", 100, cl_ord_id="my-id")
    assert order == {
        "symbol": "XBTUSD",
        "side": "Buy",
        "ordType": "Market",
        "orderQty": 100,
        "clOrdID": "my-id",
    }


def test_build_limit_order_generates_client_id():
    order = build_order("XBTUSD", Side.SELL, "Limit", 10, Decimal("30000.5"))
    assert order["price"] == 30000.5
    assert order["clOrdID"]
    assert build_order("XBTUSD", Side.SELL, "Limit", 10, Decimal("1"))["clOrdID"] != order["clOrdID"]


def test_place_order_submits_bulk_of_one(make_client):
    ack = [{"orderID": "abc", "ordStatus": "New", "symbol": "XBTUSD"}]
    client, session = make_client(StubResponse(200, ack))

    result = place_order(client, "XBTUSD", Side.BUY, "Limit", 10, Decimal("30000"))

    assert result == Success(ack)
    sent = json.loads(session.calls[0]["data"])
    assert session.calls[0]["url"].endswith("/api/v1/order/bulk")
    [order] = sent["orders"]
    assert order["side"] == "Buy"
    assert order["price"] == 30000.0


def test_place_order_returns_failure(make_client):
    client, _ = make_client(
        StubResponse(400, {"error": {"name": "ValidationError", "message": "Invalid price"}})
    )
    result = place_order(client, "XBTUSD", Side.BUY, "Limit", 10, Decimal("1"))
    assert isinstance(result, Failure)
    assert isinstance(result.error, ClientError)


def test_format_order_response():
    text = format_order_response({"orderID": "abc", "ordStatus": "Filled", "avgPx": 30000})
    assert "abc" in text
    assert "Filled" in text
    assert "30000" in text
