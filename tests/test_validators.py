from __future__ import annotations

from decimal import Decimal

import pytest

from bmex.models import Side
from bmex.validators import (
    validate_all,
    validate_order_id,
    validate_order_type,
    validate_price,
    validate_quantity,
    validate_side,
    validate_symbol,
)


def test_symbol_is_uppercased():
    assert validate_symbol(" xbtusd ") == "XBTUSD"
    assert validate_symbol("XBT_USDT") == "XBT_USDT"


@pytest.mark.parametrize("symbol", ["X", "XBT-USD", "XBT USD", ""])
def test_invalid_symbol(symbol):
    with pytest.raises(ValueError, match="Invalid symbol"):
        validate_symbol(symbol)


def test_side():
    assert validate_side("buy") is Side.BUY
    assert validate_side("SELL") is Side.SELL
    with pytest.raises(ValueError, match="Invalid side"):
        validate_side("long")


def test_order_type():
    assert validate_order_type("LIMIT") == "Limit"
    assert validate_order_type("market") == "Market"
    with pytest.raises(ValueError):
        validate_order_type("StopLimit")


@pytest.mark.parametrize("quantity, expected", [("100", 100), (5, 5), ("1.0", 1)])
def test_quantity(quantity, expected):
    assert validate_quantity(quantity) == expected


@pytest.mark.parametrize("quantity", ["0", "-1", "1.5", "abc", "inf", "-Infinity", "NaN", "sNaN"])
def test_invalid_quantity(quantity):
    with pytest.raises(ValueError):
        validate_quantity(quantity)


def test_price():
    assert validate_price("30000.5", "Limit") == Decimal("30000.5")
    assert validate_price("30000.5", "Market") is None
    with pytest.raises(ValueError, match="required"):
        validate_price(None, "Limit")
    with pytest.raises(ValueError):
        validate_price("-1", "Limit")
    with pytest.raises(ValueError):
        validate_price("NaN", "Limit")


def test_order_id():
    assert validate_order_id(" 00000000-0000-0000-0000-000000000001 ") == (
        "00000000-0000-0000-0000-000000000001"
    )
    with pytest.raises(ValueError, match="Invalid order id"):
        validate_order_id("12345")


def test_validate_all():
    params = validate_all("xbtusd", "Buy", "Limit", "10", "30000")
    assert params == {
        "symbol": "XBTUSD",
        "side": Side.BUY,
        "order_type": "Limit",
        "quantity": 10,
        "price": Decimal("30000"),
    }
