"""
Input validators for order-entry parameters.

Every public function raises ``ValueError`` with a human-readable message
when validation fails.
"""

from __future__ import annotations

import re
import uuid
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from .models import Side

# BitMEX symbols are uppercase alphanumeric, optionally with underscores
# (e.g. XBTUSD, ETHUSD, XBTZ24, XBT_USDT).
_SYMBOL_RE = re.compile(r"^[A-Z0-9_]{2,20}$")

VALID_ORDER_TYPES = ("Market", "Limit")


def validate_symbol(symbol: str) -> str:
    """Return the uppercased symbol or raise on invalid format."""
    symbol = symbol.strip().upper()
    if not _SYMBOL_RE.match(symbol):
        raise ValueError(
            f"Invalid symbol '{symbol}'. "
            "Expected uppercase alphanumeric (e.g. XBTUSD)."
        )
    return symbol


def validate_side(side: str) -> Side:
    """Return the ``Side`` named by *side* or raise if not Buy/Sell."""
    parsed = Side.of_string(side)
    if parsed is None:
        raise ValueError(
            f"Invalid side '{side}'. Must be one of: {', '.join(s.value for s in Side)}."
        )
    return parsed


def validate_order_type(order_type: str) -> str:
    """Return the canonical order type (``Market``/``Limit``) or raise."""
    for valid in VALID_ORDER_TYPES:
        if order_type.strip().lower() == valid.lower():
            return valid
    raise ValueError(
        f"Invalid order type '{order_type}'. "
        f"Must be one of: {', '.join(VALID_ORDER_TYPES)}."
    )


def validate_quantity(quantity: Union[str, int]) -> int:
    """
    Return a positive whole number of contracts or raise.

    Raises
    ------
    ValueError
        If *quantity* is not a positive integer.
    """
    try:
        qty = Decimal(str(quantity))
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid quantity '{quantity}'. Must be a positive integer.")
    if not qty.is_finite():
        raise ValueError(f"Quantity must be a finite number, got {qty}.")
    if qty != qty.to_integral_value():
        raise ValueError(f"Quantity must be a whole number of contracts, got {qty}.")
    if qty <= 0:
        raise ValueError(f"Quantity must be positive, got {qty}.")
    return int(qty)


def validate_price(price: Union[str, float, None], order_type: str) -> Optional[Decimal]:
    """
    Validate *price* given an *order_type*.

    - For Limit orders, price is **required** and must be positive.
    - For Market orders, price is ignored (returns ``None``).

    Raises
    ------
    ValueError
        If *price* is missing or invalid for a Limit order.
    """
    if order_type == "Market":
        return None

    if price is None:
        raise ValueError("Price is required for Limit orders.")

    try:
        p = Decimal(str(price))
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid price '{price}'. Must be a positive number.")
    if not p.is_finite() or p <= 0:
        raise ValueError(f"Price must be positive, got {p}.")
    return p


def validate_order_id(order_id: str) -> str:
    """Return the canonical form of an exchange order id (a UUID)."""
    try:
        return str(uuid.UUID(order_id.strip()))
    except ValueError:
        raise ValueError(f"Invalid order id '{order_id}'. Expected a UUID.")


def validate_all(
    symbol: str,
    side: str,
    order_type: str,
    quantity: Union[str, int],
    price: Union[str, float, None],
) -> dict:
    """
    Run every order validator and return a clean parameter dict.

    Returns
    -------
    dict
        Keys: ``symbol``, ``side``, ``order_type``, ``quantity``, ``price``.

    Raises
    ------
    ValueError
        If any individual parameter is invalid.
    """
    v_symbol = validate_symbol(symbol)
    v_side = validate_side(side)
    v_type = validate_order_type(order_type)
    v_qty = validate_quantity(quantity)
    v_price = validate_price(price, v_type)

    return {
        "symbol": v_symbol,
        "side": v_side,
        "order_type": v_type,
        "quantity": v_qty,
        "price": v_price,
    }
