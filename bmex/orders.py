"""
Order-entry helpers.

Bridges validated user input and ``BitmexClient.submit_order``.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, Optional

from .client import BitmexClient
from .errors import Result, Success
from .models import Side

logger = logging.getLogger("bmex")


def build_order(
    symbol: str,
    side: Side,
    order_type: str,
    quantity: int,
    price: Optional[Decimal] = None,
    cl_ord_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build one entry of a bulk order request.

    A ``clOrdID`` is always set (generated when not given) so that a
    retried submission cannot open a second order.
    """
    order: Dict[str, Any] = {
        "symbol": symbol,
        "side": side.value,
        "ordType": order_type,
        "orderQty": quantity,
        "clOrdID": cl_ord_id or uuid.uuid4().hex,
    }
    if order_type == "Limit":
        order["price"] = float(price)
    return order


def place_order(
    client: BitmexClient,
    symbol: str,
    side: Side,
    order_type: str,
    quantity: int,
    price: Optional[Decimal] = None,
) -> Result:
    """
    Submit a single validated order as a bulk request of one.

    Returns
    -------
    Success or Failure
        ``Success`` holds the list of order acknowledgements.
    """
    order = build_order(symbol, side, order_type, quantity, price)

    logger.info(
        "Placing %s %s order: %s %s @ %s (clOrdID=%s)",
        side,
        order_type,
        quantity,
        symbol,
        price if price else "MARKET",
        order["clOrdID"],
    )

    result = client.submit_order([order])

    if isinstance(result, Success):
        for ack in result.value:
            logger.info("Order placed  – orderID=%s status=%s", ack.get("orderID"), ack.get("ordStatus"))
        logger.debug("Full order response: %s", result.value)
    else:
        logger.error("Order failed  – %s", result.error)

    return result


def format_order_response(response: Dict[str, Any]) -> str:
    """
    Return a human-friendly multi-line summary of an order acknowledgement.

    Extracts the most useful fields and formats them for CLI output.
    """
    lines = [
        "─── Order Response ───────────────────────────",
        f"  Order ID      : {response.get('orderID')}",
        f"  Client ID     : {response.get('clOrdID')}",
        f"  Symbol        : {response.get('symbol')}",
        f"  Side          : {response.get('side')}",
        f"  Type          : {response.get('ordType')}",
        f"  Status        : {response.get('ordStatus')}",
        f"  Order Qty     : {response.get('orderQty')}",
        f"  Filled Qty    : {response.get('cumQty')}",
        f"  Avg Price     : {response.get('avgPx', 'N/A')}",
        f"  Price         : {response.get('price', 'N/A')}",
        f"  Time In Force : {response.get('timeInForce', 'N/A')}",
        "───────────────────────────────────────────────",
    ]
    return "\n".join(lines)
