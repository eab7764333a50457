#!/usr/bin/env python3
"""
CLI entry point for the BitMEX REST client.

Credentials come from ``BITMEX_API_KEY`` / ``BITMEX_API_SECRET`` (a
``.env`` file next to this script is loaded first).

Usage examples
--------------
Open positions::

    python cli.py position

Limit order::

    python cli.py --testnet order --symbol XBTUSD --side Buy --quantity 100 --price 30000

Dead-man's switch::

    python cli.py cancel-after 60000
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, List, Optional

from dotenv import load_dotenv

# ── Bootstrap ──────────────────────────────────────────────────────────────
# Ensure the package root is on sys.path so ``bmex`` can be imported when
# this script is executed directly (``python cli.py …``).
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
if SCRIPT_DIR not in sys.path:
    sys.path.insert(0, SCRIPT_DIR)

from bmex.client import BitmexClient                    # noqa: E402
from bmex.config import load_credentials, use_testnet   # noqa: E402
from bmex.errors import Failure, Result                 # noqa: E402
from bmex.logging_config import setup_logging           # noqa: E402
from bmex.models import ApiKey                          # noqa: E402
from bmex.orders import format_order_response, place_order  # noqa: E402
from bmex.validators import validate_all, validate_order_id, validate_symbol  # noqa: E402

# ── Argument parser ────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Trade on BitMEX through the authenticated REST API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python cli.py position\n"
            "  python cli.py order --symbol XBTUSD --side Buy --quantity 100\n"
            "  python cli.py order --symbol XBTUSD --side Sell --quantity 100 --price 30000\n"
        ),
    )
    parser.add_argument("--testnet", action="store_true", default=None,
                        help="Use testnet (overrides BITMEX_TESTNET)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("position", help="Show open positions")

    order = sub.add_parser("order", help="Submit one order")
    order.add_argument("--symbol", required=True, help="Instrument (e.g. XBTUSD)")
    order.add_argument("--side", required=True, help="Buy or Sell")
    order.add_argument("--quantity", required=True, help="Contracts")
    order.add_argument("--price", default=None, help="Limit price (omit for a market order)")

    cancel = sub.add_parser("cancel", help="Cancel one order")
    cancel.add_argument("order_id", help="Exchange order id (UUID)")

    cancel_all = sub.add_parser("cancel-all", help="Cancel all open orders")
    cancel_all.add_argument("--symbol", default=None, help="Only this instrument")

    after = sub.add_parser("cancel-after", help="Arm the dead-man's switch")
    after.add_argument("timeout", type=int, help="Milliseconds; 0 disarms")

    keys = sub.add_parser("dtc-keys", help="List DTC-enabled API keys")
    keys.add_argument("--username", default=None, help="Only this user")
    return parser


# ── Commands ───────────────────────────────────────────────────────────────


def _print_json(value: Any) -> None:
    print(json.dumps(value, indent=2, sort_keys=True))


def run(client: BitmexClient, args: argparse.Namespace) -> Result:
    """Dispatch *args* to the matching client operation."""
    if args.command == "position":
        return client.position()
    if args.command == "order":
        params = validate_all(
            symbol=args.symbol,
            side=args.side,
            order_type="Limit" if args.price is not None else "Market",
            quantity=args.quantity,
            price=args.price,
        )
        return place_order(
            client=client,
            symbol=params["symbol"],
            side=params["side"],
            order_type=params["order_type"],
            quantity=params["quantity"],
            price=params["price"],
        )
    if args.command == "cancel":
        return client.cancel_order(validate_order_id(args.order_id))
    if args.command == "cancel-all":
        symbol = validate_symbol(args.symbol) if args.symbol else None
        return client.cancel_all_orders(symbol=symbol)
    if args.command == "cancel-after":
        return client.cancel_all_orders_after(args.timeout)
    if args.command == "dtc-keys":
        return client.dtc_api_keys(args.username)
    raise ValueError(f"Unknown command {args.command!r}")


def show(command: str, value: Any) -> None:
    if command == "order":
        for ack in value:
            print(format_order_response(ack))
        print("✓ Order placed successfully!\n")
    elif command == "dtc-keys":
        keys: List[ApiKey] = value if isinstance(value, list) else [value]
        for key in keys:
            _print_json({k: v for k, v in key.to_json().items() if k != "secret"})
    else:
        _print_json(value)


# ── Main ───────────────────────────────────────────────────────────────────


def main(argv: Optional[List[str]] = None) -> None:
    load_dotenv(os.path.join(SCRIPT_DIR, ".env"))

    logger = setup_logging()
    args = build_parser().parse_args(argv)

    try:
        credentials = load_credentials()
    except ValueError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    testnet = args.testnet if args.testnet is not None else use_testnet()

    with BitmexClient(credentials, testnet=testnet) as client:
        try:
            result = run(client, args)
        except ValueError as exc:
            logger.error("Validation error: %s", exc)
            sys.exit(1)

    if isinstance(result, Failure):
        logger.error("%s failed: %s", args.command, result.error)
        print(f"\n✗ {args.command} FAILED – {result.error}")
        sys.exit(1)

    show(args.command, result.value)


if __name__ == "__main__":
    main()
