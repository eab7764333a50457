"""
Typed codecs for BitMEX domain entities.

Every entity is an immutable dataclass with a ``from_json`` class method
that validates each required field (raising ``DecodeError`` with the
offending field path) and a ``to_json`` method producing the wire shape.
``from_json(x.to_json()) == x`` holds for every entity; timestamps must be
timezone-aware and are carried at millisecond precision.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import DecodeError

TIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

DTC_TAG = "sierra-dtc"


# ── Field helpers ──────────────────────────────────────────────────────────


def _obj(value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(f"expected object, got {type(value).__name__}")
    return value


def _req(obj: Dict[str, Any], name: str, decode) -> Any:
    if name not in obj:
        raise DecodeError("missing required field", name)
    try:
        return decode(obj[name])
    except DecodeError as exc:
        raise exc.at(name) from None


def _opt(obj: Dict[str, Any], name: str, decode) -> Any:
    value = obj.get(name)
    if value is None:
        return None
    try:
        return decode(value)
    except DecodeError as exc:
        raise exc.at(name) from None


def _string(value: Any) -> str:
    if not isinstance(value, str):
        raise DecodeError(f"expected string, got {type(value).__name__}")
    return value


def _int(value: Any) -> int:
    # bool is a subclass of int; JSON true/false is never a count.
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"expected integer, got {type(value).__name__}")
    return value


def _float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"expected number, got {type(value).__name__}")
    return float(value)


def _bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise DecodeError(f"expected boolean, got {type(value).__name__}")
    return value


def _list(decode):
    def inner(value: Any) -> List[Any]:
        if not isinstance(value, list):
            raise DecodeError(f"expected array, got {type(value).__name__}")
        out = []
        for i, item in enumerate(value):
            try:
                out.append(decode(item))
            except DecodeError as exc:
                raise exc.at(i) from None
        return out

    return inner


def _put(obj: Dict[str, Any], name: str, value: Any) -> None:
    """Set *name* only when *value* is present."""
    if value is not None:
        obj[name] = value


# ── Timestamps ─────────────────────────────────────────────────────────────


def decode_time(value: Any) -> datetime:
    """Parse an exchange timestamp (``2017-01-01T12:00:00.000Z``) as UTC."""
    text = _string(value)
    try:
        parsed = datetime.strptime(text, TIME_FORMAT)
    except ValueError:
        raise DecodeError(f"malformed timestamp {text!r}") from None
    return parsed.replace(tzinfo=timezone.utc)


def encode_time(value: datetime) -> str:
    """
    Format *value* in the exchange's millisecond UTC format.

    Raises
    ------
    ValueError
        If *value* is naive; decoding always yields aware UTC datetimes.
    """
    if value.tzinfo is None:
        raise ValueError(f"timestamp {value.isoformat()} has no timezone")
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


# ── Side ───────────────────────────────────────────────────────────────────


class Side(str, enum.Enum):
    BUY = "Buy"
    SELL = "Sell"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def of_string(cls, text: str) -> Optional["Side"]:
        """Return the side named by *text* (case-insensitive), else ``None``."""
        for side in cls:
            if side.value.lower() == text.strip().lower():
                return side
        return None

    @classmethod
    def decode(cls, value: Any) -> Optional["Side"]:
        """An empty side string means "no side" on the wire."""
        text = _string(value)
        if text == "":
            return None
        try:
            return cls(text)
        except ValueError:
            raise DecodeError(f"unknown side {text!r}") from None


def _side(obj: Dict[str, Any]) -> Optional[Side]:
    return _opt(obj, "side", Side.decode)


def _put_side(obj: Dict[str, Any], side: Optional[Side]) -> None:
    _put(obj, "side", side.value if side is not None else None)


# ── Errors ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ApiError:
    """Structured error body, sent wrapped as ``{"error": {...}}``."""

    name: str
    message: str

    @classmethod
    def from_json(cls, value: Any) -> "ApiError":
        obj = _obj(value)
        return cls(name=_req(obj, "name", _string), message=_req(obj, "message", _string))

    def to_json(self) -> Dict[str, Any]:
        return {"name": self.name, "message": self.message}

    @classmethod
    def from_wrapped_json(cls, value: Any) -> "ApiError":
        return _req(_obj(value), "error", cls.from_json)

    def to_wrapped_json(self) -> Dict[str, Any]:
        return {"error": self.to_json()}


# ── API keys ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Plain:
    """A named permission, sent as a bare string."""

    name: str

    def to_json(self) -> str:
        return self.name


@dataclass(frozen=True)
class Dtc:
    """DTC terminal access for *username*, sent as ``["sierra-dtc", {...}]``."""

    username: str

    def to_json(self) -> List[Any]:
        return [DTC_TAG, {"username": self.username}]


Permission = Union[Plain, Dtc]


def _decode_dtc(value: Any) -> Dtc:
    if not isinstance(value, list) or len(value) != 2:
        raise DecodeError("expected permission string or [tag, object] pair")
    tag, payload = value
    if tag != DTC_TAG:
        raise DecodeError(f"unknown permission tag {tag!r}")
    if not isinstance(payload, dict) or set(payload) != {"username"}:
        raise DecodeError("expected {\"username\": string}", "[1]")
    try:
        return Dtc(username=_req(payload, "username", _string))
    except DecodeError as exc:
        raise exc.at(1) from None


def decode_permission(value: Any) -> Permission:
    """Decode a permission, trying a bare string first, then the DTC pair."""
    if isinstance(value, str):
        return Plain(value)
    return _decode_dtc(value)


def encode_permission(permission: Permission) -> Any:
    return permission.to_json()


@dataclass(frozen=True)
class ApiKey:
    id: str
    secret: str
    name: str
    nonce: int
    cidr: str
    permissions: Tuple[Permission, ...]
    enabled: bool
    user_id: int
    created: datetime

    def __repr__(self) -> str:
        return (
            f"ApiKey(id={self.id!r}, name={self.name!r}, enabled={self.enabled}, "
            f"user_id={self.user_id}, permissions={list(self.permissions)!r})"
        )

    @classmethod
    def from_json(cls, value: Any) -> "ApiKey":
        obj = _obj(value)
        return cls(
            id=_req(obj, "id", _string),
            secret=_req(obj, "secret", _string),
            name=_req(obj, "name", _string),
            nonce=_req(obj, "nonce", _int),
            cidr=_req(obj, "cidr", _string),
            permissions=tuple(_req(obj, "permissions", _list(decode_permission))),
            enabled=_req(obj, "enabled", _bool),
            user_id=_req(obj, "userId", _int),
            created=_req(obj, "created", decode_time),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "secret": self.secret,
            "name": self.name,
            "nonce": self.nonce,
            "cidr": self.cidr,
            "permissions": [encode_permission(p) for p in self.permissions],
            "enabled": self.enabled,
            "userId": self.user_id,
            "created": encode_time(self.created),
        }


# ── Market data ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Quote:
    timestamp: datetime
    symbol: str
    bid_price: Optional[float] = None
    bid_size: Optional[int] = None
    ask_price: Optional[float] = None
    ask_size: Optional[int] = None

    @classmethod
    def from_json(cls, value: Any) -> "Quote":
        obj = _obj(value)
        return cls(
            timestamp=_req(obj, "timestamp", decode_time),
            symbol=_req(obj, "symbol", _string),
            bid_price=_opt(obj, "bidPrice", _float),
            bid_size=_opt(obj, "bidSize", _int),
            ask_price=_opt(obj, "askPrice", _float),
            ask_size=_opt(obj, "askSize", _int),
        )

    def to_json(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "timestamp": encode_time(self.timestamp),
            "symbol": self.symbol,
        }
        _put(out, "bidPrice", self.bid_price)
        _put(out, "bidSize", self.bid_size)
        _put(out, "askPrice", self.ask_price)
        _put(out, "askSize", self.ask_size)
        return out

    def merge(self, other: "Quote") -> "Quote":
        """
        Combine two partial quotes for the same symbol.

        Populated fields win over empty ones; where both quotes populate
        a field, the more recent quote's value is kept.  The result
        carries the most recent timestamp.

        Raises
        ------
        ValueError
            If the quotes are for different symbols.
        """
        if self.symbol != other.symbol:
            raise ValueError(f"cannot merge quotes for {self.symbol} and {other.symbol}")
        newer, older = (other, self) if other.timestamp >= self.timestamp else (self, other)

        def pick(name: str) -> Any:
            value = getattr(newer, name)
            return value if value is not None else getattr(older, name)

        return Quote(
            timestamp=newer.timestamp,
            symbol=self.symbol,
            bid_price=pick("bid_price"),
            bid_size=pick("bid_size"),
            ask_price=pick("ask_price"),
            ask_size=pick("ask_size"),
        )


@dataclass(frozen=True)
class Trade:
    timestamp: datetime
    symbol: str
    side: Optional[Side]
    size: int
    price: float

    @classmethod
    def from_json(cls, value: Any) -> "Trade":
        obj = _obj(value)
        return cls(
            timestamp=_req(obj, "timestamp", decode_time),
            symbol=_req(obj, "symbol", _string),
            side=_side(obj),
            size=_req(obj, "size", _int),
            price=_req(obj, "price", _float),
        )

    def to_json(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "timestamp": encode_time(self.timestamp),
            "symbol": self.symbol,
        }
        _put_side(out, self.side)
        out["size"] = self.size
        out["price"] = self.price
        return out


@dataclass(frozen=True)
class OrderBookL2:
    """One price level of the incremental L2 book; no size/price means removed."""

    symbol: str
    id: int
    side: Optional[Side] = None
    size: Optional[int] = None
    price: Optional[float] = None

    @property
    def is_removal(self) -> bool:
        return self.size is None and self.price is None

    @classmethod
    def from_json(cls, value: Any) -> "OrderBookL2":
        obj = _obj(value)
        return cls(
            symbol=_req(obj, "symbol", _string),
            id=_req(obj, "id", _int),
            side=_side(obj),
            size=_opt(obj, "size", _int),
            price=_opt(obj, "price", _float),
        )

    def to_json(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"symbol": self.symbol, "id": self.id}
        _put_side(out, self.side)
        _put(out, "size", self.size)
        _put(out, "price", self.price)
        return out


@dataclass(frozen=True)
class OrderBookLevel:
    """Row of the legacy (non-incremental) order book table."""

    symbol: str
    level: int
    timestamp: datetime
    bid_size: Optional[int] = None
    bid_price: Optional[float] = None
    ask_size: Optional[int] = None
    ask_price: Optional[float] = None

    @classmethod
    def from_json(cls, value: Any) -> "OrderBookLevel":
        obj = _obj(value)
        return cls(
            symbol=_req(obj, "symbol", _string),
            level=_req(obj, "level", _int),
            timestamp=_req(obj, "timestamp", decode_time),
            bid_size=_opt(obj, "bidSize", _int),
            bid_price=_opt(obj, "bidPrice", _float),
            ask_size=_opt(obj, "askSize", _int),
            ask_price=_opt(obj, "askPrice", _float),
        )

    def to_json(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "symbol": self.symbol,
            "level": self.level,
            "timestamp": encode_time(self.timestamp),
        }
        _put(out, "bidSize", self.bid_size)
        _put(out, "bidPrice", self.bid_price)
        _put(out, "askSize", self.ask_size)
        _put(out, "askPrice", self.ask_price)
        return out


def decode_list(entity, value: Any) -> List[Any]:
    """Decode a JSON array of *entity* (any class with ``from_json``)."""
    return _list(entity.from_json)(value)
