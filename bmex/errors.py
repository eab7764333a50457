"""
Error taxonomy and call outcomes.

The call executor never raises across its boundary: every call ends in
either ``Success`` or ``Failure``, and a ``Failure`` carries one of the
error kinds below.  The kinds are ordinary exceptions so that callers
who prefer exceptions can ``unwrap()`` an outcome at their own boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class BitmexError(Exception):
    """Base class for every failure the client reports."""

    retryable = False


class TransportError(BitmexError):
    """Connection, TLS or timeout failure below HTTP."""

    def __init__(self, verb: str, path: str, cause: BaseException):
        self.verb = verb
        self.path = path
        self.cause = cause
        super().__init__(f"{verb} {path}: transport error: {cause}")


class ClientError(BitmexError):
    """HTTP 4xx with a decoded ``{"error": {...}}`` body."""

    def __init__(self, status_code: int, name: str, message: str):
        self.status_code = status_code
        self.name = name
        self.message = message
        super().__init__(f"{name}: {message}")


class ServerError(BitmexError):
    """HTTP 5xx that persisted through every allowed attempt."""

    retryable = True

    def __init__(self, verb: str, path: str, status_code: int, attempts: int):
        self.verb = verb
        self.path = path
        self.status_code = status_code
        self.attempts = attempts
        super().__init__(
            f"{verb} {path}: HTTP {status_code} after {attempts} attempt(s)"
        )


class UnexpectedStatus(BitmexError):
    """Any status outside the 2xx/4xx/5xx classes."""

    def __init__(self, verb: str, path: str, status_code: int):
        self.verb = verb
        self.path = path
        self.status_code = status_code
        super().__init__(f"{verb} {path}: Unexpected HTTP return status {status_code}")


class DecodeError(BitmexError, ValueError):
    """A success or error body did not match the expected shape."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        self.reason = message
        super().__init__(f"{path}: {message}" if path else message)

    def at(self, segment: Union[str, int]) -> "DecodeError":
        """Return a copy with *segment* prepended to the field path."""
        prefix = f"[{segment}]" if isinstance(segment, int) else str(segment)
        if not self.path:
            path = prefix
        elif self.path.startswith("["):
            path = prefix + self.path
        else:
            path = f"{prefix}.{self.path}"
        return DecodeError(self.reason, path)


class CallCancelled(BitmexError):
    """The caller abandoned the call before another attempt was sent."""

    def __init__(self, verb: str, path: str, attempts: int):
        self.verb = verb
        self.path = path
        self.attempts = attempts
        super().__init__(f"{verb} {path}: cancelled after {attempts} attempt(s)")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    error: BitmexError

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise self.error


Result = Union[Success[T], Failure]

