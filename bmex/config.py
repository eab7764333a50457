"""
Configuration values for the BitMEX client.

Credentials are read from the environment (optionally seeded from a
``.env`` file); call tuning lives in a single ``CallConfig`` value that
is handed to ``BitmexClient``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Credentials:
    """API key identifier and secret key material."""

    key: str
    secret: bytes

    @classmethod
    def from_strings(cls, key: str, secret: str) -> "Credentials":
        return cls(key=key, secret=secret.encode("utf-8"))

    def __repr__(self) -> str:
        return f"Credentials(key={self.key!r}, secret=<hidden>)"


@dataclass(frozen=True)
class CallConfig:
    """
    Tuning for one logical API call.

    Attributes
    ----------
    retry_delay : float
        Seconds to wait between two dispatches after a 5xx response.
    max_attempts : int
        Total number of dispatches allowed for a call that keeps
        receiving 5xx responses.
    timeout : float
        Transport timeout (seconds) for a single dispatch.
    """

    retry_delay: float = 1.0
    max_attempts: int = 3
    timeout: float = 10.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}.")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must not be negative, got {self.retry_delay}.")


def _env_flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


def load_credentials(dotenv_path: Optional[str] = None) -> Credentials:
    """
    Read ``BITMEX_API_KEY`` / ``BITMEX_API_SECRET`` from the environment.

    Raises
    ------
    ValueError
        If either value is missing or empty.
    """
    load_dotenv(dotenv_path)
    api_key = os.getenv("BITMEX_API_KEY")
    api_secret = os.getenv("BITMEX_API_SECRET")
    if not api_key or not api_secret:
        raise ValueError(
            "Missing API credentials. Set BITMEX_API_KEY and BITMEX_API_SECRET "
            "in a .env file or as environment variables."
        )
    return Credentials.from_strings(api_key, api_secret)


def use_testnet(dotenv_path: Optional[str] = None) -> bool:
    """Return ``True`` when ``BITMEX_TESTNET`` is set to a truthy value."""
    load_dotenv(dotenv_path)
    return _env_flag(os.getenv("BITMEX_TESTNET"))
