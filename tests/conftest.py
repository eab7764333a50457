from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest

from bmex.client import BitmexClient
from bmex.config import CallConfig, Credentials


class StubResponse:
    def __init__(self, status_code: int, body: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(body)

    def json(self) -> Any:
        return json.loads(self.text)


class StubSession:
    """Stands in for ``requests.Session``; replays responses in order.

    The last queued response (or exception) repeats once the queue is
    down to one item.
    """

    def __init__(self, *responses: Any) -> None:
        self.responses: List[Any] = list(responses)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def request(self, method, url, headers=None, data=None, timeout=None, allow_redirects=True):
        self.calls.append(
            {
                "method": method,
                "url": url,
                "headers": dict(headers or {}),
                "data": data,
                "timeout": timeout,
                "allow_redirects": allow_redirects,
            }
        )
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


class Clock:
    """Wall clock advancing by *step* seconds on every reading."""

    def __init__(self, start: float = 1518064236.0, step: float = 1.0) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


@pytest.fixture()
def credentials() -> Credentials:
    return Credentials.from_strings("test-key", "chNOOS4KvNXR_Xq4k4c9qsfoKWvnDecLATCRlcBwyKDYnWgO")


@pytest.fixture()
def sleeps() -> List[float]:
    return []


@pytest.fixture()
def make_client(credentials, sleeps):
    def factory(*responses: Any, config: Optional[CallConfig] = None, testnet: bool = False):
        session = StubSession(*responses)
        client = BitmexClient(
            credentials,
            testnet=testnet,
            config=config,
            session=session,  # type: ignore[arg-type]
            sleep=sleeps.append,
            clock=Clock(),
        )
        return client, session

    return factory
