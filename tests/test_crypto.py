from __future__ import annotations

import hashlib
import hmac

import pytest

from bmex.crypto import EXPIRY_WINDOW, Api, Verb, expiry_for, mk_query_params, sign
from bmex.headers import mk_headers

SECRET = b"chNOOS4KvNXR_Xq4k4c9qsfoKWvnDecLATCRlcBwyKDYnWgO"


def _hmac(message: str) -> str:
    return hmac.new(SECRET, message.encode("utf-8"), hashlib.sha256).hexdigest()


def test_sign_message_layout_without_body():
    assert sign(SECRET, Verb.GET, "/api/v1/instrument", 1518064236) == _hmac(
        "GET/api/v1/instrument1518064236"
    )


def test_sign_covers_query_and_body():
    endpoint = "/api/v1/order?symbol=XBTUSD"
    body = '{"symbol":"XBTUSD","orderQty":98}'
    expected = _hmac("POST" + endpoint + "1518064238" + body)
    assert sign(SECRET, Verb.POST, endpoint, 1518064238, body) == expected


def test_sign_is_deterministic():
    first = sign(SECRET, Verb.PUT, "/api/v1/order/bulk", 42, '{"orders":[]}')
    second = sign(SECRET, Verb.PUT, "/api/v1/order/bulk", 42, '{"orders":[]}')
    assert first == second
    assert first == first.lower()
    assert len(first) == 64


@pytest.mark.parametrize(
    "change",
    [
        {"verb": Verb.DELETE},
        {"endpoint": "/api/v1/order/all"},
        {"expiry": 43},
        {"body": '{"orderID":"x"}'},
    ],
)
def test_sign_depends_on_every_input(change):
    base = {"verb": Verb.POST, "endpoint": "/api/v1/order", "expiry": 42, "body": ""}
    other = dict(base, **change)
    assert sign(SECRET, **base) != sign(SECRET, **other)


def test_sign_accepts_verb_name():
    assert sign(SECRET, "GET", "/x", 1) == sign(SECRET, Verb.GET, "/x", 1)


def test_expiry_for_rest_and_ws():
    assert expiry_for(Api.REST, now=1000.9) == 1000 + EXPIRY_WINDOW
    assert expiry_for(Api.WS, now=1000.25) == 1000250


def test_mk_query_params_rest():
    params = mk_query_params("key-id", SECRET, Verb.GET, "/api/v1/position", now=1518064231.0)
    assert list(params) == ["api-expires", "api-key", "api-signature"]
    assert params["api-expires"] == "1518064236"
    assert params["api-key"] == "key-id"
    assert params["api-signature"] == _hmac("GET/api/v1/position1518064236")


def test_mk_query_params_ws_uses_nonce():
    params = mk_query_params("key-id", SECRET, Verb.GET, "/realtime", api=Api.WS, now=2.5)
    assert params["api-nonce"] == "2500"
    assert "api-expires" not in params
    assert params["api-signature"] == _hmac("GET/realtime2500")


def test_mk_headers_adds_content_type():
    headers = mk_headers("key-id", SECRET, Verb.POST, "/api/v1/order/bulk", '{"orders":[]}', now=100.0)
    assert headers == {
        "content-type": "application/json",
        "api-expires": "105",
        "api-key": "key-id",
        "api-signature": _hmac('POST/api/v1/order/bulk105{"orders":[]}'),
    }
