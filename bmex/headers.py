"""Transport headers for authenticated requests."""

from __future__ import annotations

from typing import Dict, Optional

from .crypto import Api, Verb, mk_query_params

CONTENT_TYPE = "application/json"


def mk_headers(
    key: str,
    secret: bytes,
    verb: Verb,
    endpoint: str,
    body: str = "",
    now: Optional[float] = None,
) -> Dict[str, str]:
    """Merge the JSON content type with the REST authentication values."""
    headers = {"content-type": CONTENT_TYPE}
    headers.update(mk_query_params(key, secret, verb, endpoint, body, api=Api.REST, now=now))
    return headers
