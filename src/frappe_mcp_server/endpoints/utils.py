#!/usr/bin/env python3
"""
Endpoint response helpers.
"""

from typing import Any

import orjson
from starlette.responses import Response

from ..constants import CONTENT_TYPE_JSON, CONTENT_TYPE_PLAIN
from .constants import CACHE_NO_CACHE


def text_response(text: str, status_code: int) -> Response:
    """Plain-text acknowledgement, as the message endpoint returns."""
    return Response(text, status_code=status_code, media_type=CONTENT_TYPE_PLAIN)


def json_response(data: Any, status_code: int = 200) -> Response:
    """orjson-encoded JSON response that is never cached."""
    body = orjson.dumps(data)
    return Response(
        body,
        status_code=status_code,
        media_type=CONTENT_TYPE_JSON,
        headers={"cache-control": CACHE_NO_CACHE},
    )
