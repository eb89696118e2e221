"""Handler response builders.

Both functions answer with ``{"statusCode": ..., "body": ...}`` only.
"""

from __future__ import annotations

from typing import Dict, Union

HandlerResponse = Dict[str, Union[int, str]]


def ok(body: str) -> HandlerResponse:
    return {"statusCode": 200, "body": body}


def error(body: str) -> HandlerResponse:
    return {"statusCode": 500, "body": body}
