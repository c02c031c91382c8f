from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any
from uuid import uuid4

from fastapi import Request

logger = logging.getLogger("glass_gateway.http")

REDACTED = "<redacted>"
_SECRET_QUERY_PARAMS = frozenset({"token"})


async def request_logging_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Any]],
) -> Any:
    request_id = request.headers.get("x-request-id", uuid4().hex)
    query_params = redact_query_params(request.query_params.multi_items())
    body_str = _truncate_body(await request.body()) if request.method != "GET" else ""
    base = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "query_params": query_params,
        "authorization": REDACTED if request.headers.get("authorization") else None,
        "mcp_session_id": request.headers.get("mcp-session-id"),
    }
    logger.info("request_received", extra={"data": {**base, "body": body_str}})

    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("request_failed", extra={"data": base})
        raise

    duration = time.perf_counter() - start
    logger.info(
        "request_completed",
        extra={
            "data": {
                **base,
                "status_code": response.status_code,
                "duration_ms": round(duration * 1000, 2),
            },
        },
    )
    return response


def _truncate_body(body: bytes, limit: int = 1024) -> str:
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        return f"<binary data: {len(body)} bytes>"
    if len(text) <= limit:
        return text
    return text[:limit] + "... (truncated)"


def redact_query_params(items: list[tuple[str, str]]) -> list[tuple[str, str]]:
    """Replace credential-bearing query values before they reach a log line."""
    return [(key, REDACTED if key.lower() in _SECRET_QUERY_PARAMS else value) for key, value in items]


__all__ = ["REDACTED", "redact_query_params", "request_logging_middleware"]
