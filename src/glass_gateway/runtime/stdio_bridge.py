"""Bridge for MCP clients that only speak stdio: one JSON-RPC message per line, forwarded over HTTP."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Iterable, Sequence
from typing import Any, TextIO

import httpx

from glass_gateway.application.jsonrpc import JsonRpcErrorCode, error_envelope, request_id_of
from glass_gateway.runtime.settings import BridgeSettings

logger = logging.getLogger("glass_gateway.bridge")

SESSION_HEADER = "Mcp-Session-Id"


class StdioBridge:
    """Posts each message to the gateway and carries the protocol session id between calls."""

    def __init__(self, client: httpx.Client, *, url: str, token: str) -> None:
        self._client = client
        self._url = url
        self._token = token
        self._session_id: str | None = None

    @property
    def session_id(self) -> str | None:
        return self._session_id

    def forward(self, line: str) -> dict[str, Any] | None:
        """Return the reply for one input line; ``None`` when nothing should be written back."""
        if not line.strip():
            return None
        try:
            message = json.loads(line)
        except json.JSONDecodeError as exc:
            return error_envelope(None, JsonRpcErrorCode.PARSE_ERROR, f"Parse error: {exc}")

        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        if self._session_id:
            headers[SESSION_HEADER] = self._session_id

        try:
            response = self._client.post(self._url, json=message, headers=headers)
            session_id = response.headers.get(SESSION_HEADER)
            if session_id:
                self._session_id = session_id
            if response.status_code == httpx.codes.ACCEPTED:
                return None
            response.raise_for_status()
            reply = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("forwarding failed", extra={"data": {"url": self._url, "error": str(exc)}})
            return error_envelope(request_id_of(message), JsonRpcErrorCode.INTERNAL_ERROR, str(exc))
        if not isinstance(reply, dict):
            return error_envelope(
                request_id_of(message), JsonRpcErrorCode.INTERNAL_ERROR, "gateway returned a non-object reply"
            )
        return reply

    def run(self, lines: Iterable[str], out: TextIO) -> int:
        """Forward every line and write replies; return how many replies were written."""
        written = 0
        for line in lines:
            reply = self.forward(line)
            if reply is None:
                continue
            out.write(json.dumps(reply, separators=(",", ":")) + "\n")
            out.flush()
            written += 1
        return written


def main(
    argv: Sequence[str] | None = None,
    *,
    settings: BridgeSettings | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    transport: httpx.BaseTransport | None = None,
) -> None:
    parser = argparse.ArgumentParser(description="Relay stdio MCP messages to a glass gateway over HTTP.")
    parser.add_argument("--url", help="Gateway MCP endpoint (defaults to MCP_URL).")
    parser.add_argument("--token", help="Bearer credential (defaults to MCP_TOKEN).")
    args = parser.parse_args(list(argv) if argv is not None else None)

    resolved = settings or BridgeSettings()
    url = args.url or resolved.url
    token = args.token or resolved.token_value
    if not token:
        logger.warning("no credential configured; the gateway will reject every request")

    with httpx.Client(timeout=resolved.timeout_seconds, transport=transport) as client:
        StdioBridge(client, url=url, token=token).run(stdin or sys.stdin, stdout or sys.stdout)


__all__ = ["StdioBridge", "main"]
