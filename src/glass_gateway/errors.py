"""Gateway-specific exceptions shared across components."""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for gateway failures."""


class TokenStoreError(GatewayError):
    """Raised when the token storage backend is unreachable or rejects a write."""


class TokenCollisionError(GatewayError):
    """Raised when a credential would resolve to more than one identity."""


class ToolRegistrationError(GatewayError):
    """Raised when a tool name is registered twice."""


__all__ = [
    "GatewayError",
    "TokenStoreError",
    "TokenCollisionError",
    "ToolRegistrationError",
]
