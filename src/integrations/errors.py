"""
Gateway error taxonomy.

Every failure the gateway can report to a caller is one of these classes.
Services raise them; src/error_handler.py turns them into HTTP responses.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class GatewayError(Exception):
    status_code = 500
    public_message: Optional[str] = None

    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.payload = payload or {}


class Unauthorized(GatewayError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class InvalidRequest(GatewayError):
    status_code = 400

    def __init__(self, message: str, *, field: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.field = field
        if field:
            self.payload.setdefault("field", field)


class NotFound(GatewayError):
    status_code = 404


class InvalidState(GatewayError):
    status_code = 400


class Misconfigured(GatewayError):
    """Required server-side configuration is missing. Never echoes values."""

    status_code = 500
    public_message = "Server is not configured for this operation"


class PersistenceError(GatewayError):
    status_code = 400


class UpstreamUnreachable(GatewayError):
    status_code = 502


class UpstreamError(GatewayError):
    status_code = 502

    def __init__(self, message: str, *, status: int, body: Any = None) -> None:
        super().__init__(message, payload={"status": status, "body": body})
        self.status = status
        self.body = body


class UpstreamContractViolation(GatewayError):
    status_code = 502
