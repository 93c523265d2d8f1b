"""Error handling helpers for the gateway HTTP surface."""
from typing import Any, Dict, Tuple
import logging

from src.integrations.errors import GatewayError, Misconfigured

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal error occurred while processing your request. Please try again later."


class ErrorHandler:
    def handle_gateway_error(self, exc: GatewayError) -> Tuple[int, Dict[str, Any]]:
        if isinstance(exc, Misconfigured):
            # Details stay in the server log; callers only learn that config is missing.
            logger.error("Gateway misconfigured: %s", exc.message)
            return exc.status_code, {"error": exc.public_message}

        if exc.status_code >= 500:
            logger.error("Upstream failure (%s): %s", type(exc).__name__, exc.message)
        else:
            logger.info("Request rejected (%s): %s", type(exc).__name__, exc.message)

        body: Dict[str, Any] = {"error": exc.message}
        for key, value in exc.payload.items():
            body.setdefault(key, value)
        return exc.status_code, body

    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Tuple[int, Dict[str, Any]]:
        logger.error("Unhandled exception in gateway: %s", exc, exc_info=True)
        return 500, {"error": INTERNAL_ERROR_MESSAGE, "context": context or {}}
