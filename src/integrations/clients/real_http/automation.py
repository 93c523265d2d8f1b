"""
Real automation-backend HTTP client.

Purpose:
- Sends JSON events to n8n webhooks (checkout, creations)
- Enforces a hard deadline on every call
- Returns the raw reply (status, text, parsed JSON when possible) without
  interpreting it; interpretation lives in src/integrations/policy

Important:
- Keep this client as the ONLY place where automation-backend HTTP calls are made.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import httpx

from src.integrations.contracts.interfaces import AutomationClient, UpstreamReply
from src.integrations.errors import Misconfigured, UpstreamUnreachable

logger = logging.getLogger(__name__)


class RealAutomationClient(AutomationClient):
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.transport = transport

    async def post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        *,
        bearer_token: Optional[str] = None,
        timeout_seconds: float = 15.0,
    ) -> UpstreamReply:
        headers: Dict[str, str] = {"Content-Type": "application/json"}
        if bearer_token:
            headers["Authorization"] = f"Bearer {bearer_token}"

        try:
            logger.info("POST automation webhook %s", _redact(url))
            # httpx timeouts are per phase; wait_for bounds the whole exchange.
            async with httpx.AsyncClient(timeout=timeout_seconds, transport=self.transport) as client:
                response = await asyncio.wait_for(
                    client.post(url, json=payload, headers=headers),
                    timeout=timeout_seconds,
                )
        except asyncio.TimeoutError as e:
            logger.error("Automation webhook timed out after %.1fs", timeout_seconds)
            raise UpstreamUnreachable("Timed out waiting for automation backend") from e
        except httpx.TimeoutException as e:
            logger.error("Automation webhook timed out: %s", e)
            raise UpstreamUnreachable("Timed out waiting for automation backend") from e
        except httpx.RequestError as e:
            logger.error("Request error connecting to automation backend: %s", e)
            raise UpstreamUnreachable("Failed to reach automation backend") from e
        except httpx.InvalidURL as e:
            logger.error("Automation webhook URL is invalid")
            raise Misconfigured("Invalid automation webhook URL") from e

        text = response.text
        logger.info("Received automation response: status=%s", response.status_code)
        return UpstreamReply(
            ok=response.is_success,
            status=response.status_code,
            text=text,
            json=_parse_json(text),
            content_type=response.headers.get("content-type", ""),
        )


def _parse_json(text: str) -> Any:
    # Content-type headers from the automation backend are unreliable; always try.
    if not text or not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def _redact(url: str) -> str:
    # Webhook paths act as credentials on some deployments.
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return "<invalid url>"
    return f"{parsed.scheme}://{parsed.host}/..."
