"""
Real identity verifier backed by Supabase Auth.

Resolves an end-user access token by asking the identity provider who it
belongs to (GET /auth/v1/user). Tokens are never decoded or trusted locally.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from src.integrations.contracts.interfaces import Identity, IdentityVerifier
from src.integrations.errors import Misconfigured, Unauthorized

logger = logging.getLogger(__name__)


class SupabaseIdentityVerifier(IdentityVerifier):
    def __init__(
        self,
        base_url: Optional[str],
        anon_key: Optional[str],
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.anon_key = anon_key or ""
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def verify(self, bearer_token: Optional[str]) -> Identity:
        token = (bearer_token or "").strip()
        if not token:
            raise Unauthorized()
        if not self.base_url or not self.anon_key:
            logger.error("Identity provider URL or anon key is not configured")
            raise Misconfigured("Missing identity provider configuration")

        headers = {"apikey": self.anon_key, "Authorization": f"Bearer {token}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}/auth/v1/user", headers=headers)
        except httpx.RequestError as e:
            logger.error("Could not reach identity provider: %s", e)
            raise Unauthorized() from e

        if response.status_code != 200:
            logger.warning("Identity provider rejected token: status=%s", response.status_code)
            raise Unauthorized()

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Identity provider returned a non-JSON body")
            raise Unauthorized() from e

        user_id = data.get("id") if isinstance(data, dict) else None
        if not isinstance(user_id, str) or not user_id.strip():
            logger.warning("Identity provider response carried no user id")
            raise Unauthorized()

        email = data.get("email")
        return Identity(id=user_id, email=email if isinstance(email, str) and email else None)
