"""
Checkout Service

Starts a marketplace checkout through the automation backend:
- Verifies the caller (end-user bearer token)
- Re-reads the item price from the catalog (client amounts are never trusted)
- Sends the start_checkout event under a bounded deadline
- Reduces whatever came back to a CheckoutResult with an absolute URL
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Optional

from src.integrations.contracts.checkout import CheckoutResult, build_checkout_payload
from src.integrations.contracts.interfaces import (
    AutomationClient,
    IdentityVerifier,
    MarketplaceStore,
)
from src.integrations.errors import (
    InvalidRequest,
    InvalidState,
    Misconfigured,
    NotFound,
    Unauthorized,
    UpstreamContractViolation,
    UpstreamError,
)
from src.integrations.policy.response_wrappers import normalize_checkout_response
from src.utils.config_loader import GatewaySettings

logger = logging.getLogger(__name__)


class CheckoutService:
    def __init__(
        self,
        settings: GatewaySettings,
        identity_verifier: IdentityVerifier,
        store: MarketplaceStore,
        automation_client: AutomationClient,
    ) -> None:
        self.settings = settings
        self.identity_verifier = identity_verifier
        self.store = store
        self.automation_client = automation_client

    async def create_checkout(
        self, bearer_token: Optional[str], item_id: Optional[str], origin: str
    ) -> CheckoutResult:
        if not bearer_token:
            logger.warning("checkout: missing Authorization bearer token")
            raise Unauthorized()
        identity = await self.identity_verifier.verify(bearer_token)

        item_id = (item_id or "").strip()
        if not item_id:
            raise InvalidRequest("Missing itemId", field="itemId")

        # Store calls are blocking I/O.
        item = await asyncio.to_thread(self.store.fetch_catalog_item, item_id)
        if item is None:
            raise NotFound("Music not found")

        price = _checked_price(item.price)

        url = self.settings.checkout_webhook_url
        if not url:
            logger.error("checkout: automation checkout webhook URL is not configured")
            raise Misconfigured("Missing checkout webhook URL")

        payload = build_checkout_payload(
            identity=identity,
            item=item,
            amount=price,
            origin=self.settings.public_app_url or origin,
            source=self.settings.request_source,
            currency=self.settings.checkout_currency,
            expires_minutes=self.settings.checkout_expires_minutes,
        )

        logger.info("Starting checkout for item %s (user %s)", item.id, identity.id)
        reply = await self.automation_client.post_json(
            url,
            payload,
            bearer_token=self.settings.checkout_webhook_secret or None,
            timeout_seconds=self.settings.checkout_timeout_seconds,
        )

        if not reply.ok:
            logger.error("Automation checkout error: status=%s body=%s", reply.status, reply.body)
            raise UpstreamError("Automation backend returned an error", status=reply.status, body=reply.body)

        try:
            return normalize_checkout_response(reply.json, reply.text)
        except UpstreamContractViolation as exc:
            logger.error("Automation checkout missing url: status=%s body=%s", reply.status, reply.body)
            exc.payload.update({"status": reply.status, "body": reply.body})
            raise


def _checked_price(raw: Optional[float]) -> float:
    price = 0.0 if raw is None else raw
    try:
        price = float(price)
    except (TypeError, ValueError) as exc:
        raise InvalidState("Invalid price") from exc
    if not math.isfinite(price) or price < 0:
        raise InvalidState("Invalid price")
    if price == 0:
        raise InvalidState("Free item")
    return price
