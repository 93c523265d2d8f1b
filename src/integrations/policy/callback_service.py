"""
Inbound callbacks from the automation backend.

The automation backend is not an end user: it proves itself with a static
shared secret, and only then may it patch a purchase record.
"""

from __future__ import annotations

import asyncio
import hmac
import logging
from typing import Any, Dict, Optional

from src.integrations.contracts.interfaces import MarketplaceStore
from src.integrations.contracts.purchases import InboundPurchaseUpdate
from src.integrations.errors import Misconfigured, Unauthorized

logger = logging.getLogger(__name__)


class CallbackAuthenticator:
    def __init__(self, shared_secret: Optional[str]) -> None:
        self.shared_secret = (shared_secret or "").strip()

    def authenticate(self, bearer_token: Optional[str]) -> None:
        if not self.shared_secret:
            logger.error("purchase callback: inbound shared secret is not configured")
            raise Misconfigured("Missing purchase update secret")

        candidate = (bearer_token or "").strip()
        if not candidate or not hmac.compare_digest(candidate.encode(), self.shared_secret.encode()):
            logger.warning("purchase callback: rejected bearer token")
            raise Unauthorized()


class PurchaseUpdateService:
    def __init__(self, store: MarketplaceStore) -> None:
        self.store = store

    async def apply(self, update: InboundPurchaseUpdate) -> Optional[Dict[str, Any]]:
        patch = update.to_patch()
        logger.info("Updating purchase %s: fields=%s", update.purchase_id, sorted(patch))
        purchase = await asyncio.to_thread(self.store.update_purchase, update.purchase_id, patch)
        if purchase is None:
            logger.warning("Purchase %s not found for callback update", update.purchase_id)
        return purchase
