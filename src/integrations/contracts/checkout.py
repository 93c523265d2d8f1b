from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .interfaces import CatalogItem, Identity

"""
Checkout contract.

Shapes of the outbound "start_checkout" event sent to the automation
backend and of the normalized result handed back to the frontend.

The redirect URLs carry provider placeholders ({CHECKOUT_SESSION_ID},
{PURCHASE_ID}) that the automation backend and the payment provider fill in
later. They must reach the backend byte-for-byte.
"""

CHECKOUT_EVENT = "start_checkout"
PURCHASE_KIND = "marketplace_music"

SUCCESS_PATH = "/checkout/success?session_id={CHECKOUT_SESSION_ID}&purchase_id={PURCHASE_ID}"
CANCEL_PATH = "/checkout/cancel?purchase_id={PURCHASE_ID}"


@dataclass(frozen=True)
class CheckoutResult:
    url: str
    purchase_id: Optional[str] = None
    session_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "purchase_id": self.purchase_id, "session_id": self.session_id}


def build_redirects(origin: str) -> Dict[str, str]:
    # Plain concatenation: str.format would consume the provider placeholders.
    base = origin.rstrip("/")
    return {
        "success_url": base + SUCCESS_PATH,
        "cancel_url": base + CANCEL_PATH,
    }


def build_checkout_payload(
    *,
    identity: Identity,
    item: CatalogItem,
    amount: float,
    origin: str,
    source: str,
    currency: str,
    expires_minutes: int,
    created_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the outbound checkout event.

    ``amount`` is the catalog-verified price; nothing supplied by the client
    ever lands in the purchase block.
    """
    created = created_at or datetime.now(timezone.utc)
    return {
        "event": CHECKOUT_EVENT,
        "source": source,
        "created_at": created.isoformat(),
        "user": {"id": identity.id, "email": identity.email},
        "purchase": {
            "kind": PURCHASE_KIND,
            "item_id": item.id,
            # The deployed checkout workflow still reads music_id.
            "music_id": item.id,
            "amount": amount,
            "currency": currency,
            "title": item.title,
        },
        "redirect": build_redirects(origin),
        "policy": {"expires_minutes": expires_minutes},
    }
