from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class GenerationMode(str, Enum):
    INSPIRATION = "inspiration"
    LYRICS = "lyrics"


class PurchaseStatus(str, Enum):
    PENDING = "pendente"
    COMPLETED = "concluido"
    CANCELLED = "cancelado"
    REFUNDED = "reembolsado"


# ---------------------------------------------------------------------------
# Shared data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Identity:
    id: str
    email: Optional[str] = None


@dataclass(frozen=True)
class CatalogItem:
    id: str
    title: str
    price: Optional[float]               # None when the store has no price


@dataclass
class UpstreamReply:
    """What the automation backend sent back, before any interpretation."""
    ok: bool
    status: int
    text: str
    json: Any = None
    content_type: str = ""

    @property
    def body(self) -> Any:
        return self.json if self.json is not None else self.text


# ---------------------------------------------------------------------------
# Collaborator interfaces
# ---------------------------------------------------------------------------

class IdentityVerifier(ABC):
    """Resolves an end-user bearer token to an Identity."""

    @abstractmethod
    async def verify(self, bearer_token: Optional[str]) -> Identity:
        """Return the caller identity or raise Unauthorized."""


class MarketplaceStore(ABC):
    """Data-store operations the gateway consumes."""

    @abstractmethod
    def fetch_catalog_item(self, item_id: str) -> Optional[CatalogItem]:
        """Return the item's current title and price, or None if absent."""

    @abstractmethod
    def update_purchase(self, purchase_id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply a partial patch and return the updated row, or None if absent."""


class AutomationClient(ABC):
    """Outbound JSON POST to the automation backend."""

    @abstractmethod
    async def post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        *,
        bearer_token: Optional[str] = None,
        timeout_seconds: float = 15.0,
    ) -> UpstreamReply:
        """Send payload; raise UpstreamUnreachable on timeout or network failure."""
