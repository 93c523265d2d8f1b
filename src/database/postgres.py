"""
Lightweight in-memory PostgresDB replacement for local development.

This provides the subset of the marketplace data store the gateway needs
(catalog reads and purchase patches) so the service can run without a real
database. It is NOT intended for production use.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional
import uuid

from src.integrations.contracts.interfaces import CatalogItem, MarketplaceStore
from src.integrations.contracts.purchases import PATCHABLE_FIELDS


@dataclass
class Music:
    id: str
    titulo: str
    preco: Optional[float]
    em_venda: bool = True


@dataclass
class Purchase:
    id: str
    musica_id: Optional[str]
    usuario_id: Optional[str] = None
    status: str = "pendente"
    stripe_session_id: Optional[str] = None
    stripe_payment_intent_id: Optional[str] = None
    error_message: Optional[str] = None
    criado_em: datetime = field(default_factory=datetime.utcnow)


class PostgresDB(MarketplaceStore):
    """
    In-memory stand-in for a Postgres-backed data access layer.

    Methods are intentionally simple and only support what the gateway
    requires.
    """

    def __init__(self) -> None:
        self._music: Dict[str, Music] = {}
        self._purchases: Dict[str, Purchase] = {}
        self.catalog_reads = 0

    # ------------------------------------------------------------------ #
    # Catalog
    # ------------------------------------------------------------------ #
    def add_music(self, titulo: str, preco: Optional[float], music_id: Optional[str] = None) -> Music:
        music = Music(id=music_id or str(uuid.uuid4()), titulo=titulo, preco=preco)
        self._music[music.id] = music
        return music

    def fetch_catalog_item(self, item_id: str) -> Optional[CatalogItem]:
        self.catalog_reads += 1
        music = self._music.get(str(item_id))
        if music is None:
            return None
        return CatalogItem(id=music.id, title=music.titulo, price=music.preco)

    # ------------------------------------------------------------------ #
    # Purchases
    # ------------------------------------------------------------------ #
    def add_purchase(
        self,
        musica_id: Optional[str],
        usuario_id: Optional[str] = None,
        purchase_id: Optional[str] = None,
    ) -> Purchase:
        purchase = Purchase(id=purchase_id or str(uuid.uuid4()), musica_id=musica_id, usuario_id=usuario_id)
        self._purchases[purchase.id] = purchase
        return purchase

    def get_purchase(self, purchase_id: str) -> Optional[Purchase]:
        return self._purchases.get(str(purchase_id))

    def update_purchase(self, purchase_id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        purchase = self._purchases.get(str(purchase_id))
        if purchase is None:
            return None
        for key, value in patch.items():
            if key == "status" or key in PATCHABLE_FIELDS:
                setattr(purchase, key, value)
        row = asdict(purchase)
        row["criado_em"] = purchase.criado_em.isoformat()
        return row
