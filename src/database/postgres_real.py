"""
Real Postgres-backed store for production when DATABASE_URL is set.
Implements the same interface as src.database.postgres (in-memory stub).
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from src.database.models import Base, Music, Purchase
from src.integrations.contracts.interfaces import CatalogItem, MarketplaceStore
from src.integrations.contracts.purchases import PATCHABLE_FIELDS
from src.integrations.errors import PersistenceError

logger = logging.getLogger(__name__)

_PATCHABLE_COLUMNS = {"status", *PATCHABLE_FIELDS}


def _normalize_connection_string(s: str) -> str:
    """Strip common mistakes: 'psql \'...\'', extra quotes, whitespace; pin the psycopg driver."""
    s = s.strip()
    if re.match(r"^psql\s+", s, re.IGNORECASE):
        s = re.sub(r"^psql\s+", "", s, flags=re.IGNORECASE).strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        s = s[1:-1].strip()
    if s.startswith("postgres://"):
        s = "postgresql://" + s[len("postgres://"):]
    if s.startswith("postgresql://"):
        s = "postgresql+psycopg://" + s[len("postgresql://"):]
    return s


class PostgresDB(MarketplaceStore):
    """
    Marketplace data access using SQLAlchemy. Use when DATABASE_URL is set.
    """

    def __init__(self, connection_string: str) -> None:
        connection_string = _normalize_connection_string(connection_string)
        self.engine = create_engine(connection_string, pool_pre_ping=True, pool_size=5, max_overflow=10)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine, expire_on_commit=False)

    def create_tables(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def _session(self) -> Session:
        s = self.SessionLocal()
        try:
            yield s
            s.commit()
        except SQLAlchemyError as e:
            s.rollback()
            logger.error("Database error: %s", e)
            raise PersistenceError("Database operation failed") from e
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    # ------------------------------------------------------------------ #
    # Catalog
    # ------------------------------------------------------------------ #
    def fetch_catalog_item(self, item_id: str) -> Optional[CatalogItem]:
        with self._session() as s:
            stmt = select(Music).where(Music.id == item_id)
            m = s.execute(stmt).scalar_one_or_none()
            if m is None:
                return None
            return CatalogItem(
                id=str(m.id),
                title=str(m.titulo or ""),
                price=None if m.preco is None else float(m.preco),
            )

    # ------------------------------------------------------------------ #
    # Purchases
    # ------------------------------------------------------------------ #
    def update_purchase(self, purchase_id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._session() as s:
            stmt = select(Purchase).where(Purchase.id == purchase_id)
            p = s.execute(stmt).scalar_one_or_none()
            if p is None:
                return None
            for key, value in patch.items():
                if key in _PATCHABLE_COLUMNS:
                    setattr(p, key, value)
            s.flush()
            s.refresh(p)
            return p.to_dict()
